"""
Progress tracker: folds one answered task into a learner's progression.

Two layers are updated on every answer:

  Per task (keyed by canonical task string)
    net score +1 on a correct answer, minus the wrong-answer penalty on a
    wrong one (floored at 0). The task is mastered once the score reaches the
    mastery threshold, and un-mastered again if it drops below.

  Per competency (every competency the task exercises)
    attempted / correct / success rate, the set of mastered task strings,
    the bounded review queue of wrong task strings and a 0-7 level.

Updates are functional: the incoming progression is never mutated.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from numberpath.core.config import Settings, get_settings
from numberpath.models.progression import (
    CompetencyProgressStatus,
    LearningProgression,
    ProgressionUpdate,
    RECENT_PERFORMANCE_WINDOW,
    TaskMasteryStatus,
)
from numberpath.models.task import Task
from numberpath.skills.catalog import COMPETENCIES_BY_ID
from numberpath.utils.answer_computer import compute
from numberpath.utils.task_strings import task_string
from numberpath.utils.task_structure import crosses_boundary, value_digits

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Competency identification
# ---------------------------------------------------------------------------

def _range_competencies(task: Task) -> list[str]:
    op = task.operation
    n1, n2 = task.number1, task.number2
    result = compute(op, n1, n2)
    word = "addition" if op == "+" else "subtraction"
    r = task.number_range

    if r == 10:
        if op == "+" and result == 10:
            return ["addition_to_10", "number_bonds_10"]
        if op == "-" and n1 == 10:
            return ["subtraction_from_10", "number_bonds_10"]
        return [f"{word}_ZR10_no_transition"]

    if r == 20:
        if op == "+" and result == 20:
            return ["complement_to_20"]
        if crosses_boundary(op, n1, n2, r):
            return [f"{word}_with_transition"]
        return [f"{word}_ZR20_no_transition"]

    if r in (30, 40, 50, 80, 200, 500):
        if op == "+" and result == r:
            return [f"complement_to_{r}"]
        return [f"{word}_ZR{r}_no_transition"]

    if r in (100, 1000):
        if op == "+" and result == r:
            return [f"complement_to_{r}"]
        suffix = "with_transition" if crosses_boundary(op, n1, n2, r) else "no_transition"
        return [f"{word}_ZR{r}_{suffix}"]

    return []


def identify_competencies(task: Task) -> list[str]:
    """All catalog competencies a task exercises, in a stable order."""
    found: list[str] = []

    position = task.placeholder_position if task.placeholder_position in ("start", "middle") else "end"
    found.append(f"placeholder_{position}")

    found.extend(_range_competencies(task))

    if task.operation == "+":
        if task.number1 == task.number2:
            found.append("doubles")
        elif abs(task.number1 - task.number2) == 1:
            found.append("near_doubles")

    if task.task_type == "inverse_relationship":
        found.append("inverse_operations")

    if task.competency_id and task.competency_id not in found:
        found.append(task.competency_id)

    out = []
    for cid in found:
        if cid in COMPETENCIES_BY_ID and cid not in out:
            out.append(cid)
    return out


# ---------------------------------------------------------------------------
# Levels
# ---------------------------------------------------------------------------

def competency_level(success_rate: float, mastered_count: int) -> float:
    m, sr = mastered_count, success_rate
    if m >= 5 or (m >= 3 and sr >= 0.80):
        return 7.0
    if m >= 4 or (m >= 2 and sr >= 0.75):
        return 6.0
    if m >= 3 or (m >= 2 and sr >= 0.70):
        return 5.0
    if m >= 2 or (m >= 1 and sr >= 0.65):
        return 4.0
    if m >= 1 or sr >= 0.60:
        return 3.0
    if sr >= 0.50:
        return 2.0
    if sr >= 0.30:
        return 1.0
    return 0.0


def task_difficulty(task: Task) -> float:
    """Rough 0-1 difficulty used for ordering and reporting."""
    digits = value_digits(task.number1) + value_digits(task.number2)
    if digits <= 2:
        score = 0.15
    elif digits == 3:
        score = 0.30
    else:
        score = 0.45

    largest = max(task.number1, task.number2)
    if largest <= 10:
        score += 0.10
    elif largest <= 20:
        score += 0.15
    elif largest <= 100:
        score += 0.25
    else:
        score += 0.35

    score += 0.10 if task.operation == "+" else 0.15
    if task.placeholder_position in ("start", "middle"):
        score += 0.10
    if crosses_boundary(task.operation, task.number1, task.number2, task.number_range):
        score += 0.15
    return round(min(1.0, score), 2)


# ---------------------------------------------------------------------------
# Updates
# ---------------------------------------------------------------------------

def update_task_mastery(
    current: Optional[TaskMasteryStatus],
    is_correct: bool,
    now: datetime,
    settings: Optional[Settings] = None,
) -> TaskMasteryStatus:
    settings = settings or get_settings()
    current = current or TaskMasteryStatus()
    if is_correct:
        score = current.correct + 1
    else:
        score = max(0, current.correct - settings.task_wrong_penalty)
    return TaskMasteryStatus(
        attempts=current.attempts + 1,
        correct=score,
        last_attempt=now,
        mastered=score >= settings.task_mastery_threshold,
    )


def update_competency_progress(
    current: Optional[CompetencyProgressStatus],
    key: str,
    is_correct: bool,
    task_mastered: bool,
    now: datetime,
    settings: Optional[Settings] = None,
) -> CompetencyProgressStatus:
    settings = settings or get_settings()
    current = current or CompetencyProgressStatus()

    attempted = current.attempted + 1
    correct = current.correct + (1 if is_correct else 0)
    success_rate = correct / attempted

    recent_errors = list(current.recent_errors)
    if is_correct:
        recent_errors = [s for s in recent_errors if s != key]
    elif key not in recent_errors:
        recent_errors.insert(0, key)
        recent_errors = recent_errors[: settings.recent_errors_cap]

    tasks_mastered = list(current.tasks_mastered)
    if task_mastered and key not in tasks_mastered:
        tasks_mastered.append(key)
    elif not task_mastered and key in tasks_mastered:
        tasks_mastered.remove(key)

    return CompetencyProgressStatus(
        level=competency_level(success_rate, len(tasks_mastered)),
        attempted=attempted,
        correct=correct,
        success_rate=success_rate,
        last_practiced=now,
        tasks_mastered=tasks_mastered,
        recent_errors=recent_errors,
    )


def next_session_level(
    current_level: Optional[int],
    streak: int,
    history: list[bool],
    settings: Optional[Settings] = None,
) -> int:
    """
    Move the stored session level at most one step after an answer.

    ``streak`` is the correct-answer streak including this answer and
    ``history`` the recent correctness flags ending with it. The level goes up
    after every ``level_up_streak`` correct answers in a row when the last ten
    answers are at least ``level_up_rate`` correct, and down once when a run of
    errors reaches ``level_down_errors``. Clamped to 1..100.
    """
    settings = settings or get_settings()
    level = current_level or 1
    if not history:
        return level

    recent = history[-10:]
    rate = sum(1 for ok in recent if ok) / len(recent)
    if history[-1]:
        if streak > 0 and streak % settings.level_up_streak == 0 and rate >= settings.level_up_rate:
            level += settings.level_step
    else:
        errors = 0
        for ok in reversed(history):
            if ok:
                break
            errors += 1
        if errors == settings.level_down_errors:
            level -= settings.level_step
    return max(1, min(100, level))


def record_result(
    progression: LearningProgression,
    task: Task,
    student_answer,
    is_correct: bool,
    clock: Optional[Clock] = None,
    settings: Optional[Settings] = None,
) -> ProgressionUpdate:
    settings = settings or get_settings()
    now = (clock or _utcnow)()
    key = task_string(task)

    task_mastery = dict(progression.task_mastery)
    status = update_task_mastery(task_mastery.get(key), is_correct, now, settings)
    task_mastery[key] = status

    competencies = identify_competencies(task)
    competency_progress = dict(progression.competency_progress)
    for cid in competencies:
        competency_progress[cid] = update_competency_progress(
            competency_progress.get(cid), key, is_correct, status.mastered, now, settings,
        )

    if not is_correct:
        logger.info(
            "[progress_tracker.record_result] %s answered %r (expected %d), competencies=%s",
            key, student_answer, task.correct_answer, competencies,
        )

    streak = progression.current_streak + 1 if is_correct else 0
    recent_performance = (progression.recent_performance + [bool(is_correct)])[-RECENT_PERFORMANCE_WINDOW:]
    level = next_session_level(progression.current_level, streak, recent_performance, settings)
    if level != (progression.current_level or 1):
        logger.info(
            "[progress_tracker.record_result] session level %s -> %d",
            progression.current_level, level,
        )

    return ProgressionUpdate(
        task_string=key,
        competencies=competencies,
        task_mastery=task_mastery,
        competency_progress=competency_progress,
        current_streak=streak,
        total_tasks_solved=progression.total_tasks_solved + 1,
        total_correct=progression.total_correct + (1 if is_correct else 0),
        recent_performance=recent_performance,
        current_level=level,
    )


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

def competency_summary(progression: LearningProgression) -> dict:
    progress = progression.competency_progress
    mastered = sorted(cid for cid, p in progress.items() if p.level >= 4)
    weak = sorted(
        ((cid, p) for cid, p in progress.items() if p.level < 2),
        key=lambda item: (item[1].level, item[1].success_rate, item[0]),
    )
    return {
        "total": len(COMPETENCIES_BY_ID),
        "practiced": len(progress),
        "mastered": mastered,
        "weak": [cid for cid, _ in weak[:5]],
    }
