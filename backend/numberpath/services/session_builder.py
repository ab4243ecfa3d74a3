"""
Session Task Builder: assembles one practice batch for a learner.

Pipeline (one call to ``generate_session_batch``):

  STEP A: Error repetition
    Up to floor(count * error_repetition_ratio) tasks rebuilt from the
    learner's review queues (unique strings, individually mastered ones
    skipped), each passed through the task validator and the verifier.

  STEP B: Competency slate
    The scheduler picks a non-empty slate for the session level.

  STEP C: Fill
    Remaining slots draw a competency uniformly from the slate, generate a
    task, skip task strings the learner has already mastered and avoid
    repeating the previous task. A safe task in the level's number window
    stands in whenever a skill cannot produce.

  STEP D: Shuffle and correct
    Shuffle, force the exact batch size, then repair any two identical
    tasks sitting next to each other (including the caller's last task).
"""
from __future__ import annotations

import logging
import math
import random
from typing import Optional

from numberpath.core.config import Settings, get_settings
from numberpath.models.progression import LearningProgression
from numberpath.models.task import Task, TaskSignature
from numberpath.services.competency_scheduler import (
    DifficultyParams,
    level_difficulty_params,
    select_competencies,
)
from numberpath.services.task_dedup import generate_unique, signatures_identical, task_signature
from numberpath.services.task_validator import ensure_valid_task
from numberpath.skills.catalog import get_competency
from numberpath.skills.registry import SKILL_REGISTRY
from numberpath.utils.answer_computer import ensure_correct, hidden_value
from numberpath.utils.task_strings import parse_task_string, task_string

logger = logging.getLogger(__name__)


def resolve_session_level(progression: LearningProgression, current_level: Optional[float] = None) -> float:
    if current_level is not None:
        return float(current_level)
    if progression.current_level is not None:
        return float(progression.current_level)
    return 1.0


def _task_from_mapping(mapping: dict, task_type: str, number_range: int, competency_id: Optional[str]) -> Task:
    fixed = ensure_valid_task(mapping)
    op, n1, n2 = fixed["operation"], fixed["number1"], fixed["number2"]
    position = fixed.get("placeholder_position") or "end"
    ensure_correct(op, n1, n2, fixed.get("result"))  # only logs when a claimed result is wrong
    return Task(
        task_type=task_type,
        operation=op,
        number1=n1,
        number2=n2,
        correct_answer=hidden_value(op, n1, n2, position),
        number_range=number_range,
        placeholder_position=position,
        competency_id=competency_id,
        requires_inverse_thinking=position in ("start", "middle"),
    )


class SessionTaskBuilder:
    def __init__(
        self,
        rng: Optional[random.Random] = None,
        settings: Optional[Settings] = None,
        registry: Optional[dict] = None,
    ):
        self.rng = rng or random.Random()
        self.settings = settings or get_settings()
        self.registry = registry if registry is not None else SKILL_REGISTRY

    # ── STEP A ────────────────────────────────────────────────────────────

    def error_repetition_tasks(self, progression: LearningProgression, count: int) -> list[Task]:
        limit = math.floor(count * self.settings.error_repetition_ratio)
        if limit <= 0:
            return []

        seen: dict[str, str] = {}
        for cid, progress in progression.competency_progress.items():
            for key in progress.recent_errors:
                if key in seen:
                    continue
                status = progression.task_mastery.get(key)
                if status is not None and status.mastered:
                    continue
                seen[key] = cid

        keys = list(seen)
        self.rng.shuffle(keys)

        tasks = []
        for key in keys[:limit]:
            parsed = parse_task_string(key)
            if parsed is None:
                logger.warning("[session_builder.error_repetition_tasks] unparseable task string %r", key)
                continue
            competency = get_competency(seen[key])
            number_range = competency.number_range if competency else 20
            tasks.append(_task_from_mapping(parsed, "error_repetition", number_range, seen[key]))
        return tasks

    # ── STEP C ────────────────────────────────────────────────────────────

    def fallback_task(self, params: DifficultyParams) -> Task:
        """A plain task inside the level's number window."""
        hi = max(3, params.max_value)
        lo = max(2, min(params.min_value, hi - 1))
        op = self.rng.choice(("+", "-"))
        if op == "+":
            n1 = self.rng.randint(1, hi - 1)
            n2 = self.rng.randint(1, hi - n1)
        else:
            n1 = self.rng.randint(lo, hi)
            n2 = self.rng.randint(1, n1 - 1)
        return _task_from_mapping(
            {"operation": op, "number1": n1, "number2": n2, "placeholder_position": "end"},
            "fallback",
            params.number_range,
            None,
        )

    def _generate_for(self, competency_id: str, params: DifficultyParams) -> Task:
        contract = self.registry.get(competency_id)
        if contract is None:
            logger.warning("[session_builder._generate_for] no generator for %s", competency_id)
            return self.fallback_task(params)
        task = contract.generate(self.rng, max_attempts=self.settings.generation_max_attempts)
        if task is None:
            logger.warning("[session_builder._generate_for] %s produced nothing, using fallback", competency_id)
            return self.fallback_task(params)
        return task

    def fill_slots(
        self,
        progression: LearningProgression,
        slate: list,
        params: DifficultyParams,
        slots: int,
        previous: Optional[TaskSignature] = None,
    ) -> list[Task]:
        tasks: list[Task] = []
        budget = slots * self.settings.batch_attempt_factor
        attempts = 0
        while len(tasks) < slots and attempts < budget:
            attempts += 1
            competency = self.rng.choice(slate)
            task = generate_unique(
                lambda: self._generate_for(competency.id, params),
                previous,
                max_attempts=self.settings.unique_max_attempts,
            )
            status = progression.task_mastery.get(task_string(task))
            if status is not None and status.mastered:
                continue
            tasks.append(task)
            previous = task_signature(task)

        if len(tasks) < slots:
            logger.warning(
                "[session_builder.fill_slots] attempt budget %d spent; padding %d slots with fallback tasks",
                budget, slots - len(tasks),
            )
        while len(tasks) < slots:
            task = generate_unique(lambda: self.fallback_task(params), previous)
            tasks.append(task)
            previous = task_signature(task)
        return tasks

    # ── STEP D ────────────────────────────────────────────────────────────

    def _fix_adjacent_duplicates(
        self,
        batch: list[Task],
        params: DifficultyParams,
        previous: Optional[TaskSignature],
    ) -> list[Task]:
        for i in range(len(batch)):
            before = task_signature(batch[i - 1]) if i > 0 else previous
            if not signatures_identical(task_signature(batch[i]), before):
                continue
            for j in range(i + 1, len(batch)):
                if not signatures_identical(task_signature(batch[j]), before):
                    batch[i], batch[j] = batch[j], batch[i]
                    break
            else:
                batch[i] = generate_unique(lambda: self.fallback_task(params), before)
        return batch

    def generate_session_batch(
        self,
        progression: LearningProgression,
        count: Optional[int] = None,
        current_level: Optional[float] = None,
        previous_signature: Optional[TaskSignature] = None,
    ) -> list[Task]:
        count = self.settings.session_size if count is None else count
        if count <= 0:
            return []

        level = resolve_session_level(progression, current_level)
        params = level_difficulty_params(level)

        # STEP A
        batch = self.error_repetition_tasks(progression, count)

        # STEP B
        slate = select_competencies(progression, level, self.rng, self.settings)
        logger.info(
            "[session_builder.generate_session_batch] level=%.1f range=%d slate=%s",
            level, params.number_range, [c.id for c in slate],
        )

        # STEP C
        batch += self.fill_slots(progression, slate, params, count - len(batch), previous_signature)

        # STEP D
        self.rng.shuffle(batch)
        if len(batch) != count:
            logger.warning(
                "[session_builder.generate_session_batch] batch size %d != %d, correcting",
                len(batch), count,
            )
            batch = batch[:count]
            while len(batch) < count:
                batch.append(self.fallback_task(level_difficulty_params(1)))
        return self._fix_adjacent_duplicates(batch, params, previous_signature)


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_BUILDER: Optional[SessionTaskBuilder] = None


def get_session_builder() -> SessionTaskBuilder:
    """Return the module-level singleton."""
    global _BUILDER
    if _BUILDER is None:
        _BUILDER = SessionTaskBuilder()
    return _BUILDER


def generate_session_batch(
    progression: LearningProgression,
    count: Optional[int] = None,
    current_level: Optional[float] = None,
    previous_signature: Optional[TaskSignature] = None,
) -> list[Task]:
    return get_session_builder().generate_session_batch(
        progression, count, current_level, previous_signature,
    )
