"""
Competency scheduler: decides which competencies the next batch practises.

Each competency is in exactly one state for a learner:

  error        recent_errors is non-empty (pre-empts everything else)
  mastered     enough distinct mastered tasks, or enough correct at a high rate
  in_progress  attempted but neither of the above
  new          never attempted

Selection for a session level:
  1. unlock filter   min_level <= level / 20
  2. range filter    family rules per session number range
  3. score           error > in_progress > new > mastered (+ placeholder boost)
  4. slate           quota per bucket, add/sub balanced, capped at slate_size
  5. fallback        unlocked, then catalog, when the range filter leaves nothing
"""
from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Literal, Optional

from numberpath.core.config import Settings, get_settings
from numberpath.models.competency import CompetencyDefinition
from numberpath.models.progression import CompetencyProgressStatus, LearningProgression
from numberpath.skills.catalog import COMPETENCY_CATALOG

logger = logging.getLogger(__name__)

CompetencyState = Literal["error", "mastered", "in_progress", "new"]
Bucket = Literal["error", "placeholder", "in_progress", "new", "mastered"]

_PLACEHOLDER_QUOTA = 3
_IN_PROGRESS_QUOTA = 5
_NEW_QUOTA = 4


# ---------------------------------------------------------------------------
# State classification
# ---------------------------------------------------------------------------

def is_competency_mastered(
    progress: Optional[CompetencyProgressStatus],
    settings: Optional[Settings] = None,
) -> bool:
    if progress is None:
        return False
    settings = settings or get_settings()
    if len(progress.tasks_mastered) >= settings.competency_mastered_tasks:
        return True
    return (
        progress.correct >= settings.competency_mastered_correct
        and progress.success_rate >= settings.competency_mastered_rate
    )


def competency_state(
    progress: Optional[CompetencyProgressStatus],
    settings: Optional[Settings] = None,
) -> CompetencyState:
    if progress is None or progress.attempted == 0:
        return "new"
    if progress.recent_errors:
        return "error"
    if is_competency_mastered(progress, settings):
        return "mastered"
    return "in_progress"


def calculate_overall_level(progression: LearningProgression) -> float:
    levels = [p.level for p in progression.competency_progress.values()]
    if not levels:
        return 0.0
    strong = sorted((lv for lv in levels if lv >= 5.0), reverse=True)[:5]
    if strong:
        return sum(strong) / len(strong)
    return sum(levels) / len(levels)


# ---------------------------------------------------------------------------
# Level → difficulty band
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DifficultyParams:
    number_range: int
    min_value: int
    max_value: int
    allow_transition: bool
    multiplier: float


def level_difficulty_params(level: float) -> DifficultyParams:
    if level <= 10:
        params = DifficultyParams(10, 1, 10, False, 1 + level / 10 * 0.5)
    elif level <= 25:
        params = DifficultyParams(20, 5, 20, level > 15, 1.5 + (level - 10) / 15 * 0.5)
    elif level <= 50:
        params = DifficultyParams(50, 10, 50, True, 2 + (level - 25) / 25)
    elif level <= 75:
        params = DifficultyParams(100, 20, 100, True, 3 + (level - 50) / 25 * 1.5)
    else:
        params = DifficultyParams(100, 30, 100, True, 4.5 + (level - 75) / 25)
    if params.multiplier > 5:
        params = DifficultyParams(
            params.number_range, params.min_value, params.max_value, params.allow_transition, 5.0,
        )
    return params


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------

def unlocked_competencies(level: float) -> list[CompetencyDefinition]:
    return [c for c in COMPETENCY_CATALOG if c.min_level <= level / 20]


def fits_session_range(c: CompetencyDefinition, session_range: int) -> bool:
    if session_range <= 10:
        return c.number_range == 10
    if session_range <= 50:
        return not (c.family == "basic" and (c.number_range == 10 or c.number_range >= 100))
    if c.family == "placeholder":
        return True
    return not (c.family in ("basic", "strategy") and c.number_range <= 20)


def filter_by_range(competencies: list[CompetencyDefinition], session_range: int) -> list[CompetencyDefinition]:
    return [c for c in competencies if fits_session_range(c, session_range)]


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

@dataclass
class ScoredCompetency:
    competency: CompetencyDefinition
    score: float
    bucket: Bucket
    state: CompetencyState


def score_competency(
    c: CompetencyDefinition,
    progress: Optional[CompetencyProgressStatus],
    settings: Optional[Settings] = None,
) -> ScoredCompetency:
    settings = settings or get_settings()
    state = competency_state(progress, settings)

    if state == "mastered":
        score = float(settings.score_mastered_base)
    elif state == "error":
        score = float(settings.score_error_base + settings.score_error_per_item * len(progress.recent_errors))
    elif state == "in_progress":
        score = float(settings.score_in_progress_base)
        if progress.success_rate < 0.7:
            score += (0.7 - progress.success_rate) * 100
        score += max(0, 10 - len(progress.tasks_mastered)) * 10
    else:
        score = float(settings.score_new_base)

    bucket: Bucket = state
    if c.family == "placeholder" and state != "mastered":
        score += settings.score_placeholder_boost
        if state != "error":
            bucket = "placeholder"
    return ScoredCompetency(competency=c, score=score, bucket=bucket, state=state)


# ---------------------------------------------------------------------------
# Slate assembly
# ---------------------------------------------------------------------------

def _balanced(items: list[ScoredCompetency], n: int, rng: random.Random) -> list[ScoredCompetency]:
    """One mixed-operation skill, then ceil(n/2) addition and floor(n/2) subtraction."""
    if n <= 0 or not items:
        return []
    mixed = [s for s in items if s.competency.is_mixed]
    adds = [s for s in items if s.competency.operations == ("+",)]
    subs = [s for s in items if s.competency.operations == ("-",)]

    picked: list[ScoredCompetency] = mixed[:1]
    rest = n - len(picked)
    picked += adds[: math.ceil(rest / 2)]
    picked += subs[: rest // 2]

    if len(picked) < n:
        for s in items:
            if len(picked) >= n:
                break
            if s not in picked:
                picked.append(s)

    picked = picked[:n]
    rng.shuffle(picked)
    return picked


def _fallback_slate(
    available: list[CompetencyDefinition],
    level: float,
    session_range: int,
) -> list[CompetencyDefinition]:
    """
    Slate for a level whose range filter left nothing to score.

    Any non-empty filtered list always yields a slate, so only two tiers can
    apply here: the first unlocked competencies (ERROR), then the start of the
    catalog (CRITICAL, nothing is unlocked at this level).
    """
    logger.warning(
        "[competency_scheduler.select_competencies] no competency fits range %d at level %.1f",
        session_range, level,
    )
    if available:
        logger.error(
            "[competency_scheduler.select_competencies] fallback tier 'available' -> %d",
            min(3, len(available)),
        )
        return available[:3]
    logger.critical(
        "[competency_scheduler.select_competencies] fallback tier 'catalog': nothing unlocked at level %.1f",
        level,
    )
    return list(COMPETENCY_CATALOG[:6])


def select_competencies(
    progression: LearningProgression,
    level: float,
    rng: Optional[random.Random] = None,
    settings: Optional[Settings] = None,
) -> list[CompetencyDefinition]:
    """Return a non-empty slate of at most ``slate_size`` competencies."""
    rng = rng or random.Random()
    settings = settings or get_settings()
    params = level_difficulty_params(level)

    available = unlocked_competencies(level)
    filtered = filter_by_range(available, params.number_range)
    if not filtered:
        return _fallback_slate(available, level, params.number_range)

    scored = sorted(
        (score_competency(c, progression.competency_progress.get(c.id), settings) for c in filtered),
        key=lambda s: s.score,
        reverse=True,
    )

    cap = settings.slate_size
    slate: list[ScoredCompetency] = []

    slate += [s for s in scored if s.bucket == "error"][:cap]

    placeholders = [s for s in scored if s.bucket == "placeholder"]
    rng.shuffle(placeholders)
    slate += placeholders[: min(_PLACEHOLDER_QUOTA, cap - len(slate))]

    for bucket, quota in (("in_progress", _IN_PROGRESS_QUOTA), ("new", _NEW_QUOTA)):
        items = [s for s in scored if s.bucket == bucket]
        slate += _balanced(items, min(quota, cap - len(slate), len(items)), rng)

    mastered = [s for s in scored if s.bucket == "mastered"]
    slate += _balanced(mastered, min(cap - len(slate), len(mastered)), rng)

    if not slate:
        slate = scored[:1]  # slate_size below 1
    return [s.competency for s in slate]
