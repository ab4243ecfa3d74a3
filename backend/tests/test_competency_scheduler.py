"""
Tests for the competency scheduler: states, levels, filters, scoring and
slate selection.
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import logging
import random

import pytest

from numberpath.core.config import Settings
from numberpath.models.progression import CompetencyProgressStatus, LearningProgression
from numberpath.services import competency_scheduler
from numberpath.services.competency_scheduler import (
    calculate_overall_level,
    competency_state,
    filter_by_range,
    is_competency_mastered,
    level_difficulty_params,
    score_competency,
    select_competencies,
    unlocked_competencies,
)
from numberpath.skills.catalog import COMPETENCIES_BY_ID, COMPETENCY_CATALOG


def _progress(**overrides) -> CompetencyProgressStatus:
    defaults = dict(level=3.0, attempted=6, correct=4, success_rate=4 / 6)
    defaults.update(overrides)
    return CompetencyProgressStatus(**defaults)


def _mastered() -> CompetencyProgressStatus:
    return _progress(attempted=12, correct=12, success_rate=1.0, level=7.0,
                     tasks_mastered=[f"{i}+1" for i in range(1, 6)])


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------

class TestStates:
    def test_new(self):
        assert competency_state(None) == "new"
        assert competency_state(CompetencyProgressStatus()) == "new"

    def test_error_preempts_mastery(self):
        p = _mastered()
        p.recent_errors = ["3+4"]
        assert competency_state(p) == "error"

    def test_mastered_by_tasks(self):
        assert is_competency_mastered(_mastered())
        assert competency_state(_mastered()) == "mastered"

    def test_mastered_by_numbers(self):
        p = _progress(attempted=12, correct=10, success_rate=10 / 12)
        assert is_competency_mastered(p)

    def test_high_rate_but_too_few_correct(self):
        p = _progress(attempted=9, correct=9, success_rate=1.0)
        assert not is_competency_mastered(p)
        assert competency_state(p) == "in_progress"


class TestOverallLevel:
    def test_empty(self):
        assert calculate_overall_level(LearningProgression()) == 0.0

    def test_mean_of_all_when_none_strong(self):
        lp = LearningProgression(competency_progress={
            "a": _progress(level=2.0), "b": _progress(level=4.0),
        })
        assert calculate_overall_level(lp) == 3.0

    def test_top_five_strong_only(self):
        levels = [7.0, 7.0, 6.0, 6.0, 5.0, 5.0, 1.0]
        lp = LearningProgression(competency_progress={
            f"c{i}": _progress(level=lv) for i, lv in enumerate(levels)
        })
        assert calculate_overall_level(lp) == pytest.approx((7 + 7 + 6 + 6 + 5) / 5)


# ---------------------------------------------------------------------------
# Level bands and filters
# ---------------------------------------------------------------------------

class TestDifficultyParams:
    @pytest.mark.parametrize("level,expected_range,transition", [
        (1, 10, False), (10, 10, False), (12, 20, False), (20, 20, True),
        (40, 50, True), (60, 100, True), (90, 100, True),
    ])
    def test_bands(self, level, expected_range, transition):
        p = level_difficulty_params(level)
        assert p.number_range == expected_range
        assert p.allow_transition is transition

    def test_multiplier_capped(self):
        assert level_difficulty_params(100).multiplier <= 5.0
        assert level_difficulty_params(1).multiplier == pytest.approx(1.05)


class TestFilters:
    def test_unlock_rule(self):
        ids = {c.id for c in unlocked_competencies(1)}
        assert "addition_ZR10_no_transition" in ids
        assert "addition_to_10" not in ids  # min_level 0.5 needs level 10

    def test_range_10_only_range_10(self):
        kept = filter_by_range(list(COMPETENCY_CATALOG), 10)
        assert kept and all(c.number_range == 10 for c in kept)

    def test_range_20_drops_small_and_large_basic(self):
        kept = {c.id for c in filter_by_range(list(COMPETENCY_CATALOG), 20)}
        assert "addition_ZR10_no_transition" not in kept
        assert "addition_ZR100_no_transition" not in kept
        assert "addition_ZR20_no_transition" in kept
        assert "doubles" in kept

    def test_range_100_keeps_placeholders(self):
        kept = {c.id for c in filter_by_range(list(COMPETENCY_CATALOG), 100)}
        assert {"placeholder_start", "placeholder_middle", "placeholder_end"} <= kept
        assert "addition_ZR20_no_transition" not in kept
        assert "doubles" not in kept
        assert "complement_to_20" in kept


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

class TestScoring:
    def test_priority_order(self):
        c = COMPETENCIES_BY_ID["addition_ZR20_no_transition"]
        error = score_competency(c, _progress(recent_errors=["3+4"]))
        in_progress = score_competency(c, _progress())
        new = score_competency(c, None)
        mastered = score_competency(c, _mastered())
        assert error.score > in_progress.score > new.score > mastered.score

    def test_error_score_grows_with_queue(self):
        c = COMPETENCIES_BY_ID["addition_ZR20_no_transition"]
        one = score_competency(c, _progress(recent_errors=["3+4"]))
        three = score_competency(c, _progress(recent_errors=["3+4", "5+6", "7+8"]))
        assert three.score - one.score == 100

    def test_placeholder_boost_and_bucket(self):
        c = COMPETENCIES_BY_ID["placeholder_middle"]
        scored = score_competency(c, None)
        assert scored.score == 350
        assert scored.bucket == "placeholder"

    def test_inverted_scores_rejected(self):
        with pytest.raises(ValueError):
            Settings(score_new_base=2000)


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

class TestSelectCompetencies:
    def test_new_learner_slate(self):
        slate = select_competencies(LearningProgression(), 1, random.Random(1))
        ids = {c.id for c in slate}
        assert ids == {"addition_ZR10_no_transition", "subtraction_ZR10_no_transition"}

    def test_never_empty(self):
        for level in (1, 10, 20, 40, 60, 80, 100):
            assert select_competencies(LearningProgression(), level, random.Random(level))

    def test_capped_at_slate_size(self):
        slate = select_competencies(LearningProgression(), 60, random.Random(2))
        assert 1 <= len(slate) <= 10

    def test_errors_always_included(self):
        lp = LearningProgression(competency_progress={
            "complement_to_20": _progress(recent_errors=["15+5"]),
        })
        slate = select_competencies(lp, 30, random.Random(3))
        assert "complement_to_20" in {c.id for c in slate}

    def test_placeholders_in_slate_when_unlocked(self):
        slate = select_competencies(LearningProgression(), 30, random.Random(4))
        ids = {c.id for c in slate}
        assert {"placeholder_start", "placeholder_middle", "placeholder_end"} <= ids

    def test_fully_mastered_learner_still_gets_slate(self):
        lp = LearningProgression(competency_progress={
            c.id: _mastered() for c in COMPETENCY_CATALOG
        })
        slate = select_competencies(lp, 60, random.Random(5))
        assert slate


class TestFallbackSlate:
    def test_nothing_unlocked_uses_catalog(self, caplog):
        with caplog.at_level(logging.WARNING):
            slate = select_competencies(LearningProgression(), -20, random.Random(6))
        assert slate == list(COMPETENCY_CATALOG[:6])
        levels = [r.levelno for r in caplog.records if r.name == "numberpath.services.competency_scheduler"]
        assert levels == [logging.WARNING, logging.CRITICAL]

    def test_unlocked_but_out_of_range(self, monkeypatch, caplog):
        monkeypatch.setattr(competency_scheduler, "filter_by_range", lambda competencies, session_range: [])
        with caplog.at_level(logging.WARNING):
            slate = select_competencies(LearningProgression(), 30, random.Random(7))
        assert slate == unlocked_competencies(30)[:3]
        levels = [r.levelno for r in caplog.records if r.name == "numberpath.services.competency_scheduler"]
        assert levels == [logging.WARNING, logging.ERROR]

    def test_zero_slate_size_still_returns_one(self):
        slate = select_competencies(LearningProgression(), 1, random.Random(8), Settings(slate_size=0))
        assert len(slate) == 1
