"""
Tests for the per-skill generators (SkillContract implementations).

Every competency is sampled many times with a seeded RNG and checked for
arithmetic soundness, non-negativity and its family's shape rules.
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import random

import pytest

from numberpath.skills.catalog import COMPETENCIES_BY_ID, COMPETENCY_CATALOG
from numberpath.skills.registry import SKILL_REGISTRY
from numberpath.utils.answer_computer import compute
from numberpath.utils.task_structure import crosses_boundary

SAMPLES = 40


def _samples(competency_id, seed=11):
    rng = random.Random(seed)
    contract = SKILL_REGISTRY[competency_id]
    out = [contract.generate(rng) for _ in range(SAMPLES)]
    assert all(t is not None for t in out), competency_id
    return out


class TestRegistry:
    def test_every_competency_has_a_generator(self):
        assert set(SKILL_REGISTRY) == set(COMPETENCIES_BY_ID)

    def test_catalog_ids_unique(self):
        ids = [c.id for c in COMPETENCY_CATALOG]
        assert len(ids) == len(set(ids))

    def test_catalog_min_levels_in_scale(self):
        assert all(0 <= c.min_level <= 7 for c in COMPETENCY_CATALOG)


@pytest.mark.parametrize("competency_id", sorted(COMPETENCIES_BY_ID))
def test_arithmetic_soundness_and_non_negativity(competency_id):
    competency = COMPETENCIES_BY_ID[competency_id]
    for t in _samples(competency_id):
        result = compute(t.operation, t.number1, t.number2)
        if t.placeholder_position == "start":
            assert t.correct_answer == t.number1
        elif t.placeholder_position == "middle":
            assert t.correct_answer == t.number2
        else:
            assert t.correct_answer == result
        assert t.number1 >= 0 and t.number2 >= 0 and result >= 0
        assert max(t.number1, t.number2, result) <= competency.number_range
        assert t.operation in competency.operations
        assert t.competency_id == competency_id


class TestBasicRange:
    def test_no_transition_keeps_boundary_digit(self):
        for cid in ("addition_ZR20_no_transition", "subtraction_ZR100_no_transition",
                    "addition_ZR1000_no_transition"):
            r = COMPETENCIES_BY_ID[cid].number_range
            for t in _samples(cid):
                assert not crosses_boundary(t.operation, t.number1, t.number2, r), (cid, t)

    def test_with_transition_crosses(self):
        for cid in ("addition_with_transition", "subtraction_with_transition",
                    "addition_ZR100_with_transition", "subtraction_ZR1000_with_transition"):
            r = COMPETENCIES_BY_ID[cid].number_range
            for t in _samples(cid):
                assert crosses_boundary(t.operation, t.number1, t.number2, r), (cid, t)

    def test_to_ten_and_from_ten(self):
        assert all(t.number1 + t.number2 == 10 for t in _samples("addition_to_10"))
        assert all(t.number1 == 10 for t in _samples("subtraction_from_10"))

    def test_fallback_variants_are_valid(self):
        for cid, contract in SKILL_REGISTRY.items():
            candidate = contract.fallback_variant()
            assert contract.validate(candidate) == [], cid


class TestComplements:
    def test_complement_to_20_window(self):
        for t in _samples("complement_to_20"):
            assert t.number1 + t.number2 == 20
            assert 11 <= t.number1 <= 19

    def test_complement_to_1000_window(self):
        for t in _samples("complement_to_1000"):
            assert t.number1 + t.number2 == 1000
            assert t.number1 >= 850


class TestPureMultiples:
    def test_decades(self):
        for t in _samples("pure_decades_subtraction"):
            assert t.number1 % 10 == 0 and t.number2 % 10 == 0
            assert t.number1 - t.number2 > 0

    def test_hundreds(self):
        for t in _samples("pure_hundreds_addition"):
            assert t.number1 % 100 == 0 and t.number2 % 100 == 0
            assert t.number1 + t.number2 <= 1000


class TestPlaceholders:
    @pytest.mark.parametrize("position", ["start", "middle", "end"])
    def test_position_and_inverse_flag(self, position):
        for t in _samples(f"placeholder_{position}"):
            assert t.placeholder_position == position
            assert t.requires_inverse_thinking == (position != "end")
            assert t.task_type == "placeholder"

    def test_both_operations_appear(self):
        ops = {t.operation for t in _samples("placeholder_middle")}
        assert ops == {"+", "-"}

    def test_middle_stores_hidden_operand(self, monkeypatch):
        # 8 + _ = 13
        contract = SKILL_REGISTRY["placeholder_middle"]
        monkeypatch.setattr(contract, "build_variant", lambda rng, directive=None: {
            "operation": "+", "number1": 8, "number2": 5, "result": 13,
            "placeholder_position": "middle",
        })
        t = contract.generate(random.Random(0))
        assert (t.number1, t.number2, t.correct_answer) == (8, 5, 5)
        assert t.displayed_result == 13

    def test_directive_forces_operation(self):
        rng = random.Random(3)
        contract = SKILL_REGISTRY["placeholder_start"]
        tasks = [contract.generate(rng, directive={"operation": "-"}) for _ in range(10)]
        assert {t.operation for t in tasks} == {"-"}


class TestStrategies:
    def test_doubles(self):
        assert all(t.number1 == t.number2 for t in _samples("doubles"))

    def test_near_doubles(self):
        assert all(abs(t.number1 - t.number2) == 1 for t in _samples("near_doubles"))

    def test_number_bonds(self):
        assert all(t.number1 + t.number2 == 10 for t in _samples("number_bonds_10"))

    def test_inverse_task_type(self):
        for t in _samples("inverse_operations"):
            assert t.task_type == "inverse_relationship"
            assert t.requires_inverse_thinking


class TestFailClosed:
    def test_wrong_claimed_result_drops_candidate(self, monkeypatch):
        contract = SKILL_REGISTRY["complement_to_20"]

        def lying_variant(rng, directive=None):
            return {"operation": "+", "number1": 15, "number2": 5, "result": 21,
                    "placeholder_position": "end"}

        monkeypatch.setattr(contract, "build_variant", lying_variant)
        assert contract.generate(random.Random(1)) is None


class TestExplainAndGrade:
    def test_explain_has_final_answer(self):
        contract = SKILL_REGISTRY["placeholder_middle"]
        t = contract.generate(random.Random(5))
        out = contract.explain(t)
        assert out["final_answer"] == str(t.correct_answer)
        assert out["steps"]

    def test_grade_wrong_answer_carries_error_type(self):
        contract = SKILL_REGISTRY["doubles"]
        t = contract.generate(random.Random(2))
        graded = contract.grade(t, t.correct_answer + 1)
        assert graded["is_correct"] is False
        assert graded["error_type"] == "doubling_error"

    def test_grade_correct(self):
        contract = SKILL_REGISTRY["addition_ZR20_no_transition"]
        t = contract.generate(random.Random(2))
        graded = contract.grade(t, str(t.correct_answer))
        assert graded["is_correct"] is True
        assert graded["error_type"] is None
        assert not any(graded["place_errors"].values())
