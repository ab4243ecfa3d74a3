"""Addition / subtraction within a number range, with or without crossing."""

from __future__ import annotations

import random

from .base import SkillContract
from numberpath.utils.answer_computer import compute
from numberpath.utils.task_structure import boundary_unit, crosses_boundary


class BasicRangeContract(SkillContract):
    """
    ``requires_transition`` False: the boundary digit (tens up to 100,
    hundreds above) of number1 and of the result agree.
    ``requires_transition`` True: they differ.
    Above range 20 the larger number (the sum, or the minuend) must sit above
    a quarter of the range so the task actually practises that range.
    """

    def _floor(self) -> int:
        return 0 if self.number_range <= 20 else self.number_range // 4

    def build_variant(self, rng: random.Random, directive: dict | None = None):
        op = self._pick_operation(rng, directive)
        r = self.number_range
        unit = boundary_unit(r)
        stay = not self.competency.requires_transition
        if op == "+":
            n1 = rng.randint(1, r - 1)
            room = unit - 1 - n1 % unit
            n2 = rng.randint(1, room) if stay and room >= 1 else rng.randint(1, r - n1)
        else:
            n1 = rng.randint(max(2, self._floor() + 1), r)
            room = n1 % unit
            n2 = rng.randint(1, room) if stay and room >= 1 else rng.randint(1, n1 - 1)
        return {
            "operation": op,
            "number1": n1,
            "number2": n2,
            "result": compute(op, n1, n2),
            "placeholder_position": "end",
        }

    def fallback_variant(self, directive: dict | None = None) -> dict:
        op = self.competency.operations[0]
        r = self.number_range
        unit = boundary_unit(r)
        base = r - unit
        if self.competency.requires_transition:
            if op == "+":
                n1, n2 = base - unit // 5, unit // 2
            else:
                n1, n2 = base + unit // 5, unit // 2
        elif op == "+":
            n1, n2 = base + unit // 5, unit // 10 + (2 if unit == 10 else 20)
        else:
            n1, n2 = base + unit // 2, unit // 5
        return {
            "operation": op,
            "number1": n1,
            "number2": n2,
            "result": compute(op, n1, n2),
            "placeholder_position": "end",
        }

    def validate(self, candidate: dict) -> list[str]:
        issues = super().validate(candidate)
        if issues:
            return issues
        op, n1, n2 = candidate["operation"], candidate["number1"], candidate["number2"]
        result = compute(op, n1, n2)
        larger = result if op == "+" else n1
        if larger <= self._floor():
            issues.append("too_small_for_range")
        crossing = crosses_boundary(op, n1, n2, self.number_range)
        if self.competency.requires_transition and not crossing:
            issues.append("missing_transition")
        if not self.competency.requires_transition and crossing:
            issues.append("unexpected_transition")
        return issues


class MakeTenContract(SkillContract):
    """``addition_to_10`` (sum is 10) and ``subtraction_from_10`` (minuend is 10)."""

    def build_variant(self, rng: random.Random, directive: dict | None = None):
        op = self.competency.operations[0]
        k = rng.randint(1, 9)
        n1, n2 = (k, 10 - k) if op == "+" else (10, k)
        return {
            "operation": op,
            "number1": n1,
            "number2": n2,
            "result": compute(op, n1, n2),
            "placeholder_position": "end",
        }

    def fallback_variant(self, directive: dict | None = None) -> dict:
        op = self.competency.operations[0]
        n1, n2 = (6, 4) if op == "+" else (10, 4)
        return {"operation": op, "number1": n1, "number2": n2,
                "result": compute(op, n1, n2), "placeholder_position": "end"}

    def validate(self, candidate: dict) -> list[str]:
        issues = super().validate(candidate)
        if issues:
            return issues
        if candidate["operation"] == "+" and candidate["number1"] + candidate["number2"] != 10:
            issues.append("sum_not_ten")
        if candidate["operation"] == "-" and candidate["number1"] != 10:
            issues.append("minuend_not_ten")
        return issues
