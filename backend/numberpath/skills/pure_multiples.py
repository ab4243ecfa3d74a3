"""Whole tens (results up to 100) and whole hundreds (results up to 1000)."""

from __future__ import annotations

import random

from .base import SkillContract
from numberpath.utils.answer_computer import compute


class PureMultiplesContract(SkillContract):
    task_type = "pure_multiples"

    @property
    def unit(self) -> int:
        return self.number_range // 10

    def build_variant(self, rng: random.Random, directive: dict | None = None):
        op = self.competency.operations[0]
        if op == "+":
            a = rng.randint(1, 9)
            b = rng.randint(1, 10 - a)
        else:
            a = rng.randint(2, 10)
            b = rng.randint(1, a - 1)
        n1, n2 = a * self.unit, b * self.unit
        return {
            "operation": op,
            "number1": n1,
            "number2": n2,
            "result": compute(op, n1, n2),
            "placeholder_position": "end",
        }

    def fallback_variant(self, directive: dict | None = None) -> dict:
        op = self.competency.operations[0]
        n1, n2 = (3 * self.unit, 4 * self.unit) if op == "+" else (7 * self.unit, 3 * self.unit)
        return {"operation": op, "number1": n1, "number2": n2,
                "result": compute(op, n1, n2), "placeholder_position": "end"}

    def validate(self, candidate: dict) -> list[str]:
        issues = super().validate(candidate)
        if issues:
            return issues
        if candidate["number1"] % self.unit or candidate["number2"] % self.unit:
            issues.append("not_whole_multiples")
        if compute(candidate["operation"], candidate["number1"], candidate["number2"]) <= 0:
            issues.append("result_not_positive")
        return issues
