"""Complement to N: SkillContract implementation (number2 = N - number1)."""

from __future__ import annotations

import random

from .base import SkillContract


def complement_window(target: int) -> int:
    """How far below the target number1 may start."""
    if target <= 20:
        return 9
    if target <= 100:
        return 20
    if target <= 500:
        return 70
    return 150


class ComplementContract(SkillContract):
    task_type = "complement"

    @property
    def target(self) -> int:
        return self.competency.number_range

    def build_variant(self, rng: random.Random, directive: dict | None = None):
        n1 = rng.randint(self.target - complement_window(self.target), self.target - 1)
        return {
            "operation": "+",
            "number1": n1,
            "number2": self.target - n1,
            "result": self.target,
            "placeholder_position": "end",
        }

    def fallback_variant(self, directive: dict | None = None) -> dict:
        n1 = self.target - complement_window(self.target) // 2
        return {
            "operation": "+",
            "number1": n1,
            "number2": self.target - n1,
            "result": self.target,
            "placeholder_position": "end",
        }

    def validate(self, candidate: dict) -> list[str]:
        issues = super().validate(candidate)
        if issues:
            return issues
        if candidate["number1"] + candidate["number2"] != self.target:
            issues.append("not_a_complement")
        if candidate["number1"] < self.target - complement_window(self.target):
            issues.append("outside_window")
        return issues

    def explain(self, task) -> dict:
        return {
            "steps": [
                f"How much is missing from {task.number1} to {self.target}?",
                f"{task.number1} + {task.number2} = {self.target}",
            ],
            "final_answer": str(task.correct_answer),
        }
