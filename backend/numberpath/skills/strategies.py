"""Strategy skills: doubles, near doubles, bonds to ten, inverse pairs."""

from __future__ import annotations

import random

from .base import SkillContract
from numberpath.utils.answer_computer import compute


def _candidate(op: str, n1: int, n2: int, **extra) -> dict:
    out = {
        "operation": op,
        "number1": n1,
        "number2": n2,
        "result": compute(op, n1, n2),
        "placeholder_position": "end",
    }
    out.update(extra)
    return out


class DoublesContract(SkillContract):
    task_type = "doubles"

    def build_variant(self, rng: random.Random, directive: dict | None = None):
        n = rng.randint(1, 10)
        return _candidate("+", n, n)

    def fallback_variant(self, directive: dict | None = None) -> dict:
        return _candidate("+", 6, 6)

    def validate(self, candidate: dict) -> list[str]:
        issues = super().validate(candidate)
        if candidate.get("number1") != candidate.get("number2"):
            issues.append("not_a_double")
        return issues

    def explain(self, task) -> dict:
        return {
            "steps": [f"Double {task.number1}.", f"{task.number1} + {task.number1} = {task.number1 * 2}"],
            "final_answer": str(task.correct_answer),
        }


class NearDoublesContract(SkillContract):
    task_type = "near_doubles"

    def build_variant(self, rng: random.Random, directive: dict | None = None):
        n = rng.randint(1, 9)
        n1, n2 = (n, n + 1) if rng.random() < 0.5 else (n + 1, n)
        return _candidate("+", n1, n2)

    def fallback_variant(self, directive: dict | None = None) -> dict:
        return _candidate("+", 6, 7)

    def validate(self, candidate: dict) -> list[str]:
        issues = super().validate(candidate)
        if issues:
            return issues
        if abs(candidate["number1"] - candidate["number2"]) != 1:
            issues.append("not_a_near_double")
        return issues

    def explain(self, task) -> dict:
        small = min(task.number1, task.number2)
        return {
            "steps": [
                f"Double the smaller number: {small} + {small} = {small * 2}.",
                f"Add one more: {small * 2} + 1 = {small * 2 + 1}.",
            ],
            "final_answer": str(task.correct_answer),
        }


class NumberBondsContract(SkillContract):
    task_type = "number_bonds"

    def build_variant(self, rng: random.Random, directive: dict | None = None):
        n1 = rng.randint(1, 9)
        return dict(_candidate("+", n1, 10 - n1), result=10)

    def fallback_variant(self, directive: dict | None = None) -> dict:
        return _candidate("+", 3, 7)

    def validate(self, candidate: dict) -> list[str]:
        issues = super().validate(candidate)
        if issues:
            return issues
        if candidate["number1"] + candidate["number2"] != 10:
            issues.append("not_a_bond_of_ten")
        return issues


class InverseOperationsContract(SkillContract):
    """Builds a fact a + b = c, then asks it forwards or backwards (c - b)."""

    task_type = "inverse_relationship"

    def build_variant(self, rng: random.Random, directive: dict | None = None):
        op = self._pick_operation(rng, directive)
        a = rng.randint(1, self.number_range - 1)
        b = rng.randint(1, self.number_range - a)
        c = a + b
        if op == "+":
            return _candidate("+", a, b, requires_inverse_thinking=True, algebraic_complexity=0.3)
        return _candidate("-", c, b, requires_inverse_thinking=True, algebraic_complexity=0.3)

    def fallback_variant(self, directive: dict | None = None) -> dict:
        op = (directive or {}).get("operation", "-")
        if op == "+":
            return _candidate("+", 8, 5, requires_inverse_thinking=True, algebraic_complexity=0.3)
        return _candidate("-", 13, 5, requires_inverse_thinking=True, algebraic_complexity=0.3)

    def explain(self, task) -> dict:
        if task.operation == "-":
            fact = f"{task.displayed_result} + {task.number2} = {task.number1}"
        else:
            fact = f"{task.displayed_result} - {task.number2} = {task.number1}"
        return {
            "steps": [f"{task.number1} {task.operation} {task.number2} = ?", f"Check with the other operation: {fact}"],
            "final_answer": str(task.correct_answer),
        }
