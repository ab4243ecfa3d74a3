"""Missing-number tasks: _ + 5 = 12, 7 + _ = 12 and 7 + 5 = _ within 20."""

from __future__ import annotations

import random

from .base import SkillContract
from numberpath.utils.answer_computer import compute

_ALGEBRAIC_COMPLEXITY = {"start": 0.6, "middle": 0.4, "end": 0.0}


class PlaceholderContract(SkillContract):
    task_type = "placeholder"

    @property
    def position(self) -> str:
        return self.competency.placeholder_type or "end"

    def _candidate(self, op: str, n1: int, n2: int) -> dict:
        return {
            "operation": op,
            "number1": n1,
            "number2": n2,
            "result": compute(op, n1, n2),
            "placeholder_position": self.position,
            "requires_inverse_thinking": self.position != "end",
            "algebraic_complexity": _ALGEBRAIC_COMPLEXITY[self.position],
        }

    def build_variant(self, rng: random.Random, directive: dict | None = None):
        op = self._pick_operation(rng, directive)
        r = self.number_range
        if op == "+":
            n1 = rng.randint(1, r - 1)
            n2 = rng.randint(1, r - n1)
        else:
            n1 = rng.randint(2, r)
            n2 = rng.randint(1, n1 - 1)
        return self._candidate(op, n1, n2)

    def fallback_variant(self, directive: dict | None = None) -> dict:
        op = (directive or {}).get("operation", "+")
        return self._candidate(op, 7, 5) if op == "+" else self._candidate(op, 12, 5)

    def validate(self, candidate: dict) -> list[str]:
        issues = super().validate(candidate)
        if candidate.get("placeholder_position") != self.position:
            issues.append("wrong_placeholder_position")
        return issues

    def explain(self, task) -> dict:
        result = compute(task.operation, task.number1, task.number2)
        if self.position == "start":
            inverse = "-" if task.operation == "+" else "+"
            steps = [
                f"_ {task.operation} {task.number2} = {result}",
                f"Undo it: {result} {inverse} {task.number2} = {task.number1}",
            ]
        elif self.position == "middle":
            if task.operation == "+":
                steps = [f"{task.number1} + _ = {result}", f"{result} - {task.number1} = {task.number2}"]
            else:
                steps = [f"{task.number1} - _ = {result}", f"{task.number1} - {result} = {task.number2}"]
        else:
            return super().explain(task)
        return {"steps": steps, "final_answer": str(task.correct_answer)}
