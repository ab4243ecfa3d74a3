"""Base skill contract for arithmetic task generation.

Every competency in the catalog has one contract. Subclasses override
``build_variant`` (propose numbers) and usually extend ``validate`` (the
family's shape rules). ``generate`` is shared: bounded retries, the task
validator, then a final arithmetic check that drops the candidate on any
mismatch.
"""
from __future__ import annotations

import logging
import random
from typing import Optional

from numberpath.models.competency import CompetencyDefinition
from numberpath.models.task import Task
from numberpath.services.task_validator import validate_task
from numberpath.skills.catalog import get_competency
from numberpath.utils.answer_computer import compute, hidden_value, verify
from numberpath.utils.retry import first_valid

logger = logging.getLogger(__name__)


class SkillContract:
    skill_tag: str = ""
    task_type: str = "basic"

    def __init__(self, skill_tag: str | None = None):
        if skill_tag:
            self.skill_tag = skill_tag
        competency = get_competency(self.skill_tag)
        if competency is None:
            raise KeyError(f"Unknown competency: {self.skill_tag}")
        self.competency: CompetencyDefinition = competency

    @property
    def number_range(self) -> int:
        return self.competency.number_range

    def _pick_operation(self, rng: random.Random, directive: dict | None) -> str:
        ops = self.competency.operations
        wanted = (directive or {}).get("operation")
        if wanted in ops:
            return wanted
        return ops[0] if len(ops) == 1 else rng.choice(ops)

    def build_variant(self, rng: random.Random, directive: dict | None = None) -> dict | None:
        """
        Propose one candidate:
        {
            "operation": "+" | "-",
            "number1": int,
            "number2": int,
            "result": int,                 # the generator's own claim
            "placeholder_position": str,
        }
        """
        return None

    def fallback_variant(self, directive: dict | None = None) -> dict:
        """A fixed candidate that satisfies ``validate``; used when retries run out."""
        raise NotImplementedError

    def validate(self, candidate: dict) -> list[str]:
        issues = []
        op = candidate.get("operation")
        n1 = candidate.get("number1")
        n2 = candidate.get("number2")
        if op not in self.competency.operations:
            issues.append("operation_not_allowed")
            return issues
        if not isinstance(n1, int) or not isinstance(n2, int):
            issues.append("operands_not_integers")
            return issues
        if n1 < 1 or n2 < 1:
            issues.append("operand_below_one")
        result = compute(op, n1, n2)
        if result < 0:
            issues.append("negative_result")
        if max(n1, n2, result) > self.number_range:
            issues.append("out_of_range")
        return issues

    def generate(
        self,
        rng: random.Random,
        directive: dict | None = None,
        max_attempts: int = 50,
    ) -> Optional[Task]:
        candidate = first_valid(
            lambda: self.build_variant(rng, directive),
            lambda c: not self.validate(c),
            max_attempts,
            fallback=lambda: self.fallback_variant(directive),
        )

        checked = validate_task(candidate)
        if not checked.ok:
            logger.warning(
                "[%s.generate] candidate rejected by validator: %s",
                self.skill_tag, checked.reason,
            )
            return None

        op, n1, n2 = candidate["operation"], candidate["number1"], candidate["number2"]
        check = verify(op, n1, n2, candidate.get("result", compute(op, n1, n2)))
        if not check.valid:
            logger.error(
                "[%s.generate] dropping candidate after arithmetic mismatch: %s",
                self.skill_tag, check.error,
            )
            return None
        if check.expected < 0:
            return None

        position = candidate.get("placeholder_position", "end")
        return Task(
            task_type=self.task_type,
            operation=op,
            number1=n1,
            number2=n2,
            correct_answer=hidden_value(op, n1, n2, position),
            number_range=self.number_range,
            placeholder_position=position,
            competency_id=self.skill_tag,
            requires_inverse_thinking=candidate.get("requires_inverse_thinking", position in ("start", "middle")),
            algebraic_complexity=candidate.get("algebraic_complexity", 0.0),
        )

    def explain(self, task: Task) -> dict:
        """
        Deterministic explanation builder.
        Returns structured explanation:
        {
            "steps": [str, ...],
            "final_answer": str | None
        }
        """
        result = compute(task.operation, task.number1, task.number2)
        word = "add" if task.operation == "+" else "take away"
        steps = [f"Start with {task.number1}.", f"{word.capitalize()} {task.number2}.", f"You get {result}."]
        if task.placeholder_position == "start":
            steps = [
                f"Which number {task.operation} {task.number2} makes {result}?",
                f"Check: {task.number1} {task.operation} {task.number2} = {result}.",
            ]
        elif task.placeholder_position == "middle":
            steps = [
                f"{task.number1} {task.operation} ? = {result}",
                f"Check: {task.number1} {task.operation} {task.number2} = {result}.",
            ]
        return {"steps": steps, "final_answer": str(task.correct_answer)}

    def grade(self, task: Task, student_answer) -> dict:
        """
        Deterministic grading hook.
        Returns structured feedback with per-place digit mismatches.
        """
        expected = hidden_value(task.operation, task.number1, task.number2, task.placeholder_position)
        try:
            student = int(str(student_answer).strip())
        except (TypeError, ValueError):
            return {
                "is_correct": False,
                "expected": expected,
                "student": student_answer,
                "place_errors": {},
                "error_type": "invalid_input",
            }

        place_errors = {
            name: (student // div) % 10 != (expected // div) % 10
            for name, div in (("ones", 1), ("tens", 10), ("hundreds", 100))
            if max(student, expected) >= div
        }
        is_correct = student == expected
        error_type = None
        if not is_correct:
            from numberpath.services.error_classifier import classify_error

            analysis = classify_error(
                task.operation, task.number1, task.number2, expected, student,
                task.placeholder_position,
            )
            error_type = analysis.error_type if analysis else None

        return {
            "is_correct": is_correct,
            "expected": expected,
            "student": student,
            "place_errors": place_errors,
            "error_type": error_type,
        }
