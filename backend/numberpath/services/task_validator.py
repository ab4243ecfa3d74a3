"""
Task Validator: repairs or replaces malformed tasks before they reach a learner.

Checks, in order:
  1. operands are finite numbers       → otherwise the safe 5 + 3 task
  2. operands are non-negative         → absolute value (0 becomes 3 / 2)
  3. operands are non-zero             → raised to 1
  4. subtraction result non-negative   → operands swapped

Every repair is logged at WARNING. ``ensure_valid_task`` never raises and
never returns None.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Optional

from numberpath.utils.answer_computer import compute, hidden_value

logger = logging.getLogger(__name__)

SAFE_TASK: dict[str, Any] = {
    "operation": "+",
    "number1": 5,
    "number2": 3,
    "correct_answer": 8,
    "placeholder_position": "end",
}


@dataclass
class ValidationResult:
    ok: bool
    reason: Optional[str] = None
    corrected: dict = field(default_factory=dict)


def _finite(value) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def _with_answer(task: dict) -> dict:
    task["correct_answer"] = hidden_value(
        task["operation"], task["number1"], task["number2"],
        task.get("placeholder_position") or "end",
    )
    return task


def validate_task(task: dict) -> ValidationResult:
    """Check a task mapping and return a repaired copy with a fresh answer."""
    fixed = dict(task)
    op = fixed.get("operation")
    if op not in ("+", "-"):
        logger.warning("[task_validator.validate_task] unknown operation %r, using safe task", op)
        return ValidationResult(ok=False, reason="invalid_operation", corrected=dict(SAFE_TASK))

    if not (_finite(fixed.get("number1")) and _finite(fixed.get("number2"))):
        logger.warning(
            "[task_validator.validate_task] non-finite operands %r, %r; using safe task",
            fixed.get("number1"), fixed.get("number2"),
        )
        return ValidationResult(ok=False, reason="non_finite", corrected=dict(SAFE_TASK))

    n1 = int(float(fixed["number1"]))
    n2 = int(float(fixed["number2"]))
    reasons = []

    if n1 < 0 or n2 < 0:
        reasons.append("negative_operand")
        n1 = abs(n1) or 3
        n2 = abs(n2) or 2

    if n1 == 0 or n2 == 0:
        reasons.append("zero_operand")
        n1 = max(1, n1)
        n2 = max(1, n2)

    if op == "-" and compute(op, n1, n2) < 0:
        reasons.append("negative_result")
        n1, n2 = n2, n1

    fixed["number1"], fixed["number2"] = n1, n2
    _with_answer(fixed)

    if reasons:
        reason = ",".join(reasons)
        logger.warning(
            "[task_validator.validate_task] repaired %s: %r -> %s %s %s",
            reason, task, n1, op, n2,
        )
        return ValidationResult(ok=False, reason=reason, corrected=fixed)
    return ValidationResult(ok=True, corrected=fixed)


def ensure_valid_task(task: Optional[dict]) -> dict:
    if not isinstance(task, dict):
        logger.warning("[task_validator.ensure_valid_task] no task given, using safe task")
        return dict(SAFE_TASK)
    try:
        return validate_task(task).corrected
    except Exception as e:
        logger.warning("[task_validator.ensure_valid_task] %s, using safe task", e)
        return dict(SAFE_TASK)


def validate_result(result, max_result: int = 100) -> bool:
    if not _finite(result):
        return False
    value = float(result)
    return value.is_integer() and 0 <= value <= max_result
