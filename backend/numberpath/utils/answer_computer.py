"""
answer_computer.py: deterministic arithmetic for every task in the system.

Python computes all answers here. Generators propose numbers; the answer a
learner is graded against always comes out of this module.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


def add(a: int, b: int) -> int:
    return a + b


def subtract(a: int, b: int) -> int:
    return a - b


_OPS = {"+": add, "-": subtract}


def compute(op: str, a: int, b: int) -> int:
    try:
        fn = _OPS[op]
    except KeyError:
        raise ValueError(f"Unsupported operation: {op!r}") from None
    return fn(int(a), int(b))


def hidden_value(op: str, a: int, b: int, placeholder: str = "end") -> int:
    """
    The value the learner must supply for a given placeholder position.
        start  → a   (_ + b = r)
        middle → b   (a + _ = r)
        end    → a op b
    """
    if placeholder == "start":
        return int(a)
    if placeholder == "middle":
        return int(b)
    return compute(op, a, b)


def _as_int(value) -> Optional[int]:
    """Whole-number reading of ``value`` or None (13.5, "abc", True are not)."""
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    if f != f or f in (float("inf"), float("-inf")) or not f.is_integer():
        return None
    return int(f)


@dataclass(frozen=True)
class ArithmeticCheck:
    valid: bool
    expected: int
    received: Optional[int]
    error: Optional[str] = None


def verify(op: str, a: int, b: int, claimed) -> ArithmeticCheck:
    expected = compute(op, a, b)
    received = _as_int(claimed)

    if received is not None and received == expected:
        return ArithmeticCheck(valid=True, expected=expected, received=received)

    error = f"{a} {op} {b} = {expected}, got {claimed!r}"
    logger.error("[answer_computer.verify] arithmetic mismatch: %s", error)
    return ArithmeticCheck(valid=False, expected=expected, received=received, error=error)


def ensure_correct(op: str, a: int, b: int, claimed=None) -> int:
    """Always return the true result; complain loudly if ``claimed`` disagrees."""
    if claimed is None:
        return compute(op, a, b)
    check = verify(op, a, b, claimed)
    if not check.valid:
        logger.error(
            "[answer_computer.ensure_correct] replacing %r with %d for %s %s %s",
            claimed, check.expected, a, op, b,
        )
    return check.expected


def check_student_answer(op: str, a: int, b: int, answer, placeholder: str = "end") -> bool:
    value = _as_int(answer)
    return value is not None and value == hidden_value(op, a, b, placeholder)
