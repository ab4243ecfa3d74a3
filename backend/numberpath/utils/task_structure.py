"""
Structural analysis of two-operand tasks: boundary crossing, value digits,
decade transitions and a 0-1 complexity estimate used for ordering and
reporting.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict

from numberpath.utils.answer_computer import compute


def boundary_unit(number_range: int) -> int:
    """Tens for ranges up to 100, hundreds above."""
    return 10 if number_range <= 100 else 100


def crosses_boundary(op: str, n1: int, n2: int, number_range: int = 100) -> bool:
    """True when the result leaves the block (ten or hundred) that n1 sits in."""
    unit = boundary_unit(number_range)
    result = compute(op, n1, n2)
    return (n1 // unit) != (result // unit)


def has_decade_transition(op: str, n1: int, n2: int) -> bool:
    return crosses_boundary(op, n1, n2, number_range=100)


def value_digits(n: int) -> int:
    return sum(1 for ch in str(abs(int(n))) if ch != "0")


def trailing_zeros(n: int) -> int:
    n = abs(int(n))
    if n == 0:
        return 0
    count = 0
    while n % 10 == 0:
        n //= 10
        count += 1
    return count


@dataclass
class TaskStructure:
    operation: str
    total_value_digits: int
    n1_value_digits: int
    n2_value_digits: int
    trailing_zeros: int
    crosses_ten: bool
    crosses_hundred: bool
    complexity: float

    def to_dict(self):
        return asdict(self)


def task_complexity(n1: int, n2: int) -> float:
    v1, v2 = value_digits(n1), value_digits(n2)
    total = v1 + v2
    if total <= 2:
        score = 0.15
    elif total == 3:
        score = 0.35
    elif total == 4:
        score = 0.60
    elif total == 5:
        score = 0.80
    else:
        score = 1.0
    if v1 >= 2 and v2 >= 2:
        score += 0.10
    if trailing_zeros(n1) or trailing_zeros(n2):
        score -= 0.10
    return round(max(0.0, min(1.0, score)), 2)


def analyze_task_structure(op: str, n1: int, n2: int) -> TaskStructure:
    v1, v2 = value_digits(n1), value_digits(n2)
    return TaskStructure(
        operation=op,
        total_value_digits=v1 + v2,
        n1_value_digits=v1,
        n2_value_digits=v2,
        trailing_zeros=trailing_zeros(n1) + trailing_zeros(n2),
        crosses_ten=crosses_boundary(op, n1, n2, 100),
        crosses_hundred=crosses_boundary(op, n1, n2, 1000),
        complexity=task_complexity(n1, n2),
    )
