"""
Competency catalog: the fixed, read-only list of practisable skills.

Ordered from easiest to hardest within each family. ``min_level`` is on the
0-7 scale; a competency unlocks when ``min_level <= session_level / 20``.
"""
from __future__ import annotations

from typing import Optional

from numberpath.models.competency import CompetencyDefinition

_ADD = ("+",)
_SUB = ("-",)
_BOTH = ("+", "-")


def _basic(number_range: int, op: str, transition: bool, min_level: float) -> CompetencyDefinition:
    word = "addition" if op == "+" else "subtraction"
    suffix = "with_transition" if transition else "no_transition"
    cross = "crossing" if transition else "without crossing"
    return CompetencyDefinition(
        id=f"{word}_ZR{number_range}_{suffix}",
        name=f"{word.capitalize()} to {number_range} ({cross})",
        description=(
            f"{word.capitalize()} with numbers and results up to {number_range}, "
            f"{'crossing' if transition else 'staying within'} a "
            f"{'ten' if number_range <= 100 else 'hundred'}."
        ),
        number_range=number_range,
        operations=_ADD if op == "+" else _SUB,
        family="basic",
        requires_transition=transition,
        min_level=min_level,
    )


def _complement(target: int, min_level: float) -> CompetencyDefinition:
    return CompetencyDefinition(
        id=f"complement_to_{target}",
        name=f"Complements to {target}",
        description=f"Find the number that makes {target}.",
        number_range=target,
        operations=_ADD,
        family="complement",
        min_level=min_level,
    )


def _placeholder(position: str, description: str) -> CompetencyDefinition:
    return CompetencyDefinition(
        id=f"placeholder_{position}",
        name=f"Missing number ({position})",
        description=description,
        number_range=20,
        operations=_BOTH,
        family="placeholder",
        placeholder_type=position,
        min_level=0,
    )


COMPETENCY_CATALOG: tuple[CompetencyDefinition, ...] = (
    # Range 10
    _basic(10, "+", False, 0),
    _basic(10, "-", False, 0),
    CompetencyDefinition(
        id="addition_to_10",
        name="Adding up to 10",
        description="Additions whose sum is exactly 10.",
        number_range=10,
        operations=_ADD,
        family="basic",
        min_level=0.5,
    ),
    CompetencyDefinition(
        id="subtraction_from_10",
        name="Subtracting from 10",
        description="Subtractions that start at 10.",
        number_range=10,
        operations=_SUB,
        family="basic",
        min_level=0.5,
    ),
    # Range 20
    _basic(20, "+", False, 1),
    _basic(20, "-", False, 1),
    CompetencyDefinition(
        id="addition_with_transition",
        name="Addition across ten",
        description="Additions to 20 that cross the ten.",
        number_range=20,
        operations=_ADD,
        family="basic",
        requires_transition=True,
        min_level=1.5,
    ),
    CompetencyDefinition(
        id="subtraction_with_transition",
        name="Subtraction across ten",
        description="Subtractions within 20 that cross the ten.",
        number_range=20,
        operations=_SUB,
        family="basic",
        requires_transition=True,
        min_level=1.5,
    ),
    # Missing-number forms
    _placeholder("end", "Classic form: 7 + 5 = _"),
    _placeholder("middle", "Missing second operand: 7 + _ = 12"),
    _placeholder("start", "Missing first operand: _ + 5 = 12"),
    # Strategies
    CompetencyDefinition(
        id="doubles",
        name="Doubles",
        description="Adding a number to itself: 6 + 6.",
        number_range=20,
        operations=_ADD,
        family="strategy",
        min_level=0.5,
    ),
    CompetencyDefinition(
        id="near_doubles",
        name="Near doubles",
        description="Neighbouring numbers: 6 + 7 = 6 + 6 + 1.",
        number_range=20,
        operations=_ADD,
        family="strategy",
        min_level=1,
    ),
    CompetencyDefinition(
        id="number_bonds_10",
        name="Number bonds to 10",
        description="Pairs of numbers that make 10.",
        number_range=10,
        operations=_ADD,
        family="strategy",
        min_level=0.5,
    ),
    CompetencyDefinition(
        id="inverse_operations",
        name="Inverse operations",
        description="Use addition to check subtraction and the other way round.",
        number_range=20,
        operations=_BOTH,
        family="inverse",
        min_level=1,
    ),
    # Larger ranges without crossing
    _basic(30, "+", False, 1.25),
    _basic(30, "-", False, 1.25),
    _basic(40, "+", False, 1.75),
    _basic(40, "-", False, 1.75),
    _basic(50, "+", False, 2.0),
    _basic(50, "-", False, 2.0),
    _basic(80, "+", False, 2.5),
    _basic(80, "-", False, 2.5),
    _basic(100, "+", False, 3.0),
    _basic(100, "-", False, 3.0),
    _basic(100, "+", True, 4.0),
    _basic(100, "-", True, 4.0),
    _basic(200, "+", False, 4.5),
    _basic(200, "-", False, 4.5),
    _basic(500, "+", False, 5.0),
    _basic(500, "-", False, 5.0),
    _basic(1000, "+", False, 5.5),
    _basic(1000, "-", False, 5.5),
    _basic(1000, "+", True, 6.0),
    _basic(1000, "-", True, 6.0),
    # Complements
    _complement(20, 1.0),
    _complement(30, 1.25),
    _complement(40, 1.75),
    _complement(50, 2.0),
    _complement(80, 2.5),
    _complement(100, 3.0),
    _complement(200, 5.0),
    _complement(500, 5.5),
    _complement(1000, 6.0),
    # Pure tens and hundreds
    CompetencyDefinition(
        id="pure_decades_addition",
        name="Adding tens",
        description="Whole tens only: 30 + 40.",
        number_range=100,
        operations=_ADD,
        family="pure_multiples",
        min_level=0.5,
    ),
    CompetencyDefinition(
        id="pure_decades_subtraction",
        name="Subtracting tens",
        description="Whole tens only: 70 - 30.",
        number_range=100,
        operations=_SUB,
        family="pure_multiples",
        min_level=0.5,
    ),
    CompetencyDefinition(
        id="pure_hundreds_addition",
        name="Adding hundreds",
        description="Whole hundreds only: 300 + 400.",
        number_range=1000,
        operations=_ADD,
        family="pure_multiples",
        min_level=2.0,
    ),
    CompetencyDefinition(
        id="pure_hundreds_subtraction",
        name="Subtracting hundreds",
        description="Whole hundreds only: 700 - 300.",
        number_range=1000,
        operations=_SUB,
        family="pure_multiples",
        min_level=2.0,
    ),
)

COMPETENCIES_BY_ID: dict[str, CompetencyDefinition] = {c.id: c for c in COMPETENCY_CATALOG}


def get_competency(competency_id: str) -> Optional[CompetencyDefinition]:
    return COMPETENCIES_BY_ID.get(competency_id)
