from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Literal, Optional

CompetencyFamily = Literal[
    "basic",
    "complement",
    "pure_multiples",
    "placeholder",
    "strategy",
    "inverse",
]

NUMBER_RANGES: tuple[int, ...] = (10, 20, 30, 40, 50, 80, 100, 200, 500, 1000)


@dataclass(frozen=True)
class CompetencyDefinition:
    id: str
    name: str
    description: str
    number_range: int
    operations: tuple[str, ...]
    family: CompetencyFamily
    requires_transition: bool = False
    placeholder_type: Optional[str] = None
    min_level: float = 0.0

    @property
    def is_mixed(self) -> bool:
        return len(self.operations) > 1

    def to_dict(self):
        d = asdict(self)
        d["operations"] = list(self.operations)
        return d
