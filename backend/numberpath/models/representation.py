from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

Channel = Literal["twenty_frame", "number_line", "counters", "fingers", "symbolic"]

ALL_CHANNELS: tuple[str, ...] = (
    "twenty_frame",
    "number_line",
    "counters",
    "fingers",
    "symbolic",
)
VISUAL_CHANNELS: tuple[str, ...] = ALL_CHANNELS[:-1]


class CombinedMastery(BaseModel):
    """Performance of a channel while shown together with others."""

    consecutive_correct: int = 0
    consecutive_errors: int = 0
    total_used: int = 0
    correct_used: int = 0
    success_rate: float = 0.0


class SoloMastery(BaseModel):
    """Performance of a channel when it is the only visual aid (plus symbols)."""

    mastery: int = 0
    attempted: int = 0
    correct: int = 0
    streak: int = 0
    first_tested: Optional[datetime] = None
    last_tested: Optional[datetime] = None
    needs_more_testing: bool = True


def _default_solo() -> dict[str, SoloMastery]:
    solo = {c: SoloMastery() for c in VISUAL_CHANNELS}
    solo["symbolic"] = SoloMastery(mastery=100, needs_more_testing=False)
    return solo


class RepresentationState(BaseModel):
    stage: int = Field(default=1, ge=1, le=10)
    active: list[Channel] = Field(default_factory=lambda: list(ALL_CHANNELS))
    combined: dict[str, CombinedMastery] = Field(
        default_factory=lambda: {c: CombinedMastery() for c in ALL_CHANNELS}
    )
    solo: dict[str, SoloMastery] = Field(default_factory=_default_solo)
    early_challenge: Optional[Literal["two_channel", "one_channel"]] = None
    tasks_seen: int = 0

    @property
    def baseline_complete(self) -> bool:
        return all(self.solo.get(c, SoloMastery()).attempted > 0 for c in VISUAL_CHANNELS)


class RepresentationDecision(BaseModel):
    action: Literal["reduce", "increase", "maintain"]
    reason: str
    message: str
    new_stage: int
    active: list[Channel]
    early_challenge: Optional[str] = None
