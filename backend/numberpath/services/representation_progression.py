"""
Representation progression: fades visual aids as a learner gets stronger.

Ten stages go from all five channels (twenty frame, number line, counters,
fingers, symbols) down to symbols only. After every answer ``evaluate``
decides whether to reduce (move a stage up), increase (move a stage back) or
maintain. Two early-challenge paths let a very strong learner skip straight
to two channels or to symbols alone.

Each channel keeps two mastery records:
  combined   updated whenever the channel is on screen
  solo       updated only when it is the single visual aid (a "solo test")

Reduction is gated on every visual channel having had at least one solo
test and on every active visual channel reaching solo mastery 70.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from numberpath.models.representation import (
    ALL_CHANNELS,
    VISUAL_CHANNELS,
    CombinedMastery,
    RepresentationDecision,
    RepresentationState,
    SoloMastery,
)

logger = logging.getLogger(__name__)

STAGES: dict[int, tuple[str, ...]] = {
    1: ALL_CHANNELS,
    2: ("twenty_frame", "number_line", "counters", "symbolic"),
    3: ("twenty_frame", "number_line", "fingers", "symbolic"),
    4: ("twenty_frame", "number_line", "symbolic"),
    5: ("number_line", "counters", "symbolic"),
    6: ("number_line", "symbolic"),
    7: ("twenty_frame", "symbolic"),
    8: ("counters", "symbolic"),
    9: ("symbolic",),
    10: ("symbolic",),
}

EARLY_CHALLENGES: dict[str, dict] = {
    "two_channel": {"channels": ("twenty_frame", "symbolic"), "streak": 8, "success_rate": 0.9},
    "one_channel": {"channels": ("symbolic",), "streak": 12, "success_rate": 0.95},
}

_REDUCE_STREAK = 5
_REDUCE_STREAK_WITH_RATE = 3
_REDUCE_RATE = 0.8
_INCREASE_ERRORS = 3
_INCREASE_RATE = 0.5
_SOLO_GATE = 70
_SOLO_TEST_TASKS = (3, 6, 9, 12, 15, 18)


# ---------------------------------------------------------------------------
# Performance helpers
# ---------------------------------------------------------------------------

def consecutive_correct(history: list[bool]) -> int:
    n = 0
    for ok in reversed(history):
        if not ok:
            break
        n += 1
    return n


def consecutive_errors(history: list[bool]) -> int:
    n = 0
    for ok in reversed(history):
        if ok:
            break
        n += 1
    return n


def recent_success_rate(history: list[bool], window: int = 10) -> float:
    recent = history[-window:]
    if not recent:
        return 0.0
    return sum(1 for ok in recent if ok) / len(recent)


def difficulty_level(active_count: int, stage: int) -> int:
    return max(1, min(10, 6 - active_count + min(stage // 2, 4)))


def stage_config(stage: int) -> dict:
    stage = max(1, min(10, stage))
    channels = STAGES[stage]
    return {
        "stage": stage,
        "channels": list(channels),
        "difficulty_level": difficulty_level(len(channels), stage),
    }


def encouragement_message(success_rate: float) -> str:
    if success_rate >= 0.9:
        return "Outstanding! You barely need the pictures any more."
    if success_rate >= 0.7:
        return "Great work! Keep going like this."
    if success_rate >= 0.5:
        return "Good effort. Use the pictures to help you."
    return "Let's take it slowly and use the pictures together."


# ---------------------------------------------------------------------------
# Mastery updates
# ---------------------------------------------------------------------------

def _solo_channel(active: list[str]) -> Optional[str]:
    visual = [c for c in active if c != "symbolic"]
    return visual[0] if len(visual) == 1 else None


def update_mastery(
    state: RepresentationState,
    active: list[str],
    is_correct: bool,
    now: Optional[datetime] = None,
) -> RepresentationState:
    """Fold one answer into the channel records. Returns a new state."""
    now = now or datetime.now(timezone.utc)
    combined = {k: v.model_copy() for k, v in state.combined.items()}
    solo = {k: v.model_copy() for k, v in state.solo.items()}

    for channel in active:
        m = combined.get(channel) or CombinedMastery()
        used = m.total_used + 1
        correct = m.correct_used + (1 if is_correct else 0)
        combined[channel] = CombinedMastery(
            consecutive_correct=m.consecutive_correct + 1 if is_correct else 0,
            consecutive_errors=0 if is_correct else m.consecutive_errors + 1,
            total_used=used,
            correct_used=correct,
            success_rate=correct / used,
        )

    channel = _solo_channel(active)
    if channel is not None:
        s = solo.get(channel) or SoloMastery()
        attempted = s.attempted + 1
        correct = s.correct + (1 if is_correct else 0)
        mastery = round(correct / attempted * 100)
        solo[channel] = SoloMastery(
            mastery=mastery,
            attempted=attempted,
            correct=correct,
            streak=s.streak + 1 if is_correct else 0,
            first_tested=s.first_tested or now,
            last_tested=now,
            needs_more_testing=attempted < 5 or (mastery < 80 and attempted < 10),
        )

    return state.model_copy(update={
        "combined": combined,
        "solo": solo,
        "tasks_seen": state.tasks_seen + 1,
    })


# ---------------------------------------------------------------------------
# Stage decisions
# ---------------------------------------------------------------------------

def _solo_gate_passed(state: RepresentationState, active: list[str]) -> bool:
    if not state.baseline_complete:
        return False
    return all(
        state.solo.get(c, SoloMastery()).mastery >= _SOLO_GATE
        for c in active if c != "symbolic"
    )


def evaluate(
    state: RepresentationState,
    performance: list[bool],
    is_correct: bool,
    active: Optional[list[str]] = None,
) -> RepresentationDecision:
    """
    Decide the next stage. ``performance`` is the answer history before this
    answer; ``is_correct`` is appended to it.
    """
    active = list(active if active is not None else state.active)
    history = (list(performance) + [bool(is_correct)])[-20:]
    streak = consecutive_correct(history)
    errors = consecutive_errors(history)
    rate = recent_success_rate(history)
    stage = state.stage

    if state.baseline_complete and len(active) > 1:
        for name in ("one_channel", "two_channel"):
            rule = EARLY_CHALLENGES[name]
            if len(rule["channels"]) >= len(active):
                continue
            if streak >= rule["streak"] and rate >= rule["success_rate"]:
                logger.info(
                    "[representation_progression.evaluate] early challenge %s (streak=%d rate=%.2f)",
                    name, streak, rate,
                )
                return RepresentationDecision(
                    action="reduce",
                    reason=f"early_challenge_{name}",
                    message=encouragement_message(rate),
                    new_stage=stage,
                    active=list(rule["channels"]),
                    early_challenge=name,
                )

    if (
        len(active) > 1
        and (streak >= _REDUCE_STREAK or (rate >= _REDUCE_RATE and streak >= _REDUCE_STREAK_WITH_RATE))
        and _solo_gate_passed(state, active)
    ):
        new_stage = min(10, stage + 1)
        return RepresentationDecision(
            action="reduce",
            reason="consistent_success",
            message=encouragement_message(rate),
            new_stage=new_stage,
            active=list(STAGES[new_stage]),
        )

    if len(active) < len(ALL_CHANNELS) and (errors >= _INCREASE_ERRORS or rate < _INCREASE_RATE):
        new_stage = max(1, stage - 1)
        return RepresentationDecision(
            action="increase",
            reason="repeated_errors" if errors >= _INCREASE_ERRORS else "low_success_rate",
            message=encouragement_message(rate),
            new_stage=new_stage,
            active=list(STAGES[new_stage]),
        )

    return RepresentationDecision(
        action="maintain",
        reason="stable",
        message=encouragement_message(rate),
        new_stage=stage,
        active=active,
        early_challenge=state.early_challenge,
    )


def apply_decision(state: RepresentationState, decision: RepresentationDecision) -> RepresentationState:
    return state.model_copy(update={
        "stage": decision.new_stage,
        "active": list(decision.active),
        "early_challenge": decision.early_challenge,
    })


# ---------------------------------------------------------------------------
# Solo testing
# ---------------------------------------------------------------------------

def _test_priority(solo: SoloMastery, tasks_completed: int, now: datetime) -> tuple[int, str]:
    if solo.attempted == 0:
        return 10, "never_tested"
    if solo.needs_more_testing and solo.attempted < 5:
        return 8, "needs_more_tests"
    if solo.mastery < 70 and solo.attempted < 10:
        return 6, "low_mastery"
    if solo.last_tested is not None and now - solo.last_tested > timedelta(days=7) and solo.mastery < 90:
        return 4, "stale"
    if solo.mastery >= 80 and tasks_completed > 0 and tasks_completed % 20 == 0:
        return 2, "periodic_check"
    return 0, "none"


def next_channel_to_test(
    state: RepresentationState,
    tasks_completed: int,
    now: Optional[datetime] = None,
) -> Optional[dict]:
    now = now or datetime.now(timezone.utc)
    best = None
    for channel in VISUAL_CHANNELS:
        priority, reason = _test_priority(state.solo.get(channel, SoloMastery()), tasks_completed, now)
        if priority > 0 and (best is None or priority > best["priority"]):
            best = {"channel": channel, "priority": priority, "reason": reason}
    return best


def should_inject_solo_test(
    state: RepresentationState,
    tasks_completed: int,
    last_task_multi_channel: bool = False,
    now: Optional[datetime] = None,
) -> Optional[dict]:
    """Return the channel to test on the next task, or None."""
    candidate = next_channel_to_test(state, tasks_completed, now)
    if candidate is None:
        return None
    p = candidate["priority"]
    if p >= 10:
        return candidate
    if tasks_completed in _SOLO_TEST_TASKS and p >= 8:
        return candidate
    if last_task_multi_channel and p >= 6:
        return candidate
    return None


def early_testing_schedule(state: RepresentationState) -> list[dict]:
    """Baseline solo tests for untested channels, one every third task."""
    untested = [c for c in VISUAL_CHANNELS if state.solo.get(c, SoloMastery()).attempted == 0]
    return [
        {"task_number": task_number, "channel": channel}
        for task_number, channel in zip(_SOLO_TEST_TASKS, untested)
    ]


def solo_mastery_summary(state: RepresentationState) -> list[dict]:
    out = []
    for channel in VISUAL_CHANNELS:
        solo = state.solo.get(channel, SoloMastery())
        if solo.attempted == 0:
            status = "untested"
        elif solo.mastery < 70:
            status = "learning"
        elif solo.mastery < 90:
            status = "proficient"
        else:
            status = "mastered"
        out.append({
            "channel": channel,
            "status": status,
            "mastery": solo.mastery,
            "attempted": solo.attempted,
            "needs_more_testing": solo.needs_more_testing,
        })
    return out
