from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from numberpath.models.representation import RepresentationState

RECENT_PERFORMANCE_WINDOW = 20


class TaskMasteryStatus(BaseModel):
    attempts: int = 0
    correct: int = 0  # net score: +1 per correct, -penalty per wrong, floored at 0
    last_attempt: Optional[datetime] = None
    mastered: bool = False


class CompetencyProgressStatus(BaseModel):
    level: float = 0.0
    attempted: int = 0
    correct: int = 0
    success_rate: float = 0.0
    last_practiced: Optional[datetime] = None
    tasks_mastered: list[str] = Field(default_factory=list)
    recent_errors: list[str] = Field(default_factory=list)  # newest first


class LearningProgression(BaseModel):
    task_mastery: dict[str, TaskMasteryStatus] = Field(default_factory=dict)
    competency_progress: dict[str, CompetencyProgressStatus] = Field(default_factory=dict)
    current_level: Optional[int] = Field(default=None, ge=1, le=100)
    current_streak: int = 0
    total_tasks_solved: int = 0
    total_correct: int = 0
    recent_performance: list[bool] = Field(default_factory=list)
    representation: RepresentationState = Field(default_factory=RepresentationState)


class ProgressionUpdate(BaseModel):
    task_string: str
    competencies: list[str]
    task_mastery: dict[str, TaskMasteryStatus]
    competency_progress: dict[str, CompetencyProgressStatus]
    current_streak: int
    total_tasks_solved: int
    total_correct: int
    recent_performance: list[bool]
    current_level: Optional[int] = None


def apply_update(progression: LearningProgression, update: ProgressionUpdate) -> LearningProgression:
    """Return a new progression with ``update`` folded in."""
    return progression.model_copy(
        update={
            "task_mastery": update.task_mastery,
            "competency_progress": update.competency_progress,
            "current_streak": update.current_streak,
            "total_tasks_solved": update.total_tasks_solved,
            "total_correct": update.total_correct,
            "recent_performance": update.recent_performance,
            "current_level": update.current_level or progression.current_level,
        }
    )
