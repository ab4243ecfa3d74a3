from pydantic import BaseModel, Field
from typing import Any, Optional

from numberpath.models.errors import ErrorAnalysis
from numberpath.models.representation import Channel, RepresentationDecision
from numberpath.models.task import Operation, PlaceholderPosition, Task, TaskSignature


class SessionRequest(BaseModel):
    count: Optional[int] = Field(default=None, ge=1, le=50)
    current_level: Optional[float] = Field(default=None, ge=1, le=100)
    previous_task: Optional[TaskSignature] = None


class SessionResponse(BaseModel):
    learner_id: str
    level: float
    number_range: int
    tasks: list[Task]


class ClassifyRequest(BaseModel):
    operation: Operation
    number1: int = Field(ge=0)
    number2: int = Field(ge=0)
    correct_answer: int
    student_answer: int
    placeholder_position: PlaceholderPosition = "end"


class AttemptRequest(BaseModel):
    task: Task
    student_answer: int
    time_taken: Optional[float] = Field(default=None, ge=0)
    active_channels: Optional[list[Channel]] = None


class AttemptResponse(BaseModel):
    is_correct: bool
    expected: int
    task_string: str
    competencies: list[str]
    error_analysis: Optional[ErrorAnalysis] = None
    explanation: Optional[dict] = None
    representation: RepresentationDecision
    current_streak: int = 0
    total_tasks_solved: int = 0


class ProgressResponse(BaseModel):
    learner_id: str
    overall_level: float
    current_level: Optional[int] = None
    total_tasks_solved: int = 0
    total_correct: int = 0
    summary: dict[str, Any]
    representation: list[dict]


class CompetencyOut(BaseModel):
    id: str
    name: str
    description: str
    number_range: int
    operations: list[str]
    family: str
    requires_transition: bool = False
    placeholder_type: Optional[str] = None
    min_level: float = 0.0


class ResetResponse(BaseModel):
    ok: bool = True
