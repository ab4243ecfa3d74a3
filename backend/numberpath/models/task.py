from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, computed_field

Operation = Literal["+", "-"]
PlaceholderPosition = Literal["none", "start", "middle", "end"]


class Task(BaseModel):
    """One arithmetic exercise.

    ``correct_answer`` is the value the learner has to supply: ``number1`` for a
    start placeholder, ``number2`` for a middle placeholder, the result
    otherwise.
    """

    task_type: str = "basic"
    operation: Operation
    number1: int
    number2: int
    correct_answer: int
    number_range: int = 20
    placeholder_position: PlaceholderPosition = "end"
    competency_id: Optional[str] = None
    requires_inverse_thinking: bool = False
    algebraic_complexity: float = 0.0

    # Filled in after submission
    student_answer: Optional[int] = None
    is_correct: Optional[bool] = None
    time_taken: Optional[float] = None
    error_type: Optional[str] = None
    error_severity: Optional[str] = None

    @computed_field
    @property
    def displayed_result(self) -> int:
        if self.operation == "+":
            return self.number1 + self.number2
        return self.number1 - self.number2


class TaskSignature(BaseModel):
    number1: int
    number2: int
    operation: Operation
    placeholder_position: PlaceholderPosition = "end"

    model_config = {"frozen": True}
