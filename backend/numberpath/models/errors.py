from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

ErrorSeverity = Literal["minor", "moderate", "severe"]


class ErrorAnalysis(BaseModel):
    error_type: str
    error_severity: ErrorSeverity
    label: str
    description: str
    pedagogical_hint: str
    interventions: list[str] = Field(default_factory=list)
    difference: int
    examples: list[str] = Field(default_factory=list)
    placeholder_position: Optional[str] = None
    placeholder_context: Optional[str] = None


class ErrorCategory(BaseModel):
    error_type: str
    label: str
    description: str
    interventions: list[str]
    examples: list[str]
