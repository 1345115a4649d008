from __future__ import annotations  # Session state and turn payload models

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

RoleLiteral = Literal["interviewer", "candidate"]
StatusLiteral = Literal["created", "in_progress", "complete"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _as_number(value) -> float:  # Non-numeric input raises ValueError
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"Expected a number, got {type(value).__name__}")
    return float(value)


class Turn(BaseModel):  # Single role-tagged transcript entry
    role: RoleLiteral
    content: str


class AnswerEvaluation(BaseModel):  # Per-answer evaluation returned by the model
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    completeness: float = Field(default=0.0, ge=0.0, le=1.0)
    clarity: float = Field(default=0.0, ge=0.0, le=1.0)
    technical_accuracy: float = Field(default=0.0, ge=0.0, le=1.0)
    missing_points: List[str] = Field(default_factory=list)
    suggested_follow_up: str = ""
    next_question: str = ""

    @field_validator("completeness", "clarity", "technical_accuracy", mode="before")
    @classmethod
    def _clamp_ratio(cls, value):
        if value is None:
            return 0.0
        return max(0.0, min(1.0, _as_number(value)))

    @field_validator("missing_points", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return [] if value is None else value

    @field_validator("suggested_follow_up", "next_question", mode="before")
    @classmethod
    def _none_to_blank(cls, value):
        return value or ""


class FinalFeedback(BaseModel):  # Structured scoring for a finished interview
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    technical_knowledge: int = Field(ge=1, le=10)
    problem_solving: int = Field(ge=1, le=10)
    communication: int = Field(ge=1, le=10)
    experience_relevance: int = Field(ge=1, le=10)
    confidence: int = Field(ge=1, le=10)
    feedback: str = ""

    @field_validator(
        "technical_knowledge",
        "problem_solving",
        "communication",
        "experience_relevance",
        "confidence",
        mode="before",
    )
    @classmethod
    def _clamp_score(cls, value):
        return int(max(1, min(10, round(_as_number(value)))))


class SessionState(BaseModel):  # One active interview
    session_id: str
    job_description: str
    interview_type: str = "technical"
    level: str = "mid-level"
    job_type: Optional[str] = None
    history: List[Turn] = Field(default_factory=list)
    current_question: Optional[str] = None
    duration_minutes: int = Field(default=30, ge=1)
    started_at: datetime
    last_activity_at: datetime
    turn_count: int = 0
    status: StatusLiteral = "created"
    final_feedback: Optional[FinalFeedback] = None
    closing_message: Optional[str] = None
    version: int = 0

    @property
    def is_complete(self) -> bool:
        return self.status == "complete"


class StartResult(BaseModel):  # Opening turn returned to the caller
    session_id: str
    question: str
    audio: bytes


class TurnResult(BaseModel):  # Outcome of a submitted answer
    session_id: str
    status: StatusLiteral
    next_question: Optional[str] = None
    audio: Optional[bytes] = None
    final_feedback: Optional[FinalFeedback] = None
    closing_message: Optional[str] = None
    turn_count: int = 0
    history_length: int = 0

    @property
    def completed(self) -> bool:
        return self.status == "complete"


__all__ = [
    "utcnow",
    "as_utc",
    "RoleLiteral",
    "StatusLiteral",
    "Turn",
    "AnswerEvaluation",
    "FinalFeedback",
    "SessionState",
    "StartResult",
    "TurnResult",
]
