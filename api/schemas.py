"""Pydantic schemas for the interview session API."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from interview_session.models import FinalFeedback, StatusLiteral, Turn


class AnalyzeReq(BaseModel):
    job_description: str


class StartReq(BaseModel):
    job_description: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=1)
    interview_type: Optional[str] = None
    level: Optional[str] = None
    job_type: Optional[str] = None


class RespondReq(BaseModel):
    session_id: str
    answer: str = ""
    is_final: bool = False


class StartResp(BaseModel):
    session_id: str
    question: str
    audio: str
    audio_format: str


class RespondResp(BaseModel):
    session_id: str
    status: StatusLiteral
    next_question: Optional[str] = None
    audio: Optional[str] = None
    audio_format: Optional[str] = None
    final_feedback: Optional[FinalFeedback] = None
    closing_message: Optional[str] = None
    turn_count: int
    history_length: int


class SessionSummary(BaseModel):
    session_id: str
    status: StatusLiteral
    job_description: str
    interview_type: str
    level: str
    job_type: Optional[str] = None
    duration_minutes: int
    current_question: Optional[str] = None
    turn_count: int
    history: List[Turn] = Field(default_factory=list)
    started_at: datetime
    last_activity_at: datetime
    final_feedback: Optional[FinalFeedback] = None
    closing_message: Optional[str] = None
