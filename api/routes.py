"""FastAPI routes for mock-interview session control."""
from __future__ import annotations

import base64
import logging
from typing import Dict, Optional, Type

from fastapi import APIRouter, HTTPException

from api.schemas import AnalyzeReq, RespondReq, RespondResp, SessionSummary, StartReq, StartResp
from interview_session.analysis import JobAnalysis, analyze_job_description
from interview_session.errors import (
    AlreadyComplete,
    ConcurrentUpdate,
    InterviewError,
    InvalidInput,
    SessionNotFound,
    UpstreamUnavailable,
)
from interview_session.fallback_questions import describe_role
from services.runtime import get_runtime


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/interview")

_STATUS_CODES: Dict[Type[InterviewError], int] = {
    InvalidInput: 400,
    SessionNotFound: 404,
    AlreadyComplete: 409,
    ConcurrentUpdate: 409,
    UpstreamUnavailable: 502,
}


def _http_error(exc: InterviewError) -> HTTPException:
    for kind, status_code in _STATUS_CODES.items():
        if isinstance(exc, kind):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


def _encode_audio(audio: Optional[bytes]) -> Optional[str]:
    if audio is None:
        return None
    return base64.b64encode(audio).decode("ascii")


def _job_description(payload: StartReq) -> Optional[str]:
    if payload.job_description and payload.job_description.strip():
        return payload.job_description
    if payload.interview_type and payload.level and payload.job_type:
        return describe_role(payload.interview_type, payload.level, payload.job_type)
    return payload.job_description


@router.post("/analyze", response_model=JobAnalysis)
def analyze(payload: AnalyzeReq) -> JobAnalysis:
    try:
        return analyze_job_description(payload.job_description, get_runtime().completion)
    except InterviewError as exc:
        raise _http_error(exc) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error during job description analysis")
        raise HTTPException(status_code=500, detail="Unable to analyze job description") from exc


@router.post("/start", response_model=StartResp)
def start(payload: StartReq) -> StartResp:
    runtime = get_runtime()
    try:
        result = runtime.orchestrator.start(
            _job_description(payload),
            payload.duration_minutes,
            interview_type=payload.interview_type,
            level=payload.level,
            job_type=payload.job_type,
        )
    except InterviewError as exc:
        raise _http_error(exc) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error while starting interview")
        raise HTTPException(status_code=500, detail="Unable to start interview") from exc
    return StartResp(
        session_id=result.session_id,
        question=result.question,
        audio=_encode_audio(result.audio) or "",
        audio_format=runtime.audio_format,
    )


@router.post("/respond", response_model=RespondResp, response_model_exclude_none=True)
def respond(payload: RespondReq) -> RespondResp:
    runtime = get_runtime()
    try:
        result = runtime.orchestrator.submit_answer(payload.session_id, payload.answer, payload.is_final)
    except InterviewError as exc:
        raise _http_error(exc) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error while processing answer")
        raise HTTPException(status_code=500, detail="Unable to process answer") from exc
    return RespondResp(
        session_id=result.session_id,
        status=result.status,
        next_question=result.next_question,
        audio=_encode_audio(result.audio),
        audio_format=runtime.audio_format if result.audio is not None else None,
        final_feedback=result.final_feedback,
        closing_message=result.closing_message,
        turn_count=result.turn_count,
        history_length=result.history_length,
    )


@router.get("/sessions/{session_id}", response_model=SessionSummary)
def fetch_session(session_id: str) -> SessionSummary:
    try:
        state = get_runtime().orchestrator.get_session(session_id)
    except SessionNotFound as exc:
        raise _http_error(exc) from exc
    return SessionSummary.model_validate(state.model_dump())
