"""Job description analysis for interview preparation."""
from __future__ import annotations

import logging
from typing import List

from pydantic import BaseModel, Field

from .errors import GenerationFailed, InvalidInput, InvalidReply, UpstreamUnavailable
from .retrying import RetryingCompletion
from .transcript import build_messages

logger = logging.getLogger(__name__)


class RoleAnalysis(BaseModel):
    title: str = ""
    level: str = ""
    domain: str = ""
    type: str = ""


class RequiredSkills(BaseModel):
    technical: List[str] = Field(default_factory=list)
    soft: List[str] = Field(default_factory=list)


class SuggestedTopics(BaseModel):
    technical: List[str] = Field(default_factory=list)
    behavioral: List[str] = Field(default_factory=list)
    domain: List[str] = Field(default_factory=list)


class InterviewRound(BaseModel):
    type: str = ""
    focus: str = ""
    duration: str = ""


class InterviewStructure(BaseModel):
    rounds: List[InterviewRound] = Field(default_factory=list)


class JobAnalysis(BaseModel):
    role_analysis: RoleAnalysis = Field(default_factory=RoleAnalysis)
    required_skills: RequiredSkills = Field(default_factory=RequiredSkills)
    key_responsibilities: List[str] = Field(default_factory=list)
    suggested_topics: SuggestedTopics = Field(default_factory=SuggestedTopics)
    interview_structure: InterviewStructure = Field(default_factory=InterviewStructure)


def analyze_job_description(job_description: str, completion: RetryingCompletion) -> JobAnalysis:
    """Extract role, skills and suggested topics from a job description.

    Raises:
        InvalidInput: When ``job_description`` is blank.
        GenerationFailed: When the model is unavailable or replies with invalid JSON.
    """

    text = (job_description or "").strip()
    if not text:
        raise InvalidInput("Job description is required")
    logger.info("Analyzing job description (%d chars)", len(text))
    try:
        return completion.complete_json(build_messages(text, [], "analyze"), JobAnalysis)
    except UpstreamUnavailable as exc:
        raise GenerationFailed("Unable to analyze job description") from exc
    except InvalidReply as exc:
        logger.warning("Job analysis reply failed validation: %s", exc)
        raise GenerationFailed("Job analysis reply was not valid JSON") from exc


__all__ = [
    "JobAnalysis",
    "RoleAnalysis",
    "RequiredSkills",
    "SuggestedTopics",
    "InterviewRound",
    "InterviewStructure",
    "analyze_job_description",
]
