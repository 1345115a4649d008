"""Templated questions used when the completion provider is unavailable."""
from __future__ import annotations

from typing import Dict, Optional

GENERIC_CONTINUATION = "Could you walk me through another example from your experience that is relevant to this role?"

_TEMPLATES: Dict[str, str] = {
    "technical": (
        "As a {level} {job_type} candidate, can you describe a technically challenging problem you solved "
        "recently, the approach you chose, and the trade-offs you considered?"
    ),
    "behavioral": (
        "Tell me about a time in a {level} {job_type} role when you had to handle a disagreement with a "
        "teammate. What did you do and what was the outcome?"
    ),
    "mixed": (
        "To start, could you give me an overview of your background as a {level} {job_type} and walk me "
        "through one project where both your technical and collaboration skills mattered?"
    ),
}

_DEFAULT_TEMPLATE = (
    "Tell me about your background and your experience with {level} {job_type} work. "
    "What makes you a strong fit for this position?"
)


def _clean(value: Optional[str], default: str) -> str:
    text = (value or "").strip()
    return text or default


def fallback_question(interview_type: Optional[str], level: Optional[str] = None, job_type: Optional[str] = None) -> str:
    """Return a locally rendered question for ``interview_type``.

    Unrecognized types get a generic opener. The result is never empty.
    """

    key = _clean(interview_type, "").lower()
    template = _TEMPLATES.get(key, _DEFAULT_TEMPLATE)
    return template.format(
        level=_clean(level, "mid-level"),
        job_type=_clean(job_type, "professional"),
    )


def describe_role(interview_type: str, level: str, job_type: str) -> str:
    """Compose a job description from an interview profile."""

    return f"{level.strip()} {job_type.strip()} position requiring {interview_type.strip()} expertise"


__all__ = ["GENERIC_CONTINUATION", "fallback_question", "describe_role"]
