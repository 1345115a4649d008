"""Role-tagged message assembly for completion requests.

Every builder here is a pure function of its arguments; the session history is
read, never modified.
"""
from __future__ import annotations

from textwrap import dedent
from typing import Dict, List, Literal, Optional, Sequence

from .models import Turn

ModeLiteral = Literal["opening", "evaluate", "final", "analyze"]

_ROLE_MAP = {"interviewer": "assistant", "candidate": "user"}

EVALUATION_KEYS = (
    "completeness",
    "clarity",
    "technical_accuracy",
    "missing_points",
    "suggested_follow_up",
    "next_question",
)

FEEDBACK_KEYS = (
    "technical_knowledge",
    "problem_solving",
    "communication",
    "experience_relevance",
    "confidence",
    "feedback",
)


def build_messages(
    job_description: str,
    history: Sequence[Turn],
    mode: ModeLiteral,
    *,
    interview_type: str = "technical",
    level: str = "mid-level",
    job_type: Optional[str] = None,
    question: Optional[str] = None,
    answer: Optional[str] = None,
) -> List[Dict[str, str]]:
    """Build the system framing plus transcript turns for ``mode``."""

    if mode == "analyze":
        return _analysis_messages(job_description)
    messages: List[Dict[str, str]] = [
        {"role": "system", "content": _system_framing(mode, interview_type, level, job_type)},
    ]
    if mode == "opening":
        messages.append(
            {
                "role": "user",
                "content": f"Job Description: {job_description}\n\nGreet the candidate and ask the opening question.",
            }
        )
        return messages
    messages.append({"role": "user", "content": f"Job Description: {job_description}"})
    turns = list(history)
    if mode == "evaluate":
        # The answer under evaluation travels only in the task message
        pending = turns.pop() if turns and turns[-1].role == "candidate" else None
        latest = answer if answer is not None else (pending.content if pending else "")
        messages.extend(_transcript_turns(turns))
        messages.append({"role": "user", "content": _evaluation_task(question or "", latest)})
        return messages
    if mode != "final":
        raise ValueError(f"Unsupported transcript mode {mode}")
    messages.extend(_transcript_turns(turns))
    if answer:
        messages.append({"role": "user", "content": answer})
    messages.append({"role": "user", "content": _feedback_task()})
    return messages


def _transcript_turns(history: Sequence[Turn]) -> List[Dict[str, str]]:
    return [{"role": _ROLE_MAP[turn.role], "content": turn.content} for turn in history]


def _system_framing(mode: ModeLiteral, interview_type: str, level: str, job_type: Optional[str]) -> str:
    role = f"{level} {job_type}".strip() if job_type else level
    if mode == "opening":
        return dedent(
            f"""
            You are an experienced {interview_type} interviewer hiring for a {role} position.
            Open the interview with a short greeting and a one-sentence introduction of the role,
            then ask a single {interview_type} question grounded in the job requirements.
            Reply with the spoken text only: no headings, lists or evaluation notes.
            """
        ).strip()
    if mode == "evaluate":
        return dedent(
            f"""
            You are conducting a {interview_type} interview for a {role} position.
            For the candidate's latest answer, judge completeness, clarity and technical accuracy,
            list the key points that were missing, propose a probing follow-up on the same topic,
            and propose the next question on a new topic the interview has not covered yet.
            """
        ).strip()
    return dedent(
        f"""
        You are concluding a {interview_type} interview for a {role} position.
        Score the candidate across the whole conversation, using the full 1-10 range,
        and write constructive feedback naming strengths and concrete improvements.
        """
    ).strip()


def _evaluation_task(question: str, answer: str) -> str:
    keys = ", ".join(EVALUATION_KEYS)
    return dedent(
        f"""
        Current question: {question}
        Latest answer: {answer}

        Reply with a single JSON object with keys {keys}.
        completeness, clarity and technical_accuracy are numbers between 0 and 1;
        missing_points is a list of strings; suggested_follow_up and next_question are single questions.
        """
    ).strip()


def _feedback_task() -> str:
    keys = ", ".join(FEEDBACK_KEYS)
    return dedent(
        f"""
        The interview is over. Reply with a single JSON object with keys {keys}.
        Every score is an integer from 1 to 10; feedback is a short paragraph.
        """
    ).strip()


def _analysis_messages(job_description: str) -> List[Dict[str, str]]:
    system = dedent(
        """
        You are an expert interview preparation assistant. Analyze the job description and reply with JSON:
        {
          "role_analysis": {"title": "...", "level": "...", "domain": "...", "type": "technical|management|..."},
          "required_skills": {"technical": ["..."], "soft": ["..."]},
          "key_responsibilities": ["..."],
          "suggested_topics": {"technical": ["..."], "behavioral": ["..."], "domain": ["..."]},
          "interview_structure": {"rounds": [{"type": "...", "focus": "...", "duration": "..."}]}
        }
        """
    ).strip()
    return [
        {"role": "system", "content": system},
        {
            "role": "user",
            "content": f"Analyze this job description and provide structured interview preparation guidance:\n\n{job_description}",
        },
    ]


__all__ = ["ModeLiteral", "build_messages", "EVALUATION_KEYS", "FEEDBACK_KEYS"]
