from __future__ import annotations  # Interview state machine: created -> in_progress -> complete

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional, Type, TypeVar

from pydantic import BaseModel

from config.settings import settings
from observability import log_event, span

from .errors import (
    AlreadyComplete,
    GenerationFailed,
    InvalidInput,
    InvalidReply,
    SessionNotFound,
    UpstreamError,
    UpstreamUnavailable,
)
from .fallback_questions import GENERIC_CONTINUATION
from .models import AnswerEvaluation, FinalFeedback, SessionState, StartResult, Turn, TurnResult, as_utc, utcnow
from .providers import SpeechSynthesizer
from .retrying import RetryingCompletion, RetryPolicy
from .store import SessionStore
from .transcript import build_messages

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

CLOSING_MESSAGE = (
    "Thank you for your time today. That concludes our interview; "
    "we appreciate the thought you put into your answers."
)
NEUTRAL_SCORE = 5


def select_next_question(evaluation: AnswerEvaluation, threshold: float) -> str:  # Follow-up when incomplete, else move on
    follow_up = evaluation.suggested_follow_up.strip()
    next_question = evaluation.next_question.strip()
    if evaluation.completeness < threshold:
        preferred, other = follow_up, next_question
    else:
        preferred, other = next_question, follow_up
    return preferred or other or GENERIC_CONTINUATION


class InterviewOrchestrator:  # Drives sessions through the store and upstream capabilities
    def __init__(
        self,
        store: SessionStore,
        completion: RetryingCompletion,
        speech: SpeechSynthesizer,
        *,
        speech_policy: Optional[RetryPolicy] = None,
        clock: Callable[[], datetime] = utcnow,
        max_history_entries: Optional[int] = None,
        completeness_threshold: Optional[float] = None,
        default_duration_minutes: Optional[int] = None,
    ) -> None:
        self._store = store
        self._completion = completion
        self._speech = speech
        self._speech_policy = speech_policy or completion.policy
        self._clock = clock
        self._max_history = max_history_entries or settings.MAX_HISTORY_ENTRIES
        self._threshold = (
            completeness_threshold if completeness_threshold is not None else settings.COMPLETENESS_THRESHOLD
        )
        self._default_duration = default_duration_minutes or settings.DEFAULT_DURATION_MINUTES

    @property
    def store(self) -> SessionStore:
        return self._store

    def start(
        self,
        job_description: Optional[str],
        duration_minutes: Optional[int] = None,
        *,
        interview_type: Optional[str] = None,
        level: Optional[str] = None,
        job_type: Optional[str] = None,
    ) -> StartResult:  # Create a session and issue the opening question
        description = (job_description or "").strip()
        if not description:
            raise InvalidInput("Job description is required")
        duration = self._default_duration if duration_minutes is None else duration_minutes
        if duration <= 0:
            raise InvalidInput("Duration must be a positive number of minutes")
        state = self._store.create(
            job_description=description,
            duration_minutes=duration,
            interview_type=(interview_type or settings.DEFAULT_INTERVIEW_TYPE).strip().lower(),
            level=(level or settings.DEFAULT_LEVEL).strip(),
            job_type=job_type.strip() if job_type else None,
        )
        session_id = state.session_id
        committed = False
        try:
            messages = build_messages(
                description,
                [],
                "opening",
                interview_type=state.interview_type,
                level=state.level,
                job_type=state.job_type,
            )
            with span(session_id, "opening_question"):
                question = self._completion.complete_question(
                    messages,
                    interview_type=state.interview_type,
                    level=state.level,
                    job_type=state.job_type,
                )
            audio = self._voice(session_id, question)
            self._store.mutate(session_id, lambda draft: self._open(draft, question))
            committed = True
        finally:
            if not committed:
                self._store.delete(session_id)
        log_event("session_started", session_id, status="in_progress", turn=1, history=1)
        return StartResult(session_id=session_id, question=question, audio=audio)

    def submit_answer(self, session_id: str, answer_text: Optional[str], is_final: bool = False) -> TurnResult:
        """Record an answer and either ask the next question or conclude.

        Nothing is committed until every upstream call for the turn has
        succeeded; a failure leaves the session exactly as it was.
        """

        snapshot = self._store.get(session_id)
        if snapshot.is_complete:
            raise AlreadyComplete(session_id)
        if snapshot.status != "in_progress":
            raise SessionNotFound(session_id)
        if is_final:
            return self._finish(snapshot, (answer_text or "").strip())
        answer = (answer_text or "").strip()
        if not answer:
            raise InvalidInput("Answer text is required")

        candidate_turn = Turn(role="candidate", content=answer)
        history = [*snapshot.history, candidate_turn]
        reason = self._termination_reason(snapshot, len(history))
        if reason is not None:
            return self._conclude(snapshot, candidate_turn, reason)

        messages = build_messages(
            snapshot.job_description,
            history,
            "evaluate",
            interview_type=snapshot.interview_type,
            level=snapshot.level,
            job_type=snapshot.job_type,
            question=snapshot.current_question,
            answer=answer,
        )
        evaluation = self._evaluate(session_id, messages)
        question = select_next_question(evaluation, self._threshold)
        audio = self._voice(session_id, question)

        def _commit(draft: SessionState) -> TurnResult:
            if self._time_exceeded(draft):
                return self._close(draft, candidate_turn)
            draft.history.append(candidate_turn)
            draft.history.append(Turn(role="interviewer", content=question))
            draft.current_question = question
            draft.turn_count += 1
            draft.last_activity_at = self._clock()
            return TurnResult(
                session_id=session_id,
                status=draft.status,
                next_question=question,
                audio=audio,
                turn_count=draft.turn_count,
                history_length=len(draft.history),
            )

        result = self._store.mutate(session_id, _commit, expected_version=snapshot.version)
        if result.completed:
            log_event("session_completed", session_id, reason="time_limit", history=result.history_length)
        else:
            log_event("turn_issued", session_id, turn=result.turn_count, history=result.history_length)
        return result

    def get_session(self, session_id: str) -> SessionState:
        state = self._store.get(session_id)
        if state.status == "created":
            raise SessionNotFound(session_id)
        return state

    def _open(self, draft: SessionState, question: str) -> None:
        draft.status = "in_progress"
        draft.history = [Turn(role="interviewer", content=question)]
        draft.current_question = question
        draft.turn_count = 1
        draft.last_activity_at = self._clock()

    def _termination_reason(self, state: SessionState, history_length: int) -> Optional[str]:
        if history_length >= self._max_history:
            return "history_cap"
        if self._time_exceeded(state):
            return "time_limit"
        return None

    def _time_exceeded(self, state: SessionState) -> bool:
        elapsed = as_utc(self._clock()) - as_utc(state.started_at)
        return elapsed > timedelta(minutes=state.duration_minutes)

    def _close(self, draft: SessionState, candidate_turn: Turn) -> TurnResult:  # Record the answer and conclude
        draft.history.append(candidate_turn)
        draft.status = "complete"
        draft.closing_message = CLOSING_MESSAGE
        draft.last_activity_at = self._clock()
        return TurnResult(
            session_id=draft.session_id,
            status=draft.status,
            closing_message=CLOSING_MESSAGE,
            turn_count=draft.turn_count,
            history_length=len(draft.history),
        )

    def _conclude(self, snapshot: SessionState, candidate_turn: Turn, reason: str) -> TurnResult:
        result = self._store.mutate(
            snapshot.session_id,
            lambda draft: self._close(draft, candidate_turn),
            expected_version=snapshot.version,
        )
        log_event("session_completed", snapshot.session_id, reason=reason, history=result.history_length)
        return result

    def _finish(self, snapshot: SessionState, final_answer: str) -> TurnResult:
        messages = build_messages(
            snapshot.job_description,
            snapshot.history,
            "final",
            interview_type=snapshot.interview_type,
            level=snapshot.level,
            job_type=snapshot.job_type,
            answer=final_answer or None,
        )
        feedback = self._score(snapshot.session_id, messages)

        def _commit(draft: SessionState) -> TurnResult:
            draft.final_feedback = feedback
            draft.status = "complete"
            draft.last_activity_at = self._clock()
            return TurnResult(
                session_id=draft.session_id,
                status=draft.status,
                final_feedback=feedback,
                turn_count=draft.turn_count,
                history_length=len(draft.history),
            )

        result = self._store.mutate(snapshot.session_id, _commit, expected_version=snapshot.version)
        log_event("session_completed", snapshot.session_id, reason="final_answer", history=result.history_length)
        return result

    def _complete_json(self, session_id: str, messages, schema: Type[M], name: str) -> M:
        try:
            with span(session_id, name):
                return self._completion.complete_json(messages, schema)
        except UpstreamUnavailable as exc:
            log_event("generation_failed", session_id, level=logging.WARNING, reason=name, error=str(exc))
            raise GenerationFailed(f"Unable to generate {name.replace('_', ' ')}") from exc

    def _voice(self, session_id: str, text: str) -> bytes:
        def _attempt() -> bytes:
            audio = self._speech.synthesize(text)
            if not audio:
                raise UpstreamError("Speech synthesizer returned no audio")
            return audio

        try:
            with span(session_id, "speech"):
                return self._speech_policy.run(_attempt, label="speech")
        except UpstreamUnavailable as exc:
            log_event("generation_failed", session_id, level=logging.WARNING, reason="speech", error=str(exc))
            raise GenerationFailed("Unable to synthesize question audio") from exc

    def _evaluate(self, session_id: str, messages) -> AnswerEvaluation:
        try:
            return self._complete_json(session_id, messages, AnswerEvaluation, "evaluate_answer")
        except InvalidReply as exc:
            logger.warning("Unparseable answer evaluation for session %s: %s", session_id, exc)
            return AnswerEvaluation()

    def _score(self, session_id: str, messages) -> FinalFeedback:
        try:
            return self._complete_json(session_id, messages, FinalFeedback, "final_feedback")
        except InvalidReply as exc:
            logger.warning("Unparseable final feedback for session %s, using neutral scores: %s", session_id, exc)
            return FinalFeedback(
                technical_knowledge=NEUTRAL_SCORE,
                problem_solving=NEUTRAL_SCORE,
                communication=NEUTRAL_SCORE,
                experience_relevance=NEUTRAL_SCORE,
                confidence=NEUTRAL_SCORE,
                feedback=exc.raw.strip(),
            )


__all__ = ["InterviewOrchestrator", "select_next_question", "CLOSING_MESSAGE"]
