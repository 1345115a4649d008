"""Bounded retry with linear backoff around upstream capabilities."""
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from config.settings import settings
from llm_gateway import parse_json

from .errors import InvalidReply, UpstreamError, UpstreamUnavailable
from .fallback_questions import fallback_question
from .providers import CompletionProvider

logger = logging.getLogger(__name__)

R = TypeVar("R")
M = TypeVar("M", bound=BaseModel)


@dataclass
class RetryPolicy:
    """Attempt budget with ``attempt * base_delay_s`` sleeps between tries."""

    attempts: int = 3
    base_delay_s: float = 1.0
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    @classmethod
    def from_settings(cls, sleep: Optional[Callable[[float], None]] = None) -> "RetryPolicy":
        return cls(
            attempts=settings.RETRY_ATTEMPTS,
            base_delay_s=settings.RETRY_BASE_DELAY_S,
            sleep=sleep or time.sleep,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay after the failed ``attempt`` (1-based)."""

        return attempt * self.base_delay_s

    def run(self, fn: Callable[[], R], *, label: str) -> R:
        """Call ``fn`` until it succeeds or the budget is spent.

        Only ``UpstreamError`` is retried; anything else propagates at once.

        Raises:
            UpstreamUnavailable: After ``attempts`` consecutive upstream failures.
        """

        last_error: Optional[Exception] = None
        for attempt in range(1, self.attempts + 1):
            try:
                return fn()
            except UpstreamError as exc:
                last_error = exc
                logger.warning("%s attempt %d/%d failed: %s", label, attempt, self.attempts, exc)
                if attempt < self.attempts:
                    self.sleep(self.delay_for(attempt))
        raise UpstreamUnavailable(f"{label} failed after {self.attempts} attempts") from last_error


class RetryingCompletion:
    """CompletionProvider wrapper applying a RetryPolicy per call."""

    def __init__(self, provider: CompletionProvider, policy: Optional[RetryPolicy] = None) -> None:
        self._provider = provider
        self._policy = policy or RetryPolicy.from_settings()

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def complete(self, messages: Sequence[Dict[str, str]]) -> str:
        def _attempt() -> str:
            text = self._provider.generate(list(messages))
            if not text or not text.strip():
                raise UpstreamError("Completion returned empty text")
            return text.strip()

        return self._policy.run(_attempt, label="completion")

    def complete_question(
        self,
        messages: Sequence[Dict[str, str]],
        *,
        interview_type: Optional[str],
        level: Optional[str] = None,
        job_type: Optional[str] = None,
    ) -> str:
        """Like ``complete`` but degrades to a templated question on exhaustion."""

        try:
            return self.complete(messages)
        except UpstreamUnavailable as exc:
            logger.warning("Completion unavailable, using fallback question: %s", exc)
            return fallback_question(interview_type, level, job_type)

    def complete_json(
        self,
        messages: Sequence[Dict[str, str]],
        schema: Type[M],
        *,
        max_validation_retries: int = 1,
    ) -> M:
        """Request a JSON reply validated against ``schema``.

        A reply that fails validation is re-requested with a hint naming the
        error, up to ``max_validation_retries`` times.

        Raises:
            UpstreamUnavailable: When any request exhausts the retry policy.
            InvalidReply: When every reply failed validation; carries the last raw reply.
        """

        attempts = max_validation_retries + 1
        attempt_messages = list(messages)
        raw = ""
        last_error: Optional[Exception] = None
        for attempt in range(attempts):
            if last_error is not None:
                attempt_messages = [*messages, {"role": "system", "content": retry_hint(str(last_error))}]
            raw = self.complete(attempt_messages)
            try:
                return parse_json(schema, raw)
            except (json.JSONDecodeError, ValidationError) as exc:
                logger.warning("%s reply failed validation (attempt %d/%d): %s", schema.__name__, attempt + 1, attempts, exc)
                last_error = exc
        raise InvalidReply(f"{schema.__name__} reply failed validation", raw) from last_error


def retry_hint(error_text: Optional[str]) -> str:  # Re-prompt naming the last validation error
    base = "The previous reply failed validation."
    if error_text:
        reason = error_text.splitlines()[0].strip()
        if len(reason) > 200:
            reason = reason[:197] + "..."
        base += f" Reason: {reason}."
    return base + " Return a single JSON object that matches the requested keys."


__all__ = ["RetryPolicy", "RetryingCompletion", "retry_hint"]
