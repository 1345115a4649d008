"""Error taxonomy for the interview session orchestrator."""
from __future__ import annotations


class InterviewError(RuntimeError):  # Base orchestrator error
    pass


class InvalidInput(InterviewError, ValueError):  # Missing or blank required field
    pass


class SessionNotFound(InterviewError, KeyError):  # Unknown, deleted or expired session
    def __init__(self, session_id: str) -> None:
        super().__init__(session_id)
        self.session_id = session_id

    def __str__(self) -> str:
        return f"Session not found: {self.session_id}"


class AlreadyComplete(InterviewError):  # Answer submitted against a finished session
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session already complete: {session_id}")
        self.session_id = session_id


class ConcurrentUpdate(InterviewError):  # Session changed between snapshot and commit
    def __init__(self, session_id: str, expected: int, actual: int) -> None:
        super().__init__(f"Session {session_id} changed (expected version {expected}, found {actual})")
        self.session_id = session_id
        self.expected = expected
        self.actual = actual


class UpstreamError(RuntimeError):  # Raised by completion/speech capabilities
    pass


class UpstreamUnavailable(InterviewError):  # Retry budget exhausted
    pass


class GenerationFailed(UpstreamUnavailable):  # Turn could not be generated or voiced
    pass


class InvalidReply(InterviewError, ValueError):  # Model reply never matched the expected schema
    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.raw = raw


__all__ = [
    "InterviewError",
    "InvalidInput",
    "SessionNotFound",
    "AlreadyComplete",
    "ConcurrentUpdate",
    "UpstreamError",
    "UpstreamUnavailable",
    "GenerationFailed",
    "InvalidReply",
]
