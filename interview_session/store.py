from __future__ import annotations  # Thread-safe in-memory session store

import threading
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple, TypeVar
from uuid import uuid4

from .errors import AlreadyComplete, ConcurrentUpdate, SessionNotFound
from .models import SessionState, as_utc, utcnow

R = TypeVar("R")


def new_session_id() -> str:  # Millisecond timestamp plus 128 bits of entropy
    return f"{int(time.time() * 1000):x}-{uuid4().hex}"


class SessionStore:  # Keyed map of live sessions with per-session locks
    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = new_session_id,
    ) -> None:
        self._sessions: Dict[str, SessionState] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()
        self._clock = clock
        self._id_factory = id_factory

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._guard:
            return session_id in self._sessions

    def create(
        self,
        *,
        job_description: str,
        duration_minutes: int,
        interview_type: str,
        level: str,
        job_type: Optional[str] = None,
    ) -> SessionState:  # Register a new session in the created state
        now = self._clock()
        state = SessionState(
            session_id=self._id_factory(),
            job_description=job_description,
            interview_type=interview_type,
            level=level,
            job_type=job_type,
            duration_minutes=duration_minutes,
            started_at=now,
            last_activity_at=now,
        )
        with self._guard:
            if state.session_id in self._sessions:
                raise RuntimeError(f"Session id collision: {state.session_id}")
            self._sessions[state.session_id] = state
            self._locks[state.session_id] = threading.Lock()
        return state.model_copy(deep=True)

    def get(self, session_id: str) -> SessionState:  # Snapshot copy of a session
        with self._lock_for(session_id):
            return self._stored(session_id).model_copy(deep=True)

    def mutate(
        self,
        session_id: str,
        fn: Callable[[SessionState], R],
        *,
        expected_version: Optional[int] = None,
    ) -> R:
        """Apply ``fn`` to a draft copy and commit it atomically.

        The draft replaces the stored session only when ``fn`` returns; an
        exception leaves the stored session untouched.
        """

        with self._lock_for(session_id):
            stored = self._stored(session_id)
            if expected_version is not None and stored.version != expected_version:
                if stored.is_complete:
                    raise AlreadyComplete(session_id)
                raise ConcurrentUpdate(session_id, expected_version, stored.version)
            draft = stored.model_copy(deep=True)
            result = fn(draft)
            draft.version = stored.version + 1
            with self._guard:
                self._sessions[session_id] = draft
            return result

    def delete(self, session_id: str) -> bool:  # Drop session state
        return self._delete_when(session_id, lambda _state: True)

    def delete_if_idle(self, session_id: str, cutoff: datetime) -> bool:  # Drop session untouched since ``cutoff``
        cutoff = as_utc(cutoff)
        return self._delete_when(session_id, lambda state: as_utc(state.last_activity_at) < cutoff)

    def activity_snapshot(self) -> List[Tuple[str, datetime]]:  # (session_id, last_activity_at) pairs
        with self._guard:
            return [(sid, state.last_activity_at) for sid, state in self._sessions.items()]

    def _delete_when(self, session_id: str, predicate: Callable[[SessionState], bool]) -> bool:
        with self._guard:
            lock = self._locks.get(session_id)
        if lock is None:
            return False
        with lock:
            with self._guard:
                state = self._sessions.get(session_id)
                if state is None or not predicate(state):
                    return False
                del self._sessions[session_id]
                self._locks.pop(session_id, None)
                return True

    def _lock_for(self, session_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(session_id)
        if lock is None:
            raise SessionNotFound(session_id)
        return lock

    def _stored(self, session_id: str) -> SessionState:
        with self._guard:
            stored = self._sessions.get(session_id)
        if stored is None:
            raise SessionNotFound(session_id)
        return stored


__all__ = ["SessionStore", "new_session_id"]
