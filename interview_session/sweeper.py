"""Background removal of idle interview sessions."""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from config.settings import settings
from observability import log_event

from .models import as_utc, utcnow
from .store import SessionStore

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Periodically deletes sessions idle for longer than the threshold.

    Each pass copies ``(session_id, last_activity_at)`` pairs out of the store
    and then deletes candidates one at a time, re-checking idleness under the
    session's own lock so a request that touched the session in between wins.
    """

    def __init__(
        self,
        store: SessionStore,
        *,
        idle_threshold: Optional[timedelta] = None,
        interval: Optional[timedelta] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._idle_threshold = idle_threshold or timedelta(minutes=settings.IDLE_THRESHOLD_MINUTES)
        self._interval = interval or timedelta(minutes=settings.SWEEP_INTERVAL_MINUTES)
        self._clock = clock
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lifecycle = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def sweep(self, now: Optional[datetime] = None) -> List[str]:
        """Delete every session idle past the threshold; return their ids."""

        current = as_utc(now) if now else as_utc(self._clock())
        cutoff = current - self._idle_threshold
        deleted: List[str] = []
        for session_id, last_activity in self._store.activity_snapshot():
            if as_utc(last_activity) >= cutoff:
                continue
            if self._store.delete_if_idle(session_id, cutoff):
                deleted.append(session_id)
                idle_minutes = int((current - as_utc(last_activity)).total_seconds() // 60)
                log_event("session_expired", session_id, reason="idle", idle_minutes=idle_minutes)
        if deleted:
            logger.info("Expiry sweep removed %d session(s)", len(deleted))
        return deleted

    def start(self) -> None:
        with self._lifecycle:
            if self.running:
                return
            self._stop.clear()
            self._thread = threading.Thread(target=self._run, name="session-expiry-sweeper", daemon=True)
            self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        with self._lifecycle:
            self._stop.set()
            thread, self._thread = self._thread, None
        if thread is not None:
            thread.join(timeout)

    def _run(self) -> None:
        interval_s = self._interval.total_seconds()
        while not self._stop.wait(interval_s):
            try:
                self.sweep()
            except Exception:  # noqa: BLE001
                logger.exception("Expiry sweep failed")


__all__ = ["ExpirySweeper"]
