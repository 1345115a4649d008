"""Process-wide wiring for the orchestrator, its store and the expiry sweeper."""
from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from config import COMPLETION_KEY, SPEECH_KEY, get_model, is_bound, load_config_or_default
from config.settings import settings
from interview_session.orchestrator import InterviewOrchestrator
from interview_session.providers import SpeechSynthesizer
from interview_session.retrying import RetryingCompletion
from interview_session.store import SessionStore
from interview_session.sweeper import ExpirySweeper
from llm_gateway import HttpCompletionProvider
from speech import HttpSpeechSynthesizer


@dataclass
class Runtime:
    orchestrator: InterviewOrchestrator
    completion: RetryingCompletion
    speech: SpeechSynthesizer
    sweeper: ExpirySweeper

    @property
    def audio_format(self) -> str:
        return getattr(self.speech, "audio_format", "mp3")


_RUNTIME: Optional[Runtime] = None
_RUNTIME_LOCK = threading.Lock()


def _provider(key: str, default_factory: Callable[[], Any]) -> Any:
    if is_bound(key):
        return get_model(key)()
    return default_factory()


def build_runtime() -> Runtime:
    """Build a fresh runtime from the registry, falling back to HTTP providers."""

    config = load_config_or_default(Path(settings.APP_CONFIG_PATH))
    completion_provider = _provider(COMPLETION_KEY, lambda: HttpCompletionProvider(config.completion))
    speech = _provider(SPEECH_KEY, lambda: HttpSpeechSynthesizer(config.speech))
    store = SessionStore()
    completion = RetryingCompletion(completion_provider)
    return Runtime(
        orchestrator=InterviewOrchestrator(store, completion, speech),
        completion=completion,
        speech=speech,
        sweeper=ExpirySweeper(store),
    )


def get_runtime() -> Runtime:
    global _RUNTIME
    with _RUNTIME_LOCK:
        if _RUNTIME is None:
            _RUNTIME = build_runtime()
        return _RUNTIME


def get_orchestrator() -> InterviewOrchestrator:
    return get_runtime().orchestrator


def get_sweeper() -> ExpirySweeper:
    return get_runtime().sweeper


def reset_runtime() -> None:
    """Stop the sweeper and drop every live session."""

    global _RUNTIME
    with _RUNTIME_LOCK:
        runtime, _RUNTIME = _RUNTIME, None
    if runtime is not None:
        runtime.sweeper.stop()


__all__ = ["Runtime", "build_runtime", "get_runtime", "get_orchestrator", "get_sweeper", "reset_runtime"]
