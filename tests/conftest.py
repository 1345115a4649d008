import json
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

os.environ.setdefault("ENABLE_FILE_LOGS", "0")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.registry import COMPLETION_KEY, SPEECH_KEY, unbind_model
from config.settings import settings
from interview_session.errors import UpstreamError
from interview_session.orchestrator import InterviewOrchestrator
from interview_session.retrying import RetryingCompletion, RetryPolicy
from interview_session.store import SessionStore
from services.runtime import reset_runtime
from speech import require_text


def evaluation_reply(completeness=0.9, next_question="", follow_up="", **extra):
    payload = {
        "completeness": completeness,
        "clarity": 0.8,
        "technical_accuracy": 0.8,
        "missing_points": [],
        "suggested_follow_up": follow_up,
        "next_question": next_question,
    }
    payload.update(extra)
    return json.dumps(payload)


def feedback_reply(score=7, feedback="Solid answers with clear structure."):
    return json.dumps(
        {
            "technical_knowledge": score,
            "problem_solving": score,
            "communication": score,
            "experience_relevance": score,
            "confidence": score,
            "feedback": feedback,
        }
    )


class ScriptedCompletion:
    """Completion provider replaying queued replies.

    Queued exceptions are raised, callables are invoked with the messages.
    Once the queue is empty replies are derived from the request kind.
    """

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []
        self._questions = 0

    def generate(self, messages):
        self.calls.append(list(messages))
        if self.replies:
            item = self.replies.pop(0)
            if isinstance(item, Exception):
                raise item
            return item(messages) if callable(item) else item
        return self._default(messages)

    def _default(self, messages):
        last = next((m["content"] for m in reversed(messages) if m["role"] == "user"), "")
        if "suggested_follow_up" in last:
            self._questions += 1
            return evaluation_reply(
                completeness=0.9,
                next_question=f"Question {self._questions + 1}: how would you scale that design?",
                follow_up="Could you go deeper on that?",
            )
        if "experience_relevance" in last:
            return feedback_reply()
        return "Welcome! Tell me about a backend system you designed end to end."


class FailingCompletion:
    def __init__(self):
        self.calls = 0

    def generate(self, messages):
        self.calls += 1
        raise UpstreamError("completion offline")


class FakeSpeech:
    audio_format = "mp3"

    def __init__(self, failures=0):
        self.calls = []
        self.failures = failures

    def synthesize(self, text):
        cleaned = require_text(text)
        self.calls.append(cleaned)
        if self.failures:
            self.failures -= 1
            raise UpstreamError("speech offline")
        return b"AUDIO:" + cleaned.encode("utf-8")


class Clock:
    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def isolated_runtime(monkeypatch):
    monkeypatch.setattr(settings, "RETRY_BASE_DELAY_S", 0.0, raising=False)
    unbind_model(COMPLETION_KEY)
    unbind_model(SPEECH_KEY)
    reset_runtime()
    try:
        yield
    finally:
        reset_runtime()
        unbind_model(COMPLETION_KEY)
        unbind_model(SPEECH_KEY)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def retry_policy(sleeps):
    return RetryPolicy(attempts=3, base_delay_s=1.0, sleep=sleeps.append)


@pytest.fixture
def completion():
    return ScriptedCompletion()


@pytest.fixture
def speech():
    return FakeSpeech()


@pytest.fixture
def store(clock):
    return SessionStore(clock=clock)


@pytest.fixture
def orchestrator(store, completion, speech, clock, retry_policy):
    return InterviewOrchestrator(
        store,
        RetryingCompletion(completion, retry_policy),
        speech,
        clock=clock,
        max_history_entries=10,
        completeness_threshold=0.7,
        default_duration_minutes=30,
    )
