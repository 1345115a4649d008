import pytest
from pydantic import BaseModel

from conftest import FailingCompletion, ScriptedCompletion
from config.settings import settings
from interview_session.errors import InvalidReply, UpstreamError, UpstreamUnavailable
from interview_session.retrying import RetryingCompletion, RetryPolicy, retry_hint

MESSAGES = [{"role": "user", "content": "Ask me something."}]


class _Rating(BaseModel):
    rating: int


def test_two_failures_then_success_makes_three_calls(retry_policy, sleeps):
    provider = ScriptedCompletion(UpstreamError("503"), UpstreamError("timeout"), "What is a goroutine?")
    retrying = RetryingCompletion(provider, retry_policy)

    assert retrying.complete(MESSAGES) == "What is a goroutine?"
    assert len(provider.calls) == 3
    assert sleeps == [1.0, 2.0]


def test_exhaustion_raises_upstream_unavailable(retry_policy, sleeps):
    provider = FailingCompletion()
    retrying = RetryingCompletion(provider, retry_policy)

    with pytest.raises(UpstreamUnavailable) as excinfo:
        retrying.complete(MESSAGES)
    assert provider.calls == 3
    assert sleeps == [1.0, 2.0]
    assert isinstance(excinfo.value.__cause__, UpstreamError)


def test_always_failing_provider_yields_fallback_question(retry_policy):
    retrying = RetryingCompletion(FailingCompletion(), retry_policy)

    question = retrying.complete_question(
        MESSAGES, interview_type="behavioral", level="Senior", job_type="Data Engineer"
    )
    assert question.strip()
    assert "Senior Data Engineer" in question


def test_blank_reply_counts_as_failed_attempt(retry_policy):
    provider = ScriptedCompletion("   ", "Describe your last on-call incident.")
    retrying = RetryingCompletion(provider, retry_policy)

    assert retrying.complete(MESSAGES) == "Describe your last on-call incident."
    assert len(provider.calls) == 2


def test_non_upstream_errors_are_not_retried(retry_policy, sleeps):
    provider = ScriptedCompletion(TypeError("bad payload"), "never reached")
    retrying = RetryingCompletion(provider, retry_policy)

    with pytest.raises(TypeError):
        retrying.complete(MESSAGES)
    assert len(provider.calls) == 1
    assert sleeps == []


def test_each_invocation_gets_a_fresh_budget(retry_policy):
    provider = ScriptedCompletion(
        UpstreamError("a"), UpstreamError("b"), "first", UpstreamError("c"), UpstreamError("d"), "second"
    )
    retrying = RetryingCompletion(provider, retry_policy)

    assert retrying.complete(MESSAGES) == "first"
    assert retrying.complete(MESSAGES) == "second"
    assert len(provider.calls) == 6


def test_policy_from_settings(monkeypatch):
    monkeypatch.setattr(settings, "RETRY_ATTEMPTS", 5)
    monkeypatch.setattr(settings, "RETRY_BASE_DELAY_S", 0.5)
    policy = RetryPolicy.from_settings(sleep=lambda _s: None)

    assert policy.attempts == 5
    assert policy.delay_for(1) == 0.5
    assert policy.delay_for(3) == 1.5


def test_invalid_json_is_requested_again_with_hint(retry_policy):
    provider = ScriptedCompletion("Around seven, I think.", '{"rating": 7}')
    retrying = RetryingCompletion(provider, retry_policy)

    assert retrying.complete_json(MESSAGES, _Rating).rating == 7
    assert len(provider.calls) == 2
    assert provider.calls[0] == MESSAGES
    hint = provider.calls[1][-1]
    assert hint["role"] == "system"
    assert hint["content"].startswith("The previous reply failed validation.")
    assert provider.calls[1][:-1] == MESSAGES


def test_invalid_json_twice_raises_with_last_reply(retry_policy):
    provider = ScriptedCompletion("nope", '{"rating": "high"}')
    retrying = RetryingCompletion(provider, retry_policy)

    with pytest.raises(InvalidReply) as excinfo:
        retrying.complete_json(MESSAGES, _Rating)
    assert excinfo.value.raw == '{"rating": "high"}'
    assert len(provider.calls) == 2


def test_complete_json_upstream_exhaustion_is_not_a_validation_failure(retry_policy):
    with pytest.raises(UpstreamUnavailable):
        RetryingCompletion(FailingCompletion(), retry_policy).complete_json(MESSAGES, _Rating)


def test_retry_hint_keeps_first_line_and_truncates():
    hint = retry_hint("x" * 300 + "\nsecond line")

    assert "second line" not in hint
    assert "x" * 197 + "..." in hint
    assert "x" * 198 not in hint
    assert retry_hint(None) == (
        "The previous reply failed validation. Return a single JSON object that matches the requested keys."
    )
