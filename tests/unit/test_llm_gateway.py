from __future__ import annotations

import json

import pytest
from pydantic import BaseModel

from config import LlmRoute
from interview_session.errors import UpstreamError
from llm_gateway import HttpCompletionProvider, LlmGatewayError, complete_text, parse_json


class _Response:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("not json")
        return self._payload


class _Client:
    """Returns queued responses and records every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def post(self, url, *, json, headers, timeout):
        self.requests.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _reply(content):
    return _Response(payload={"choices": [{"message": {"content": content}}]})


def _route(**overrides):
    data = {
        "name": "test-chat",
        "base_url": "http://llm.local",
        "endpoint": "/v1/chat/completions",
        "model": "gpt-4",
        "fallback_model": "gpt-3.5-turbo",
        "api_key_env": "TEST_LLM_KEY",
    }
    data.update(overrides)
    return LlmRoute(**data)


class _Score(BaseModel):
    score: int


def test_complete_text_posts_chat_payload(monkeypatch):
    monkeypatch.setenv("TEST_LLM_KEY", "secret")
    client = _Client(_reply("Hello there"))

    text = complete_text([{"role": "user", "content": "hi"}], cfg=_route(), client=client)

    assert text == "Hello there"
    request = client.requests[0]
    assert request["url"] == "http://llm.local/v1/chat/completions"
    assert request["json"]["model"] == "gpt-4"
    assert request["json"]["messages"] == [{"role": "user", "content": "hi"}]
    assert request["headers"]["Authorization"] == "Bearer secret"


@pytest.mark.parametrize(
    "response",
    [_Response(status_code=503), _Response(payload=None), _Response(payload={"choices": []}), OSError("reset")],
)
def test_complete_text_failures_are_upstream_errors(response):
    with pytest.raises(LlmGatewayError) as excinfo:
        complete_text([{"role": "user", "content": "hi"}], cfg=_route(), client=_Client(response))
    assert isinstance(excinfo.value, UpstreamError)


def test_provider_switches_to_fallback_model_for_good():
    client = _Client(_Response(status_code=500), _reply("from fallback"), _reply("again"))
    provider = HttpCompletionProvider(_route(), client=client)

    assert provider.generate([{"role": "user", "content": "q"}]) == "from fallback"
    assert provider.active_model == "gpt-3.5-turbo"
    assert provider.generate([{"role": "user", "content": "q"}]) == "again"
    assert [request["json"]["model"] for request in client.requests] == ["gpt-4", "gpt-3.5-turbo", "gpt-3.5-turbo"]


def test_provider_without_fallback_raises():
    provider = HttpCompletionProvider(_route(fallback_model=None), client=_Client(_Response(status_code=500)))
    with pytest.raises(LlmGatewayError):
        provider.generate([{"role": "user", "content": "q"}])


def test_parse_json_strips_code_fences():
    content = "```json\n" + json.dumps({"score": 9}) + "\n```"
    assert parse_json(_Score, content).score == 9
