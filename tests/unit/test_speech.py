import pytest

from config import SpeechRoute
from interview_session.errors import InvalidInput, UpstreamError
from speech import HttpSpeechSynthesizer, SpeechGatewayError, require_text


class _Response:
    def __init__(self, status_code=200, content=b""):
        self.status_code = status_code
        self.content = content


class _Client:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def post(self, url, *, json, headers, timeout):
        self.requests.append({"url": url, "json": json, "headers": headers})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def _route():
    return SpeechRoute(
        name="test-speech",
        base_url="http://tts.local",
        endpoint="/v1/audio/speech",
        model="tts-1",
        voice="nova",
        audio_format="wav",
    )


def test_synthesize_returns_audio_bytes():
    client = _Client(_Response(content=b"RIFF...."))
    synthesizer = HttpSpeechSynthesizer(_route(), client=client)

    assert synthesizer.synthesize("  What is a deadlock?  ") == b"RIFF...."
    assert synthesizer.audio_format == "wav"
    assert client.requests[0]["url"] == "http://tts.local/v1/audio/speech"
    assert client.requests[0]["json"] == {
        "model": "tts-1",
        "voice": "nova",
        "input": "What is a deadlock?",
        "response_format": "wav",
    }


def test_blank_text_is_rejected_without_request():
    client = _Client(_Response(content=b"x"))
    with pytest.raises(InvalidInput):
        HttpSpeechSynthesizer(_route(), client=client).synthesize("   ")
    assert client.requests == []


@pytest.mark.parametrize("response", [_Response(status_code=429), _Response(content=b""), ConnectionError("down")])
def test_upstream_failures_raise_retryable_error(response):
    with pytest.raises(SpeechGatewayError) as excinfo:
        HttpSpeechSynthesizer(_route(), client=_Client(response)).synthesize("Hello")
    assert isinstance(excinfo.value, UpstreamError)


def test_require_text_strips():
    assert require_text("  hi ") == "hi"
