"""Text-to-speech gateway for interviewer questions.

Talks to an OpenAI-compatible ``/audio/speech`` endpoint and returns the raw
audio bytes. Blank text is rejected before any request is made.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import httpx

from config import SpeechRoute
from interview_session.errors import InvalidInput, UpstreamError
from llm_gateway import HttpClient

logger = logging.getLogger(__name__)


class SpeechGatewayError(UpstreamError):
    """Raised when the speech endpoint fails or returns no audio."""


def require_text(text: Optional[str]) -> str:
    """Return ``text`` stripped, raising ``InvalidInput`` when blank."""

    cleaned = (text or "").strip()
    if not cleaned:
        raise InvalidInput("Speech text must not be empty")
    return cleaned


class HttpSpeechSynthesizer:
    """SpeechSynthesizer backed by an HTTP text-to-speech route."""

    def __init__(self, route: SpeechRoute, client: Optional[HttpClient] = None) -> None:
        self._route = route
        self._client = client

    @property
    def audio_format(self) -> str:
        return self._route.audio_format

    def synthesize(self, text: str) -> bytes:
        cleaned = require_text(text)
        payload: Dict[str, Any] = {
            "model": self._route.model,
            "voice": self._route.voice,
            "input": cleaned,
            "response_format": self._route.audio_format,
        }
        url = f"{self._route.base_url}{self._route.endpoint}"
        logger.info("TTS request route=%s voice=%s chars=%d", self._route.name, self._route.voice, len(cleaned))
        try:
            response = self._post(url, payload)
        except Exception as exc:  # noqa: BLE001
            logger.error("TTS transport failure: %s", exc)
            raise SpeechGatewayError("Speech transport failed") from exc
        if response.status_code >= 400:
            logger.error("TTS error status: %s", response.status_code)
            raise SpeechGatewayError(f"Speech endpoint returned status {response.status_code}")
        audio = response.content
        if not audio:
            raise SpeechGatewayError("Speech endpoint returned no audio")
        return audio

    def _post(self, url: str, payload: Dict[str, Any]) -> Any:
        headers = {"Content-Type": "application/json"}
        if self._route.api_key_env:
            api_key = os.getenv(self._route.api_key_env)
            if api_key:
                headers["Authorization"] = f"Bearer {api_key}"
        headers.update(self._route.extra_headers)
        if self._client is not None:
            return self._client.post(url, json=payload, headers=headers, timeout=self._route.timeout_s)
        with httpx.Client(timeout=self._route.timeout_s) as http_client:
            return http_client.post(url, json=payload, headers=headers)


__all__ = ["HttpSpeechSynthesizer", "SpeechGatewayError", "require_text"]
