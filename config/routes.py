"""Upstream route configuration for completion and speech providers."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field


class LlmRoute(BaseModel):
    """Chat-completion endpoint configuration."""

    name: str
    base_url: str
    endpoint: str
    model: str
    fallback_model: Optional[str] = None
    timeout_s: float = Field(default=60.0, ge=0.1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    api_key_env: str | None = None
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    sequential: bool = False


class SpeechRoute(BaseModel):
    """Text-to-speech endpoint configuration."""

    name: str
    base_url: str
    endpoint: str
    model: str
    voice: str = "alloy"
    audio_format: str = "mp3"
    timeout_s: float = Field(default=60.0, ge=0.1)
    api_key_env: str | None = None
    extra_headers: Dict[str, str] = Field(default_factory=dict)


class AppConfig(BaseModel):
    """Application configuration root."""

    completion: LlmRoute
    speech: SpeechRoute


def default_config() -> AppConfig:
    """OpenAI-compatible defaults used when no config file is present."""

    return AppConfig(
        completion=LlmRoute(
            name="openai-chat",
            base_url="https://api.openai.com",
            endpoint="/v1/chat/completions",
            model="gpt-4",
            fallback_model="gpt-3.5-turbo",
            api_key_env="OPENAI_API_KEY",
        ),
        speech=SpeechRoute(
            name="openai-speech",
            base_url="https://api.openai.com",
            endpoint="/v1/audio/speech",
            model="tts-1",
            api_key_env="OPENAI_API_KEY",
        ),
    )


def load_config(path: Path) -> AppConfig:
    """Load configuration from disk."""

    data = path.read_text(encoding="utf-8")
    return AppConfig.model_validate_json(data)


def load_config_or_default(path: Path) -> AppConfig:
    """Load ``path`` when it exists, otherwise fall back to defaults."""

    if path.exists():
        return load_config(path)
    return default_config()
