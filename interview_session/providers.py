from __future__ import annotations  # Capability interfaces consumed by the orchestrator

from typing import Dict, Protocol, Sequence


class CompletionProvider(Protocol):  # Text generation capability
    def generate(self, messages: Sequence[Dict[str, str]]) -> str: ...


class SpeechSynthesizer(Protocol):  # Text-to-speech capability
    def synthesize(self, text: str) -> bytes: ...


__all__ = ["CompletionProvider", "SpeechSynthesizer"]
