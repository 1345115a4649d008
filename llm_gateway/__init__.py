from __future__ import annotations  # Re-export llm_gateway public API

from .llm_gateway import (
    HttpClient,
    HttpCompletionProvider,
    HttpResponse,
    LlmGatewayError,
    complete_text,
    parse_json,
)

__all__ = [
    "HttpClient",
    "HttpCompletionProvider",
    "HttpResponse",
    "LlmGatewayError",
    "complete_text",
    "parse_json",
]
