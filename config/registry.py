"""In-memory provider registry for the orchestrator runtime."""
from typing import Any, Callable, Dict

_REGISTRY: Dict[str, Callable[..., Any]] = {}


def bind_model(key: str, fn: Callable[..., Any]) -> None:
    """Bind a provider factory to a registry key."""
    _REGISTRY[key] = fn


def unbind_model(key: str) -> None:
    """Remove any factory bound to ``key``."""
    _REGISTRY.pop(key, None)


def is_bound(key: str) -> bool:
    return key in _REGISTRY


def get_model(key: str) -> Callable[..., Any]:
    """Retrieve a factory from the registry.

    Raises:
        KeyError: If no callable has been bound for ``key``.
    """

    if key not in _REGISTRY:
        raise KeyError(f"Model not bound in registry: {key}")
    return _REGISTRY[key]


COMPLETION_KEY = "providers.completion"
SPEECH_KEY = "providers.speech"
