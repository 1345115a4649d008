"""Configuration package for the interview orchestrator."""
from .registry import COMPLETION_KEY, SPEECH_KEY, bind_model, get_model, is_bound, unbind_model
from .routes import AppConfig, LlmRoute, SpeechRoute, default_config, load_config, load_config_or_default
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "SpeechRoute",
    "default_config",
    "load_config",
    "load_config_or_default",
    "COMPLETION_KEY",
    "SPEECH_KEY",
    "bind_model",
    "get_model",
    "is_bound",
    "unbind_model",
    "Settings",
    "settings",
]
