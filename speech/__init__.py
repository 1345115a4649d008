"""Speech synthesis for interviewer turns."""
from .speech import HttpSpeechSynthesizer, SpeechGatewayError, require_text

__all__ = ["HttpSpeechSynthesizer", "SpeechGatewayError", "require_text"]
