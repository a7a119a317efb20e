"""Text-to-speech providers."""

from .base import SpeechResult, SpeechSynthesizer
from .openai_tts import OpenAISpeechSynthesizer

__all__ = ["SpeechResult", "SpeechSynthesizer", "OpenAISpeechSynthesizer"]
