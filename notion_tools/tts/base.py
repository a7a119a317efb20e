"""Base speech synthesis interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class SpeechResult:
    """Synthesized audio for one text."""

    audio: bytes
    chunks: int
    characters: int

    @property
    def size(self) -> int:
        return len(self.audio)


class SpeechSynthesizer(ABC):
    """Abstract base class for text-to-speech providers."""

    @abstractmethod
    def synthesize(self, text: str) -> SpeechResult:
        """
        Convert text to audio.

        Args:
            text: Text to speak; long input is split into several requests

        Returns:
            SpeechResult with the concatenated audio bytes

        Raises:
            ValueError: If the text is empty
        """
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Extension of the produced audio files (without dot)."""
        pass
