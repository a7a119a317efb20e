"""OpenAI speech synthesis implementation."""

import logging
import time
from typing import Any, Optional

from openai import APIConnectionError, APIStatusError, OpenAI, RateLimitError

from ..payload.chunking import split_text_for_speech
from ..utils.retry import transient_retrying
from .base import SpeechResult, SpeechSynthesizer

CONTENT_TYPES = {
    "opus": "audio/opus",
    "mp3": "audio/mpeg",
    "aac": "audio/aac",
    "flac": "audio/flac",
    "wav": "audio/wav",
}


def is_transient_speech_error(error: BaseException) -> bool:
    """Connection failures, rate limiting and 5xx responses are worth retrying."""
    if isinstance(error, (APIConnectionError, RateLimitError)):
        return True
    return isinstance(error, APIStatusError) and error.status_code >= 500


class OpenAISpeechSynthesizer(SpeechSynthesizer):
    """Text-to-speech through the OpenAI audio API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "tts-1",
        voice: str = "onyx",
        response_format: str = "opus",
        speed: float = 1.0,
        max_chunk_length: int = 4000,
        max_retries: int = 3,
        retry_backoff: float = 1.0,
        chunk_pause: float = 0.5,
        client: Optional[Any] = None,
    ):
        """
        Initialize OpenAI speech synthesizer.

        Args:
            api_key: OpenAI API key
            model: Speech model name
            voice: Voice name
            response_format: Audio format (opus, mp3, ...)
            speed: Playback speed
            max_chunk_length: Maximum characters per request
            max_retries: Attempts per chunk
            retry_backoff: Base retry delay in seconds, multiplied by the attempt number
            chunk_pause: Pause between chunk requests (seconds)
            client: Pre-built OpenAI client
        """
        self.model = model
        self.voice = voice
        self.response_format = response_format
        self.speed = speed
        self.max_chunk_length = max_chunk_length
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.chunk_pause = chunk_pause
        self.client = client or OpenAI(api_key=api_key)
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, tts_config) -> "OpenAISpeechSynthesizer":
        """Create a synthesizer from a TTSConfig section."""
        return cls(
            api_key=tts_config.api_key,
            model=tts_config.model,
            voice=tts_config.voice,
            response_format=tts_config.response_format,
            speed=tts_config.speed,
            max_chunk_length=tts_config.max_chunk_length,
            max_retries=tts_config.max_retries,
            retry_backoff=tts_config.retry_backoff,
            chunk_pause=tts_config.chunk_pause,
        )

    @property
    def file_extension(self) -> str:
        return self.response_format

    @property
    def content_type(self) -> str:
        return CONTENT_TYPES.get(self.response_format, "application/octet-stream")

    def _synthesize_chunk(self, text: str, index: int, total: int) -> bytes:
        """Request audio for one chunk, retrying transient provider errors."""
        self.logger.debug(f"Requesting chunk {index}/{total}")
        retrying = transient_retrying(
            self.max_retries, self.retry_backoff, is_transient_speech_error, self.logger
        )
        for attempt in retrying:
            with attempt:
                response = self.client.audio.speech.create(
                    model=self.model,
                    voice=self.voice,
                    input=text,
                    response_format=self.response_format,
                    speed=self.speed,
                )
                return response.content

    def synthesize(self, text: str) -> SpeechResult:
        if not text or not text.strip():
            raise ValueError("Cannot synthesize empty text")

        chunks = [
            chunk.strip()
            for chunk in split_text_for_speech(text, self.max_chunk_length)
            if chunk.strip()
        ]
        if len(chunks) > 1:
            self.logger.info(f"Text split into {len(chunks)} chunks")

        audio_parts = []
        for index, chunk in enumerate(chunks, start=1):
            self.logger.debug(f"Synthesizing chunk {index}/{len(chunks)} ({len(chunk)} chars)")
            audio_parts.append(self._synthesize_chunk(chunk, index, len(chunks)))
            if index < len(chunks) and self.chunk_pause > 0:
                time.sleep(self.chunk_pause)

        return SpeechResult(audio=b"".join(audio_parts), chunks=len(chunks), characters=len(text))
