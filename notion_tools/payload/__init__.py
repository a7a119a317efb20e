"""Payload splitting and chunked property writes."""

from .chunking import split_fixed, split_text_for_speech
from .writer import ChunkedPayloadWriter, ClearResult, WriteResult, read_chunked_payload

__all__ = [
    "split_fixed",
    "split_text_for_speech",
    "ChunkedPayloadWriter",
    "ClearResult",
    "WriteResult",
    "read_chunked_payload",
]
