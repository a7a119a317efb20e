"""Splitting long strings into provider-sized pieces."""

from typing import List

SENTENCE_ENDINGS = ".!?"


def _sentence_break(text: str, start: int, end: int, window: int) -> int:
    """Return the offset just past the last sentence ending in the window, or -1."""
    search_start = max(start, end - window)
    for i in range(end - 1, search_start, -1):
        if text[i] in SENTENCE_ENDINGS:
            if i == len(text) - 1 or text[i + 1] in (" ", "\n"):
                return i + 1
    return -1


def split_text_for_speech(text: str, max_length: int = 4000, window: int = 1000) -> List[str]:
    """
    Split text for speech synthesis requests.

    Within the last ``window`` characters before the limit a sentence ending
    is preferred, then a paragraph break, then the last space. A hard cut is
    made only when none of those exist. The pieces are exact slices of the
    input, so joining them gives back the original text.

    Args:
        text: Text to split
        max_length: Maximum characters per piece
        window: How far back from the limit to look for a sentence ending

    Returns:
        List of pieces, none longer than ``max_length``
    """
    if max_length <= 0:
        raise ValueError("max_length must be positive")
    if len(text) <= max_length:
        return [text] if text else []

    chunks = []
    position = 0
    while position < len(text):
        end = min(position + max_length, len(text))

        if end < len(text):
            cut = _sentence_break(text, position, end, window)
            if cut <= position:
                cut = text.rfind("\n\n", position + 1, end)
            if cut <= position:
                cut = text.rfind(" ", position + 1, end)
            if cut > position:
                end = cut

        chunks.append(text[position:end])
        position = end

    return chunks


def split_fixed(payload: str, size: int) -> List[str]:
    """Slice a string into pieces of ``size`` characters (the last may be shorter)."""
    if size <= 0:
        raise ValueError("size must be positive")
    return [payload[i : i + size] for i in range(0, len(payload), size)]
