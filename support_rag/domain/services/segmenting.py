"""Split long replies into transport-sized segments.

Pure functions, no shared state. Units are tried coarsest first
(paragraph, sentence, word) and a hard cut is used only when a single word
is longer than the limit. Every boundary is whitespace, so joining the
segments with whitespace gives back all original words in order.
"""

from __future__ import annotations

import re

DEFAULT_MAX_LENGTH = 2000

_PARAGRAPH = re.compile(r"\n\s*\n")
_SENTENCE = re.compile(r"(?<=[.!?])\s+")
_WORD = re.compile(r"\s+")

# (pattern used to split, string used to re-join inside one segment)
_LEVELS: tuple[tuple[re.Pattern[str], str], ...] = (
    (_PARAGRAPH, "\n\n"),
    (_SENTENCE, " "),
    (_WORD, " "),
)


def _split_level(text: str, level: int, max_length: int) -> list[str]:
    if len(text) <= max_length:
        return [text]
    if level >= len(_LEVELS):
        return [text[i : i + max_length] for i in range(0, len(text), max_length)]

    pattern, joiner = _LEVELS[level]
    segments: list[str] = []
    current = ""
    for unit in pattern.split(text):
        unit = unit.strip()
        if not unit:
            continue
        candidate = f"{current}{joiner}{unit}" if current else unit
        if len(candidate) <= max_length:
            current = candidate
            continue
        if current:
            segments.append(current)
            current = ""
        if len(unit) <= max_length:
            current = unit
        else:
            segments.extend(_split_level(unit, level + 1, max_length))
    if current:
        segments.append(current)
    return segments


def needs_splitting(text: str, max_length: int = DEFAULT_MAX_LENGTH) -> bool:
    return len(text.strip()) > max_length


def split_response(text: str, max_length: int = DEFAULT_MAX_LENGTH) -> list[str]:
    """Return ordered segments of ``text``, each at most ``max_length`` characters."""
    if max_length <= 0:
        raise ValueError("max_length must be > 0")
    stripped = text.strip()
    if not stripped:
        return []
    if not needs_splitting(stripped, max_length):
        return [stripped]
    return [s for s in _split_level(stripped, 0, max_length) if s]
