from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from ..errors import ValidationError

# Coarsest first: paragraph, line, sentence punctuation, comma, word, character.
DEFAULT_SEPARATORS: tuple[str, ...] = ("\n\n", "\n", ".", "!", "?", ",", " ", "")

_WORD = re.compile(r"\S+")


# ---------- Value Objects ----------


@dataclass(frozen=True)
class SplitterParams:
    chunk_size: int = 500
    chunk_overlap: int = 50
    separators: tuple[str, ...] = DEFAULT_SEPARATORS

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValidationError("chunk_size must be > 0")
        if self.chunk_overlap < 0 or self.chunk_overlap >= self.chunk_size:
            raise ValidationError("chunk_overlap must be >= 0 and smaller than chunk_size")
        if not self.separators:
            raise ValidationError("at least one separator is required")


# ---------- Splitting ----------


def _split_keep_separator(text: str, separator: str) -> list[str]:
    """Split on ``separator`` and re-attach it to the start of the following piece."""
    if separator == "":
        return list(text)
    parts = text.split(separator)
    pieces = [parts[0]] + [separator + p for p in parts[1:]]
    return [p for p in pieces if p]


def _hard_split(text: str, size: int) -> list[str]:
    return [text[i : i + size] for i in range(0, len(text), size)]


def _merge_splits(splits: Sequence[str], p: SplitterParams) -> list[str]:
    """Greedily pack pieces into chunks, carrying a tail of <= chunk_overlap chars forward."""
    chunks: list[str] = []
    current: list[str] = []
    total = 0

    for piece in splits:
        length = len(piece)
        if total + length > p.chunk_size and current:
            merged = "".join(current).strip()
            if merged:
                chunks.append(merged)
            # drop from the front until only the overlap tail is left and the piece fits
            while current and (total > p.chunk_overlap or total + length > p.chunk_size):
                total -= len(current.pop(0))
        current.append(piece)
        total += length

    merged = "".join(current).strip()
    if merged:
        chunks.append(merged)
    return chunks


def _split_recursive(text: str, separators: Sequence[str], p: SplitterParams) -> list[str]:
    separator = separators[-1]
    finer: Sequence[str] = ()
    for i, candidate in enumerate(separators):
        if candidate == "":
            separator = candidate
            break
        if candidate in text:
            separator = candidate
            finer = separators[i + 1 :]
            break

    out: list[str] = []
    fitting: list[str] = []
    for piece in _split_keep_separator(text, separator):
        if len(piece) < p.chunk_size:
            fitting.append(piece)
            continue
        if fitting:
            out.extend(_merge_splits(fitting, p))
            fitting = []
        if finer:
            out.extend(_split_recursive(piece, finer, p))
        else:
            # no finer separator left: cut at the size budget
            out.extend(s.strip() for s in _hard_split(piece, p.chunk_size) if s.strip())
    if fitting:
        out.extend(_merge_splits(fitting, p))
    return out


def split_text(text: str, params: SplitterParams | None = None) -> list[str]:
    """Recursive, priority-ordered character splitter.

    Tries the coarsest separator present in the text first and only falls back
    to the next finer one for pieces that still exceed ``chunk_size``.
    Guarantees ``len(chunk) <= chunk_size`` for every chunk; neighbouring
    chunks produced from the same run of pieces share a tail of at most
    ``chunk_overlap`` characters, snapped to separator boundaries.
    """
    p = params or SplitterParams()
    if not text or not text.strip():
        return []
    return _split_recursive(text, list(p.separators), p)


def count_words(text: str) -> int:
    return len(_WORD.findall(text))


# Eigenschaften:
#
# - Kein I/O, keine Globals, keine externen NLP-Libs.
# - Separator bleibt am Anfang des Folgestücks: kein Inhalt geht verloren.
# - Overlap über Stück-Tail (stabil für Cosine-Retrieval).
