import pytest

from support_rag.domain.errors import ValidationError
from support_rag.domain.services.chunking import SplitterParams, count_words, split_text

PROSE = "\n\n".join(
    f"Paragraph {p}. " + " ".join(f"Sentence {p}-{s} talks about topic {s}, briefly!" for s in range(12))
    for p in range(8)
)


def _shared_edge(prev: str, nxt: str) -> int:
    """Length of the longest suffix of ``prev`` that is also a prefix of ``nxt``."""
    for k in range(min(len(prev), len(nxt)), 0, -1):
        if prev.endswith(nxt[:k]):
            return k
    return 0


@pytest.mark.parametrize("size,overlap", [(500, 50), (120, 20), (60, 0), (40, 10)])
def test_every_chunk_respects_size(size: int, overlap: int) -> None:
    chunks = split_text(PROSE, SplitterParams(chunk_size=size, chunk_overlap=overlap))
    assert chunks
    assert all(0 < len(c) <= size for c in chunks)


def test_adjacent_word_chunks_overlap_within_budget() -> None:
    text = " ".join(f"w{i:03d}" for i in range(200))
    p = SplitterParams(chunk_size=50, chunk_overlap=10)
    chunks = split_text(text, p)

    assert len(chunks) > 3
    for prev, nxt in zip(chunks, chunks[1:]):
        # next chunk starts with the tail of the previous one
        assert prev.split()[-1] in nxt.split()[:3]
        assert 0 < _shared_edge(prev, nxt) <= p.chunk_overlap


def test_zero_overlap_loses_no_words() -> None:
    text = " ".join(f"w{i:03d}" for i in range(200))
    chunks = split_text(text, SplitterParams(chunk_size=50, chunk_overlap=0))
    assert " ".join(chunks).split() == text.split()


def test_prefers_paragraph_boundaries() -> None:
    text = "alpha beta gamma\n\ndelta epsilon zeta"
    chunks = split_text(text, SplitterParams(chunk_size=20, chunk_overlap=0))
    assert chunks == ["alpha beta gamma", "delta epsilon zeta"]


def test_short_text_is_single_chunk() -> None:
    assert split_text("  Hello world.  ") == ["Hello world."]


def test_unbroken_token_is_hard_split() -> None:
    token = "x" * 1200
    chunks = split_text(token, SplitterParams(chunk_size=500, chunk_overlap=50))
    assert all(len(c) <= 500 for c in chunks)
    assert set("".join(chunks)) == {"x"}
    assert len(chunks) >= 3


def test_hard_split_without_character_separator() -> None:
    token = "y" * 130
    p = SplitterParams(chunk_size=50, chunk_overlap=0, separators=("\n\n", " "))
    chunks = split_text(token, p)
    assert chunks == ["y" * 50, "y" * 50, "y" * 30]


def test_blank_text_yields_nothing() -> None:
    assert split_text("") == []
    assert split_text(" \n\n\t ") == []


@pytest.mark.parametrize(
    "kwargs",
    [
        {"chunk_size": 0},
        {"chunk_size": 100, "chunk_overlap": 100},
        {"chunk_size": 100, "chunk_overlap": -1},
        {"separators": ()},
    ],
)
def test_invalid_params_raise(kwargs: dict) -> None:
    with pytest.raises(ValidationError):
        SplitterParams(**kwargs)


def test_count_words() -> None:
    assert count_words("one  two\nthree\tfour") == 4
    assert count_words("   ") == 0
