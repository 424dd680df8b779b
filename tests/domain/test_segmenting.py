import pytest

from support_rag.domain.services.segmenting import needs_splitting, split_response


def _long_reply() -> str:
    paragraphs = []
    for p in range(30):
        sentences = [f"Point {p}.{s} explains a detail of the setup in plain words." for s in range(9)]
        paragraphs.append(" ".join(sentences))
    return "\n\n".join(paragraphs)


def test_short_reply_is_returned_stripped() -> None:
    assert split_response("  hi there \n") == ["hi there"]


def test_blank_reply_has_no_segments() -> None:
    assert split_response("") == []
    assert split_response("   \n\n ") == []


def test_segments_respect_limit_and_keep_every_word() -> None:
    text = _long_reply()
    assert len(text) > 2000

    segments = split_response(text)

    assert len(segments) > 1
    assert all(len(s) <= 2000 for s in segments)
    assert " ".join(segments).split() == text.split()


@pytest.mark.parametrize("limit", [50, 120, 333, 1000])
def test_round_trip_for_various_limits(limit: int) -> None:
    text = _long_reply()
    segments = split_response(text, limit)
    assert all(0 < len(s) <= limit for s in segments)
    assert " ".join(segments).split() == text.split()


def test_paragraphs_stay_together_when_they_fit() -> None:
    first = "a" * 30
    second = "b" * 30
    segments = split_response(f"{first}\n\n{second}", 40)
    assert segments == [first, second]


def test_long_paragraph_falls_back_to_sentences() -> None:
    text = "First sentence is here. Second one follows! Third closes it?"
    segments = split_response(text, 30)
    assert segments == ["First sentence is here.", "Second one follows!", "Third closes it?"]


def test_single_oversized_word_is_hard_cut() -> None:
    word = "z" * 450
    segments = split_response(word, 200)
    assert [len(s) for s in segments] == [200, 200, 50]
    assert "".join(segments) == word


def test_non_positive_limit_rejected() -> None:
    with pytest.raises(ValueError):
        split_response("text", 0)


def test_needs_splitting() -> None:
    assert needs_splitting("x" * 2001)
    assert not needs_splitting("x" * 2000)


def test_split_only_when_needed() -> None:
    padded = "  " + "x" * 2000 + "\n"
    assert not needs_splitting(padded)
    assert split_response(padded) == ["x" * 2000]
    assert len(split_response("x" * 2001)) == 2
