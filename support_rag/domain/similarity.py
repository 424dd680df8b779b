"""Pure similarity and ranking functions used by retrieval."""

from collections.abc import Sequence
from math import sqrt

from .models import RankedChunk, RetrievedChunk
from .types import Score


def cosine(u: Sequence[float], v: Sequence[float]) -> Score:
    """Compute cosine similarity between two vectors.

    Args:
        u: First vector
        v: Second vector (must have the same length as ``u``)

    Returns:
        Cosine similarity score between -1 and 1
    """
    if len(u) != len(v):
        raise ValueError(f"vector length mismatch: {len(u)} != {len(v)}")
    dot = sum(a * b for a, b in zip(u, v, strict=True))
    nu = sqrt(sum(a * a for a in u)) or 1.0
    nv = sqrt(sum(b * b for b in v)) or 1.0
    return dot / (nu * nv)


def rank_by_score(chunks: Sequence[RetrievedChunk], top_k: int) -> list[RankedChunk]:
    """Sort hits by descending score (unscored last) and assign 1-based ranks.

    Ties keep their original order.
    """
    ordered = sorted(
        chunks,
        key=lambda c: c.score if c.score is not None else float("-inf"),
        reverse=True,
    )
    return [RankedChunk(chunk=c, rank=i) for i, c in enumerate(ordered[: max(top_k, 0)], 1)]
