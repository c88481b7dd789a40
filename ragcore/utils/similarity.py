"""Exact cosine-similarity ranking for small in-memory corpora.

Used by :class:`~ragcore.providers.vector_store.memory_provider.InMemoryVectorStore`
when no persistent vector database is configured.  Every stored vector is
scored against the query, so cost is linear in corpus size.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import TypeVar

from ragcore.utils.errors import DimensionMismatchError

_T = TypeVar("_T")


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return ``dot(a, b) / (|a| * |b|)``.

    Raises
    ------
    DimensionMismatchError
        If ``len(a) != len(b)``.  Vectors from different embedding models
        must never be compared.

    A zero-norm vector has no direction; its similarity to anything is
    reported as ``0.0`` rather than dividing by zero.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(
            message=f"Cannot compare vectors of length {len(a)} and {len(b)}"
        )

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


def rank_by_similarity(
    query: Sequence[float],
    candidates: Iterable[tuple[_T, Sequence[float]]],
    k: int,
) -> list[tuple[_T, float]]:
    """Score *candidates* against *query* and return the top *k*.

    Parameters
    ----------
    query:
        The query embedding.
    candidates:
        ``(item, embedding)`` pairs in insertion order.
    k:
        Maximum number of results.  Fewer are returned when fewer
        candidates exist; ``k <= 0`` returns an empty list.

    Returns
    -------
    list[tuple[_T, float]]
        ``(item, score)`` pairs sorted by score descending.  ``sorted`` is
        stable, so equal scores keep their insertion order.
    """
    if k <= 0:
        return []
    scored = [(item, cosine_similarity(query, vector)) for item, vector in candidates]
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return scored[:k]
