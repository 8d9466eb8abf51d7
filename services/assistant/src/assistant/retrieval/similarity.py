"""Cosine similarity and ranking helpers."""
import math
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    if len(a) != len(b):
        raise ValueError(f"vectors must have the same length: {len(a)} != {len(b)}")
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (norm_a * norm_b)


def rank_by_similarity(
    query: Sequence[float],
    items: list[tuple[T, Sequence[float]]],
    k: int,
) -> list[tuple[T, float]]:
    """Top-k items by cosine similarity to query, highest first.

    The sort is stable, so equal scores keep their input order.
    """
    scored = [(item, cosine_similarity(query, vector)) for item, vector in items]
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return scored[: max(0, k)]
