"""Utility helpers for deterministic pseudo-embeddings.

These hashed embeddings stand in for a trained text encoder. Every component is
a pure function of the input text, so vectors precomputed for the catalog stay
comparable with query vectors built at any later time. Both the query encoder
and the offline indexer share these helpers.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence

from category_matcher.models.category import CategoryRecord
from category_matcher.services.compound import indexing_candidates

DEFAULT_DIM = 100
HASH_SLOTS = 5
STRUCTURE_SLOTS = 3
QUERY_WEIGHT = 0.3

LEVEL_WEIGHTS = (1.0, 0.8, 0.6, 0.4)
DEEP_LEVEL_WEIGHT = 0.3
PARENT_FACTOR = 0.5
RELATED_LIMIT = 3
RELATED_THRESHOLD = 0.5
RELATED_FACTOR = 0.3


def tokenize(text: str) -> List[str]:
    """Split ``text`` into lowercase whitespace-separated words."""
    return (text or "").lower().split()


def char_hash(text: str) -> int:
    return sum(ord(char) for char in text)


def _scatter(accum: List[float], value_hash: int, slots: int, amount: float) -> None:
    dim = len(accum)
    for i in range(slots):
        accum[(value_hash * (i + 1)) % dim] += amount


def normalize_accumulator(accum: Iterable[float]) -> List[float]:
    values = list(accum)
    norm = math.sqrt(sum(v * v for v in values)) or 1.0
    return [v / norm for v in values]


def hashed_text_embedding(text: str, dim: int = DEFAULT_DIM) -> List[float]:
    """Project free text into a deterministic unit-length vector.

    Whitespace-only text produces the zero vector.
    """
    accum = [0.0] * dim
    for word in tokenize(text):
        word_hash = char_hash(word)
        _scatter(accum, word_hash, HASH_SLOTS, math.sin(word_hash * QUERY_WEIGHT) * QUERY_WEIGHT)
    return normalize_accumulator(accum)


def cosine(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity; a zero denominator is treated as 1."""
    num = sum(x * y for x, y in zip(a, b))
    denom_a = math.sqrt(sum(x * x for x in a))
    denom_b = math.sqrt(sum(y * y for y in b))
    denom = denom_a * denom_b
    if denom == 0:
        denom = 1.0
    return num / denom


def vector_norm(values: Iterable[float]) -> float:
    return math.sqrt(sum(v * v for v in values))


def path_overlap(first: Sequence[str], second: Sequence[str]) -> float:
    """Ratio of positionally equal path segments over the longer path."""
    longest = max(len(first), len(second))
    if longest == 0:
        return 0.0
    matches = sum(1 for a, b in zip(first, second) if a == b)
    return matches / longest


def related_categories(
    record: CategoryRecord,
    catalog: Sequence[CategoryRecord],
    limit: int = RELATED_LIMIT,
) -> List[tuple[CategoryRecord, float]]:
    """Other catalog entries sharing more than half of ``record``'s path."""
    related: List[tuple[CategoryRecord, float]] = []
    for other in catalog:
        if other.cat_id == record.cat_id:
            continue
        overlap = path_overlap(record.path_segments, other.path_segments)
        if overlap > RELATED_THRESHOLD:
            related.append((other, overlap))
    related.sort(key=lambda item: item[1], reverse=True)
    return related[:limit]


def _level_weight(level: int) -> float:
    if level < len(LEVEL_WEIGHTS):
        return LEVEL_WEIGHTS[level]
    return DEEP_LEVEL_WEIGHT


def category_path_embedding(
    record: CategoryRecord,
    catalog: Sequence[CategoryRecord] = (),
    dim: int = DEFAULT_DIM,
) -> List[float]:
    """Structured embedding for a category path used at indexing time.

    Words are weighted by hierarchy level and expanded into compound parts
    and jamo prefixes;
    the parent segment, the full path and up to three related categories add
    smaller structural contributions before normalisation.
    """
    accum = [0.0] * dim
    segments = record.path_segments

    for level, segment in enumerate(segments):
        level_weight = _level_weight(level)
        for word in segment.split():
            for candidate in indexing_candidates(word):
                word_hash = char_hash(candidate)
                word_weight = level_weight * (1 + len(candidate) * 0.1)
                _scatter(
                    accum,
                    word_hash,
                    HASH_SLOTS,
                    math.sin(word_hash * word_weight) * word_weight,
                )

        if level > 0:
            parent_hash = char_hash(segments[level - 1])
            _scatter(
                accum,
                parent_hash,
                STRUCTURE_SLOTS,
                math.cos(parent_hash * level_weight) * level_weight * PARENT_FACTOR,
            )

    if segments:
        full_hash = char_hash(record.full_path)
        _scatter(accum, full_hash, STRUCTURE_SLOTS, math.sin(full_hash * QUERY_WEIGHT) * QUERY_WEIGHT)

    for rank, (other, overlap) in enumerate(related_categories(record, catalog)):
        weight = overlap * RELATED_FACTOR / (rank + 1)
        other_hash = char_hash(other.full_path)
        _scatter(accum, other_hash, STRUCTURE_SLOTS, math.sin(other_hash * weight) * weight)

    return normalize_accumulator(accum)
