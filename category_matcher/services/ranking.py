"""Hybrid vector/lexical ranking of catalog entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from category_matcher.models.category import CategoryRecord, CategoryVector
from category_matcher.schemas.category import CategorySearchResult
from category_matcher.services.embedding_utils import (
    DEFAULT_DIM,
    cosine,
    hashed_text_embedding,
)
from category_matcher.services.lexical import MatchSignals, match_signals, path_similarity

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5
EMBEDDING_WEIGHT = 0.4
PATH_WEIGHT = 0.6
MIN_SCORE = 30.0
PERCENT = 100.0

CatalogEntry = Tuple[CategoryRecord, Optional[CategoryVector]]


@dataclass
class RankedCandidate:
    record: CategoryRecord
    embedding: float = 0.0
    path: float = 0.0
    score: float = 0.0
    signals: MatchSignals = MatchSignals()

    def sort_key(self) -> tuple:
        return (not self.signals.exact, not self.signals.containment, -self.score)

    def to_result(self) -> CategorySearchResult:
        return CategorySearchResult(
            cat_id=self.record.cat_id,
            full_category_path=self.record.full_path,
            similarity=round(self.score, 2),
            embedding_similarity=round(self.embedding, 4),
            path_similarity=round(self.path, 4),
            exact_match=self.signals.exact,
            partial_match=self.signals.containment or self.signals.overlap,
        )


def combine_scores(
    embedding: float,
    path: float,
    embedding_weight: float = EMBEDDING_WEIGHT,
    path_weight: float = PATH_WEIGHT,
) -> float:
    return (embedding * embedding_weight + path * path_weight) * PERCENT


def score_entries(
    query: str,
    query_vector: Sequence[float],
    entries: Iterable[CatalogEntry],
    *,
    embedding_weight: float = EMBEDDING_WEIGHT,
    path_weight: float = PATH_WEIGHT,
    allow_lexical_fallback: bool = True,
) -> List[RankedCandidate]:
    """Score every entry without filtering or ordering."""
    candidates: List[RankedCandidate] = []
    skipped = 0
    for record, vector in entries:
        if vector is None or not vector.vector:
            if not allow_lexical_fallback:
                skipped += 1
                continue
            embedding = 0.0
        else:
            embedding = cosine(query_vector, vector.vector)
        full_path = record.full_path
        path = path_similarity(query, full_path)
        candidates.append(
            RankedCandidate(
                record=record,
                embedding=embedding,
                path=path,
                score=combine_scores(embedding, path, embedding_weight, path_weight),
                signals=match_signals(query, full_path),
            )
        )
    if skipped:
        logger.debug("Skipped %d entries without vectors", skipped)
    return candidates


def order_candidates(
    candidates: Iterable[RankedCandidate], min_score: float = MIN_SCORE
) -> List[RankedCandidate]:
    """Drop weak candidates unless a word match rescues them, then sort."""
    kept = [cand for cand in candidates if cand.score >= min_score or cand.signals.any]
    kept.sort(key=RankedCandidate.sort_key)
    return kept


def rank(
    query: str,
    entries: Sequence[CatalogEntry],
    limit: int = DEFAULT_LIMIT,
    *,
    embedder=None,
    dimension: int = DEFAULT_DIM,
    embedding_weight: float = EMBEDDING_WEIGHT,
    path_weight: float = PATH_WEIGHT,
    min_score: float = MIN_SCORE,
    allow_lexical_fallback: bool = True,
) -> List[CategorySearchResult]:
    """Return at most ``limit`` catalog entries best matching ``query``.

    Entries with an exact word match come first, then those with a containment
    match, each group ordered by the combined percentage score.
    """
    if not entries:
        return []
    limit = limit if limit and limit > 0 else DEFAULT_LIMIT

    query = query or ""
    if embedder is not None:
        query_vector = embedder.encode(query)
    else:
        query_vector = hashed_text_embedding(query, dimension)

    candidates = score_entries(
        query,
        query_vector,
        entries,
        embedding_weight=embedding_weight,
        path_weight=path_weight,
        allow_lexical_fallback=allow_lexical_fallback,
    )
    ordered = order_candidates(candidates, min_score)
    logger.debug(
        "Ranked query '%s': %d scored, %d kept", query, len(candidates), len(ordered)
    )
    return [cand.to_result() for cand in ordered[:limit]]
