"""Word and character overlap scoring between queries and category paths."""

from __future__ import annotations

from typing import List, NamedTuple

from category_matcher.models.category import PATH_DELIMITER
from category_matcher.services.compound import split_compound
from category_matcher.services.hangul import jamo_match_ratio

EXACT_SCORE = 1.0
CONTAINS_SCORE = 0.8
OVERLAP_THRESHOLD = 0.5
SIGNAL_OVERLAP_THRESHOLD = 0.6
EXACT_BONUS = 0.2
PARTIAL_BONUS = 0.1

SUBTOKEN_EXACT_SCORE = 0.9
SUBTOKEN_CONTAINS_SCORE = 0.7
JAMO_FACTOR = 0.5


class MatchSignals(NamedTuple):
    exact: bool = False
    containment: bool = False
    overlap: bool = False

    @property
    def any(self) -> bool:
        return self.exact or self.containment or self.overlap


def _normalize(text: str) -> str:
    return " ".join((text or "").lower().split())


def split_path(full_path: str) -> List[str]:
    return [_normalize(part) for part in (full_path or "").lower().split(PATH_DELIMITER)]


def path_words(full_path: str) -> List[str]:
    words: List[str] = []
    for part in split_path(full_path):
        words.extend(part.split())
    return words


def char_overlap(query_word: str, path_word: str) -> float:
    longest = max(len(query_word), len(path_word))
    if longest == 0:
        return 0.0
    present = sum(1 for char in query_word if char in path_word)
    return present / longest


def _best_match(query_word: str, words: List[str]) -> tuple[float, str]:
    best = 0.0
    kind = ""
    for word in words:
        if query_word == word:
            return EXACT_SCORE, "exact"
        if query_word in word or word in query_word:
            score, current = CONTAINS_SCORE, "partial"
        else:
            ratio = char_overlap(query_word, word)
            if ratio <= OVERLAP_THRESHOLD:
                continue
            score, current = ratio, "partial"
        if score > best:
            best, kind = score, current
    return best, kind


def path_similarity(query: str, full_path: str) -> float:
    """Score in ``[0, 1]`` for how well ``query`` matches a category path.

    A query equal to one whole path segment scores ``1.0``. Otherwise the
    per-word best matches are averaged and blended with an exact/partial
    match bonus.
    """
    normalized_query = _normalize(query)
    if normalized_query and normalized_query in split_path(full_path):
        return 1.0

    query_words = normalized_query.split()
    if not query_words:
        return 0.0
    words = path_words(full_path)

    total = 0.0
    exact_count = 0
    partial_count = 0
    for query_word in query_words:
        score, kind = _best_match(query_word, words)
        total += score
        if kind == "exact":
            exact_count += 1
        elif kind == "partial":
            partial_count += 1

    count = len(query_words)
    base = total / count
    bonus = (exact_count * EXACT_BONUS + partial_count * PARTIAL_BONUS) / count
    return min(1.0, (base + bonus) / 2)


def match_signals(query: str, full_path: str) -> MatchSignals:
    """Relevance flags used to rescue and order ranked categories."""
    exact = containment = overlap = False
    words = path_words(full_path)
    for query_word in _normalize(query).split():
        for word in words:
            if query_word == word:
                exact = True
            elif query_word in word or word in query_word:
                containment = True
            elif char_overlap(query_word, word) > SIGNAL_OVERLAP_THRESHOLD:
                overlap = True
    return MatchSignals(exact=exact, containment=containment, overlap=overlap)


def word_similarity(first: str, second: str) -> float:
    """Similarity of two bare category names using compound parts and jamo."""
    left = (first or "").strip().lower()
    right = (second or "").strip().lower()
    if not left or not right:
        return 0.0
    if left == right:
        return 1.0

    best = 0.0
    for a in split_compound(left):
        for b in split_compound(right):
            if a == b:
                score = SUBTOKEN_EXACT_SCORE
            elif a in b or b in a:
                score = SUBTOKEN_CONTAINS_SCORE
            else:
                score = jamo_match_ratio(a, b) * JAMO_FACTOR
            best = max(best, score)
    return best
