"""Heuristic compound-word splitting for Korean category names."""

from __future__ import annotations

from typing import Dict, List, Tuple

from category_matcher.services.hangul import jamo_prefixes

COMPOUND_PATTERNS: Dict[str, Tuple[str, ...]] = {
    "스마트": ("폰", "워치", "밴드", "태그"),
    "디지털": ("가전", "기기", "카메라"),
    "블루투스": ("이어폰", "스피커", "키보드"),
    "무선": ("이어폰", "마우스", "키보드"),
}

CHUNK_SIZE = 2
MIN_CHUNK_LENGTH = 4


def split_compound(token: str) -> List[str]:
    """Segment ``token`` into plausible sub-words.

    Known prefix/suffix compounds win, longer tokens fall back to two-character
    chunks and anything else comes back as ``[token]``.
    """
    for prefix, suffixes in COMPOUND_PATTERNS.items():
        if not token.startswith(prefix):
            continue
        rest = token[len(prefix):]
        if rest in suffixes:
            return [prefix, rest]

    if len(token) >= MIN_CHUNK_LENGTH:
        return [token[i : i + CHUNK_SIZE] for i in range(0, len(token), CHUNK_SIZE)]
    return [token]


def subword_candidates(word: str) -> List[str]:
    """Original word followed by its distinct compound parts."""
    candidates = [word]
    seen = {word}
    for part in split_compound(word):
        if part and part not in seen:
            seen.add(part)
            candidates.append(part)
    return candidates


def indexing_candidates(word: str) -> List[str]:
    """Sub-words plus reassembled jamo prefixes, hashed when indexing a path."""
    candidates = subword_candidates(word)
    seen = set(candidates)
    for prefix in jamo_prefixes(word):
        if prefix not in seen:
            seen.add(prefix)
            candidates.append(prefix)
    return candidates
