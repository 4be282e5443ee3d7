"""한글 음절 자모 분리 유틸리티."""

from __future__ import annotations

from typing import List, Sequence

SYLLABLE_BASE = 0xAC00
SYLLABLE_LAST = 0xD7A3

LEADING_COUNT = 19
VOWEL_COUNT = 21
TRAILING_COUNT = 28
BLOCK_SIZE = VOWEL_COUNT * TRAILING_COUNT

LEADING = (
    "ㄱ", "ㄲ", "ㄴ", "ㄷ", "ㄸ", "ㄹ", "ㅁ", "ㅂ", "ㅃ", "ㅅ",
    "ㅆ", "ㅇ", "ㅈ", "ㅉ", "ㅊ", "ㅋ", "ㅌ", "ㅍ", "ㅎ",
)
VOWELS = (
    "ㅏ", "ㅐ", "ㅑ", "ㅒ", "ㅓ", "ㅔ", "ㅕ", "ㅖ", "ㅗ", "ㅘ", "ㅙ",
    "ㅚ", "ㅛ", "ㅜ", "ㅝ", "ㅞ", "ㅟ", "ㅠ", "ㅡ", "ㅢ", "ㅣ",
)
# index 0 is "no trailing consonant"
TRAILING = (
    "", "ㄱ", "ㄲ", "ㄳ", "ㄴ", "ㄵ", "ㄶ", "ㄷ", "ㄹ", "ㄺ",
    "ㄻ", "ㄼ", "ㄽ", "ㄾ", "ㄿ", "ㅀ", "ㅁ", "ㅂ", "ㅄ", "ㅅ",
    "ㅆ", "ㅇ", "ㅈ", "ㅊ", "ㅋ", "ㅌ", "ㅍ", "ㅎ",
)

LEADING_INDEX = {jamo: i for i, jamo in enumerate(LEADING)}
VOWEL_INDEX = {jamo: i for i, jamo in enumerate(VOWELS)}
TRAILING_INDEX = {jamo: i for i, jamo in enumerate(TRAILING) if jamo}


def is_hangul_syllable(char: str) -> bool:
    return len(char) == 1 and SYLLABLE_BASE <= ord(char) <= SYLLABLE_LAST


def decompose(text: str) -> List[str]:
    """Split precomposed syllables in ``text`` into compatibility jamo.

    Characters outside the syllable block are passed through unchanged, so
    ``decompose("강A")`` yields ``["ㄱ", "ㅏ", "ㅇ", "A"]``.
    """
    result: List[str] = []
    for char in text or "":
        if not is_hangul_syllable(char):
            result.append(char)
            continue
        index = ord(char) - SYLLABLE_BASE
        leading = index // BLOCK_SIZE
        vowel = (index % BLOCK_SIZE) // TRAILING_COUNT
        trailing = index % TRAILING_COUNT
        result.append(LEADING[leading])
        result.append(VOWELS[vowel])
        if trailing:
            result.append(TRAILING[trailing])
    return result


def jamo_match_ratio(first: str, second: str) -> float:
    """Share of positions whose jamo agree, over the longer decomposition."""
    left = decompose(first)
    right = decompose(second)
    longest = max(len(left), len(right))
    if longest == 0:
        return 0.0
    matches = sum(1 for a, b in zip(left, right) if a == b)
    return matches / longest


def compose(jamo: Sequence[str]) -> str:
    """Reassemble compatibility jamo into syllables wherever they form one.

    A consonant after a vowel becomes the trailing consonant unless a vowel
    follows it. Jamo that cannot start a syllable are kept as they are.
    """
    result: List[str] = []
    i = 0
    while i < len(jamo):
        lead = jamo[i]
        if lead not in LEADING_INDEX or i + 1 >= len(jamo) or jamo[i + 1] not in VOWEL_INDEX:
            result.append(lead)
            i += 1
            continue
        trailing = 0
        step = 2
        if i + 2 < len(jamo) and jamo[i + 2] in TRAILING_INDEX:
            if i + 3 >= len(jamo) or jamo[i + 3] not in VOWEL_INDEX:
                trailing = TRAILING_INDEX[jamo[i + 2]]
                step = 3
        code = SYLLABLE_BASE + (
            LEADING_INDEX[lead] * VOWEL_COUNT + VOWEL_INDEX[jamo[i + 1]]
        ) * TRAILING_COUNT + trailing
        result.append(chr(code))
        i += step
    return "".join(result)


def jamo_prefixes(word: str) -> List[str]:
    """Distinct reassembled prefixes of ``word``, two jamo and longer.

    ``jamo_prefixes("폰")`` is ``["포", "폰"]``.
    """
    jamo = decompose(word)
    prefixes: List[str] = []
    seen = set()
    for end in range(2, len(jamo) + 1):
        prefix = compose(jamo[:end])
        if prefix not in seen:
            seen.add(prefix)
            prefixes.append(prefix)
    return prefixes
