from category_matcher.services.hangul import (
    compose,
    decompose,
    is_hangul_syllable,
    jamo_match_ratio,
    jamo_prefixes,
)


def test_open_syllable_yields_two_jamo():
    assert decompose("하") == ["ㅎ", "ㅏ"]


def test_closed_syllable_yields_three_jamo():
    assert decompose("강") == ["ㄱ", "ㅏ", "ㅇ"]
    assert decompose("한") == ["ㅎ", "ㅏ", "ㄴ"]


def test_non_hangul_characters_pass_through():
    assert decompose("A") == ["A"]
    assert decompose("강A1") == ["ㄱ", "ㅏ", "ㅇ", "A", "1"]
    assert decompose("") == []


def test_syllable_block_bounds():
    assert is_hangul_syllable("가")
    assert is_hangul_syllable("힣")
    assert not is_hangul_syllable("ㄱ")
    assert decompose("힣") == ["ㅎ", "ㅣ", "ㅎ"]


def test_jamo_match_ratio_counts_positional_matches():
    assert jamo_match_ratio("강", "간") == 2 / 3
    assert jamo_match_ratio("강", "강") == 1.0
    assert jamo_match_ratio("", "") == 0.0


def test_compose_reassembles_syllables():
    assert compose(decompose("스마트폰")) == "스마트폰"
    assert compose(["ㅅ", "ㅡ", "ㅁ"]) == "슴"
    assert compose(["ㅅ", "ㅡ", "ㅁ", "ㅏ"]) == "스마"
    assert compose(["ㄱ", "A", "ㅏ"]) == "ㄱAㅏ"


def test_jamo_prefixes_grow_one_jamo_at_a_time():
    assert jamo_prefixes("폰") == ["포", "폰"]
    assert jamo_prefixes("스마트") == ["스", "슴", "스마", "스맡", "스마트"]
    assert jamo_prefixes("ㄱ") == []
