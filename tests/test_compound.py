from category_matcher.services.compound import indexing_candidates, split_compound, subword_candidates


def test_known_compounds_split_on_pattern():
    assert split_compound("스마트폰") == ["스마트", "폰"]
    assert split_compound("블루투스이어폰") == ["블루투스", "이어폰"]
    assert split_compound("무선마우스") == ["무선", "마우스"]


def test_short_token_is_returned_unchanged():
    assert split_compound("가방") == ["가방"]
    assert split_compound("노트북") == ["노트북"]
    assert split_compound("스마트") == ["스마트"]


def test_long_token_falls_back_to_two_character_chunks():
    assert split_compound("웹프로그래밍") == ["웹프", "로그", "래밍"]
    assert split_compound("전통주선물세트") == ["전통", "주선", "물세", "트"]
    assert split_compound("스마트안경") == ["스마", "트안", "경"]


def test_subword_candidates_keep_original_word_first():
    assert subword_candidates("스마트폰") == ["스마트폰", "스마트", "폰"]
    assert subword_candidates("가방") == ["가방"]


def test_indexing_candidates_add_jamo_prefixes():
    assert indexing_candidates("폰") == ["폰", "포"]

    candidates = indexing_candidates("스마트폰")
    assert candidates[:3] == ["스마트폰", "스마트", "폰"]
    assert "스맡" in candidates
    assert len(candidates) == len(set(candidates))
