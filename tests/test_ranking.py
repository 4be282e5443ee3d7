import pytest

from category_matcher.models.category import CategoryRecord, CategoryVector
from category_matcher.services.embedding_utils import category_path_embedding, hashed_text_embedding
from category_matcher.services.ranking import combine_scores, rank


def _record(cat_id, path):
    return CategoryRecord.from_segments(cat_id, path.split(" > "))


def _indexed(records):
    return [
        (rec, CategoryVector(rec.cat_id, category_path_embedding(rec, records)))
        for rec in records
    ]


class FixedEmbedder:
    def __init__(self, vector):
        self.vector = vector
        self.calls = []

    def encode(self, text):
        self.calls.append(text)
        return list(self.vector)


def test_exact_category_ranks_first():
    records = [
        _record("A", "식품 > 음료 > 탄산수"),
        _record("B", "도서 > 컴퓨터/IT > 웹프로그래밍"),
    ]
    results = rank("탄산수", _indexed(records), limit=5)

    assert results[0].cat_id == "A"
    assert results[0].exact_match
    assert results[0].full_category_path == "식품 > 음료 > 탄산수"
    assert {res.cat_id for res in results} <= {"A", "B"}
    assert all(0.0 <= res.similarity <= 100.0 for res in results)


def test_empty_catalog_returns_nothing():
    assert rank("탄산수", [], limit=5) == []


def test_blank_query_returns_nothing():
    records = [_record("A", "식품 > 음료 > 탄산수"), _record("B", "식품 > 전통주 > 약주")]
    assert rank("   ", _indexed(records)) == []


def test_limit_truncates_and_defaults_to_five():
    records = [_record(str(i), f"식품 > 음료 > 항목{i}") for i in range(10)]
    entries = [(rec, None) for rec in records]

    assert len(rank("음료", entries, limit=3)) == 3
    assert len(rank("음료", entries, limit=0)) == 5


def test_exact_then_containment_then_score():
    contained = _record("E1", "식품 > 음료수")
    unrelated = _record("E3", "음반 > 음향")
    exact_high = _record("E2", "식품 > 음료")
    exact_low = _record("E4", "차 > 음료 베이스")
    entries = [(rec, None) for rec in (contained, unrelated, exact_low, exact_high)]

    results = rank("음료", entries, limit=10)

    assert [res.cat_id for res in results] == ["E2", "E4", "E1"]
    assert results[0].similarity == pytest.approx(60.0)
    assert results[1].similarity == pytest.approx(36.0)
    assert results[2].similarity == pytest.approx(27.0)
    assert results[2].partial_match and not results[2].exact_match


def test_containment_outranks_higher_scoring_overlap():
    query_vec = hashed_text_embedding("abcd")
    contained = _record("P1", "x > abcdz")
    overlapping = _record("P2", "x > abce")
    entries = [
        (overlapping, CategoryVector("P2", query_vec)),
        (contained, None),
    ]

    results = rank("abcd", entries, limit=5)

    assert [res.cat_id for res in results] == ["P1", "P2"]
    assert results[1].similarity > results[0].similarity


def test_missing_vectors_can_be_skipped():
    entries = [(_record("E2", "식품 > 음료"), None)]
    assert rank("음료", entries, allow_lexical_fallback=False) == []
    assert [res.cat_id for res in rank("음료", entries)] == ["E2"]


def test_custom_embedder_supplies_query_vector():
    embedder = FixedEmbedder([1.0, 0.0])
    entries = [(_record("V", "x > y"), CategoryVector("V", [1.0, 0.0]))]

    results = rank("zzz", entries, embedder=embedder)

    assert embedder.calls == ["zzz"]
    assert results[0].similarity == pytest.approx(40.0)
    assert results[0].embedding_similarity == pytest.approx(1.0)
    assert results[0].path_similarity == 0.0


def test_low_scores_without_word_match_are_filtered():
    embedder = FixedEmbedder([1.0, 0.0])
    entries = [(_record("V", "x > y"), CategoryVector("V", [0.6, 0.8]))]

    assert rank("zzz", entries, embedder=embedder) == []


def test_combine_scores_uses_percentage_scale():
    assert combine_scores(1.0, 1.0) == pytest.approx(100.0)
    assert combine_scores(0.5, 0.0) == pytest.approx(20.0)
