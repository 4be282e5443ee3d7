"""카테고리 검색 응답 스키마."""

from __future__ import annotations

from dataclasses import field
from typing import List

from pydantic.dataclasses import dataclass as pydantic_dataclass


@pydantic_dataclass
class CategorySearchResult:
    cat_id: str
    full_category_path: str
    # percentage in [0, 100]
    similarity: float
    embedding_similarity: float = 0.0
    path_similarity: float = 0.0
    exact_match: bool = False
    partial_match: bool = False


@pydantic_dataclass
class CategorySearchResponse:
    query: str
    results: List[CategorySearchResult] = field(default_factory=list)


@pydantic_dataclass
class CategoryNameSuggestion:
    name: str
    score: float
