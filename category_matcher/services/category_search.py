"""카테고리 검색 서비스."""

from __future__ import annotations

import logging
from typing import List, Optional

from category_matcher.core.config import Settings, get_settings
from category_matcher.core.logging import configure_logging
from category_matcher.schemas.category import (
    CategoryNameSuggestion,
    CategorySearchResponse,
)
from category_matcher.services import indexer
from category_matcher.services.catalog import CategoryIndex, get_category_store
from category_matcher.services.lexical import word_similarity
from category_matcher.services.ranking import rank
from category_matcher.services.text_embed_service import TextEmbedder

logger = logging.getLogger(__name__)


class CategorySearchService:
    """Owns a category index and answers search/embed calls against it."""

    def __init__(
        self,
        index: CategoryIndex,
        embedder: TextEmbedder,
        store=None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._embedder = embedder
        self._store = store
        self._index = index
        self._check_dimension(index)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "CategorySearchService":
        settings = settings or get_settings()
        configure_logging(settings.log_level)
        store = get_category_store(settings)
        embedder = TextEmbedder(settings=settings)
        index = CategoryIndex.from_store(store, embedder.dimension)
        return cls(index, embedder, store=store, settings=settings)

    @property
    def index(self) -> CategoryIndex:
        return self._index

    def search(self, query: str, limit: Optional[int] = None) -> CategorySearchResponse:
        query = (query or "").strip()
        limit = limit if limit and limit > 0 else self._settings.search_default_limit
        results = rank(
            query,
            self._index.entries(),
            limit,
            embedder=self._embedder,
            embedding_weight=self._settings.search_embedding_weight,
            path_weight=self._settings.search_path_weight,
            min_score=self._settings.search_min_score,
            allow_lexical_fallback=self._settings.search_lexical_fallback,
        )
        logger.debug("Category search '%s' -> %d results", query, len(results))
        return CategorySearchResponse(query=query, results=results)

    def embed(self, text: str) -> List[float]:
        return self._embedder.encode(text)

    def suggest_names(self, word: str, limit: int = 5) -> List[CategoryNameSuggestion]:
        """Category names closest to ``word`` by compound and jamo similarity."""
        word = (word or "").strip()
        if not word or limit <= 0:
            return []
        scored = []
        for name in self._index.segment_names():
            score = word_similarity(word, name)
            if score > 0:
                scored.append(CategoryNameSuggestion(name=name, score=round(score, 4)))
        scored.sort(key=lambda item: item.score, reverse=True)
        return scored[:limit]

    def refresh(self) -> CategoryIndex:
        store = self._require_store()
        index = CategoryIndex.from_store(store, self._embedder.dimension)
        self._check_dimension(index)
        self._index = index
        return index

    def reindex(self, show_progress: bool = False) -> indexer.IndexReport:
        store = self._require_store()
        if hasattr(store, "ensure_schema"):
            store.ensure_schema(self._embedder.dimension)
        report = indexer.reindex(
            store,
            self._embedder,
            batch_size=self._settings.index_batch_size,
            max_workers=self._settings.index_max_workers,
            show_progress=show_progress,
        )
        self.refresh()
        return report

    def _require_store(self):
        if self._store is None:
            raise RuntimeError("CategorySearchService was built without a category store")
        return self._store

    def _check_dimension(self, index: CategoryIndex) -> None:
        if index.dimension is not None and index.dimension != self._embedder.dimension:
            raise ValueError(
                f"Category vectors have dimension {index.dimension}, "
                f"but the embedder produces {self._embedder.dimension}"
            )
