"""Text embedding service powered by configurable backends."""

from __future__ import annotations

from typing import List, Sequence

from category_matcher.core.config import Settings
from category_matcher.models.category import CategoryRecord
from category_matcher.services.embedding_backends import get_text_backend


class TextEmbedder:
    """Encodes queries and category paths into same-dimension vectors."""

    def __init__(self, backend: str | None = None, settings: Settings | None = None) -> None:
        self._backend = get_text_backend(backend, settings)

    @property
    def dimension(self) -> int:
        return int(self._backend.dimension)

    def encode(self, text: str) -> List[float]:
        return self._backend.encode_text(text)

    def encode_batch(self, texts: Sequence[str]) -> List[List[float]]:
        return self._backend.encode_batch(list(texts))

    def encode_category(
        self, record: CategoryRecord, catalog: Sequence[CategoryRecord] = ()
    ) -> List[float]:
        return self._backend.encode_category(record, catalog)
