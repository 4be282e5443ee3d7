"""Category catalog index and the file-backed catalog store."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from threading import Lock
from typing import Dict, Iterable, List, Optional, Sequence

from category_matcher.core.config import Settings
from category_matcher.models.category import CategoryRecord, CategoryVector

logger = logging.getLogger(__name__)

LEVEL_FIELDS = (
    "major_category",
    "middle_category",
    "minor_category",
    "detailed_category",
)


class CategoryStorageError(RuntimeError):
    """Raised when the catalog or its vectors cannot be loaded or saved."""

    def __init__(self, message: str, report=None) -> None:
        super().__init__(message)
        self.report = report


def record_from_row(row: dict) -> CategoryRecord:
    cat_id = row.get("cat_id", row.get("id"))
    if cat_id is None or not str(cat_id).strip():
        raise ValueError("Category entry is missing 'cat_id'")
    path = row.get("path")
    if isinstance(path, list):
        segments = path
    else:
        segments = [row.get(name) for name in LEVEL_FIELDS]
    return CategoryRecord.from_segments(cat_id, segments)


class CategoryIndex:
    """Catalog records joined with their precomputed vectors."""

    def __init__(
        self,
        records: Iterable[CategoryRecord],
        vectors: Iterable[CategoryVector] = (),
        dimension: Optional[int] = None,
    ) -> None:
        self._records: List[CategoryRecord] = [rec for rec in records if rec.path_segments]
        self._by_id: Dict[str, CategoryRecord] = {rec.cat_id: rec for rec in self._records}
        self._vectors: Dict[str, CategoryVector] = {}
        for vec in vectors:
            if dimension is None:
                dimension = vec.dimension
            if vec.dimension != dimension:
                raise ValueError(
                    f"Vector for category {vec.cat_id} has dimension {vec.dimension}, expected {dimension}"
                )
            if vec.cat_id in self._by_id:
                self._vectors[vec.cat_id] = vec
        self.dimension = dimension

    @classmethod
    def from_store(cls, store, dimension: Optional[int] = None) -> "CategoryIndex":
        records = store.load_catalog()
        vectors = store.load_vectors()
        index = cls(records, vectors, dimension)
        missing = len(index) - index.vector_count
        logger.info(
            "Loaded category index: %d records, %d vectors", len(index), index.vector_count
        )
        if missing:
            logger.warning("%d categories have no precomputed vector", missing)
        return index

    def __len__(self) -> int:
        return len(self._records)

    @property
    def vector_count(self) -> int:
        return len(self._vectors)

    def entries(self) -> List[tuple[CategoryRecord, Optional[CategoryVector]]]:
        return [(rec, self._vectors.get(rec.cat_id)) for rec in self._records]

    def get(self, cat_id: str) -> Optional[CategoryRecord]:
        return self._by_id.get(str(cat_id))

    def vector(self, cat_id: str) -> Optional[CategoryVector]:
        return self._vectors.get(str(cat_id))

    def children(self, *parents: str) -> List[str]:
        """Distinct names one level below ``parents`` in first-seen order."""
        depth = len(parents)
        prefix = tuple(parents)
        names: List[str] = []
        seen = set()
        for rec in self._records:
            if rec.path_segments[:depth] != prefix or len(rec.path_segments) <= depth:
                continue
            name = rec.path_segments[depth]
            if name not in seen:
                seen.add(name)
                names.append(name)
        return names

    def segment_names(self) -> List[str]:
        names: List[str] = []
        seen = set()
        for rec in self._records:
            for segment in rec.path_segments:
                if segment not in seen:
                    seen.add(segment)
                    names.append(segment)
        return names

    def lookup(self, text: str, limit: int = 10) -> List[CategoryRecord]:
        needle = (text or "").strip().lower()
        if not needle or limit <= 0:
            return []
        matches: List[CategoryRecord] = []
        for rec in self._records:
            if any(needle in segment.lower() for segment in rec.path_segments):
                matches.append(rec)
                if len(matches) >= limit:
                    break
        return matches


class JsonCategoryStore:
    """Catalog and vectors kept in JSON files on disk."""

    def __init__(self, catalog_path: Path, vectors_path: Path) -> None:
        self._catalog_path = Path(catalog_path)
        self._vectors_path = Path(vectors_path)
        self._lock = Lock()

    def load_catalog(self) -> List[CategoryRecord]:
        data = self._read_json(self._catalog_path)
        rows = data.get("categories") if isinstance(data, dict) else None
        if not isinstance(rows, list):
            raise CategoryStorageError(
                f"{self._catalog_path} does not contain a 'categories' list"
            )
        try:
            records = [record_from_row(row) for row in rows]
        except (AttributeError, ValueError) as exc:
            raise CategoryStorageError(f"Malformed category entry in {self._catalog_path}") from exc
        return [rec for rec in records if rec.path_segments]

    def load_vectors(self) -> List[CategoryVector]:
        with self._lock:
            if not self._vectors_path.exists():
                return []
            return list(self._read_vectors().values())

    def save_vectors(self, vectors: Sequence[CategoryVector]) -> None:
        with self._lock:
            stored = self._read_vectors() if self._vectors_path.exists() else {}
            dimension = next((vec.dimension for vec in stored.values()), None)
            for vec in vectors:
                if dimension is None:
                    dimension = vec.dimension
                if vec.dimension != dimension:
                    raise ValueError(
                        f"Vector for category {vec.cat_id} has dimension {vec.dimension}, "
                        f"but {self._vectors_path} holds dimension {dimension}"
                    )
            for vec in vectors:
                stored[vec.cat_id] = vec
            self._write_vectors(stored)

    def prune_vectors(self, keep_ids: Iterable[str]) -> int:
        """Drop stored vectors whose category is not in ``keep_ids``."""
        keep = {str(cat_id) for cat_id in keep_ids}
        with self._lock:
            if not self._vectors_path.exists():
                return 0
            stored = self._read_vectors()
            stale = [cat_id for cat_id in stored if cat_id not in keep]
            for cat_id in stale:
                del stored[cat_id]
            if stale:
                self._write_vectors(stored)
            return len(stale)

    def _write_vectors(self, stored: Dict[str, CategoryVector]) -> None:
        dimension = next((vec.dimension for vec in stored.values()), 0)
        payload = {
            "dimension": dimension,
            "vectors": [
                {"cat_id": vec.cat_id, "embedding": list(vec.vector)}
                for vec in stored.values()
            ],
        }
        self._write_json(self._vectors_path, payload)

    def _read_vectors(self) -> Dict[str, CategoryVector]:
        data = self._read_json(self._vectors_path)
        rows = data.get("vectors") if isinstance(data, dict) else None
        if not isinstance(rows, list):
            raise CategoryStorageError(
                f"{self._vectors_path} does not contain a 'vectors' list"
            )
        vectors: Dict[str, CategoryVector] = {}
        try:
            for row in rows:
                cat_id = str(row["cat_id"])
                vectors[cat_id] = CategoryVector(
                    cat_id=cat_id, vector=[float(v) for v in row["embedding"]]
                )
        except (KeyError, TypeError, ValueError) as exc:
            raise CategoryStorageError(f"Malformed vector entry in {self._vectors_path}") from exc
        return vectors

    @staticmethod
    def _read_json(path: Path):
        try:
            with path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            raise CategoryStorageError(f"Failed to read {path}") from exc

    @staticmethod
    def _write_json(path: Path, payload: dict) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(payload, fh, ensure_ascii=False)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise CategoryStorageError(f"Failed to write {path}") from exc


def get_category_store(settings: Settings) -> object:
    choice = (settings.category_store or "json").lower()
    if choice == "json":
        return JsonCategoryStore(settings.category_catalog_path, settings.category_vectors_path)
    if choice == "postgres":
        from category_matcher.services.category_db import PgCategoryStore

        return PgCategoryStore(settings.database_url)
    raise RuntimeError(f"Unsupported CATEGORY_STORE value '{choice}'.")
