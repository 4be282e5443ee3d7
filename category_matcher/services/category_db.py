"""Category catalog and vectors stored in PostgreSQL with pgvector."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import psycopg

from category_matcher.models.category import CategoryRecord, CategoryVector
from category_matcher.services import db
from category_matcher.services.catalog import CategoryStorageError

logger = logging.getLogger(__name__)

CATEGORY_TABLE = "categories"
EMBEDDING_TABLE = "category_embeddings"


class PgCategoryStore:
    """Reads categories and writes their embeddings through pgvector."""

    def __init__(self, database_url: Optional[str] = None) -> None:
        self._url = db.resolve_database_url(database_url)

    def ensure_schema(self, dimension: int) -> None:
        try:
            with db.get_connection(self._url, with_vector=False) as conn:
                with conn.cursor() as cur:
                    cur.execute("CREATE EXTENSION IF NOT EXISTS vector;")
                    cur.execute(
                        f"""
                        CREATE TABLE IF NOT EXISTS {CATEGORY_TABLE} (
                            cat_id TEXT PRIMARY KEY,
                            major_category TEXT NOT NULL,
                            middle_category TEXT,
                            minor_category TEXT,
                            detailed_category TEXT,
                            created_at TIMESTAMPTZ DEFAULT NOW()
                        );
                        """
                    )
                    cur.execute(
                        f"""
                        CREATE TABLE IF NOT EXISTS {EMBEDDING_TABLE} (
                            cat_id TEXT PRIMARY KEY REFERENCES {CATEGORY_TABLE}(cat_id) ON DELETE CASCADE,
                            vector vector({int(dimension)}),
                            updated_at TIMESTAMPTZ DEFAULT NOW()
                        );
                        """
                    )
                conn.commit()
        except psycopg.Error as exc:
            raise CategoryStorageError("Failed to prepare category tables") from exc

    def load_catalog(self) -> List[CategoryRecord]:
        sql = (
            f"SELECT cat_id, major_category, COALESCE(middle_category, ''), "
            f"COALESCE(minor_category, ''), COALESCE(detailed_category, '') "
            f"FROM {CATEGORY_TABLE} ORDER BY cat_id"
        )
        try:
            with db.get_connection(self._url) as conn, conn.cursor() as cur:
                cur.execute(sql)
                rows = cur.fetchall()
        except psycopg.Error as exc:
            raise CategoryStorageError("Failed to load categories") from exc

        records: List[CategoryRecord] = []
        for cat_id, *segments in rows:
            record = CategoryRecord.from_segments(cat_id, segments)
            if record.path_segments:
                records.append(record)
        return records

    def load_vectors(self) -> List[CategoryVector]:
        sql = f"SELECT cat_id, vector FROM {EMBEDDING_TABLE}"
        try:
            with db.get_connection(self._url) as conn, conn.cursor() as cur:
                cur.execute(sql)
                rows = cur.fetchall()
        except psycopg.Error as exc:
            raise CategoryStorageError("Failed to load category vectors") from exc
        return [
            CategoryVector(cat_id=str(cat_id), vector=[float(v) for v in vector])
            for cat_id, vector in rows
            if vector is not None
        ]

    def save_vectors(self, vectors: Sequence[CategoryVector]) -> None:
        payload = [
            {"id": vec.cat_id, "vector": _to_vector_literal(vec.vector)} for vec in vectors
        ]
        if not payload:
            return
        try:
            with db.get_connection(self._url) as conn:
                with conn.cursor() as cur:
                    cur.executemany(
                        f"""
                        INSERT INTO {EMBEDDING_TABLE} (cat_id, vector, updated_at)
                        VALUES (%(id)s, %(vector)s::vector, NOW())
                        ON CONFLICT (cat_id)
                        DO UPDATE SET vector = EXCLUDED.vector, updated_at = NOW();
                        """,
                        payload,
                    )
                conn.commit()
        except psycopg.Error as exc:
            raise CategoryStorageError(
                f"Failed to save {len(payload)} category vectors"
            ) from exc
        logger.debug("Saved %d category vectors", len(payload))


def _to_vector_literal(values: Sequence[float]) -> str:
    formatted = ",".join(f"{value:.12f}" for value in values)
    return f"[{formatted}]"
