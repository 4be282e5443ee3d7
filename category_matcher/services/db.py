"""PostgreSQL connection helpers."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional

import psycopg
from pgvector.psycopg import register_vector

from category_matcher.core.config import get_settings


class DatabaseNotConfigured(RuntimeError):
    """Raised when DATABASE_URL is missing."""


def resolve_database_url(url: Optional[str] = None) -> str:
    url = url or get_settings().database_url
    if not url:
        raise DatabaseNotConfigured(
            "DATABASE_URL environment variable is not set."
        )
    return url


@contextmanager
def get_connection(
    url: Optional[str] = None, *, with_vector: bool = True
) -> Generator[psycopg.Connection, None, None]:
    """Yield a PostgreSQL connection, with pgvector types registered by default.

    Pass ``with_vector=False`` before the ``vector`` extension exists.
    """

    conn = psycopg.connect(resolve_database_url(url))
    try:
        if with_vector:
            register_vector(conn)
        yield conn
    finally:
        conn.close()
