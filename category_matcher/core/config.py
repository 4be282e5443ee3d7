"""Application configuration.

:class:`Settings` reads plain environment variables (``EMBED_BACKEND``,
``DATABASE_URL``, ...) and an optional ``.env`` file in the working directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parents[1]
DEFAULT_CATALOG_PATH = PACKAGE_DIR / "data" / "categories.json"
DEFAULT_VECTORS_PATH = DEFAULT_CATALOG_PATH.with_name("category_vectors.json")

load_dotenv()


class Settings(BaseSettings):
    """Configuration values for the category matcher."""

    model_config = SettingsConfigDict(extra="ignore")

    app_name: str = "category-matcher"
    log_level: str = "INFO"

    embed_backend: str = "hash"
    embed_dim: int = 100
    embed_model_name: str = "sentence-transformers/all-MiniLM-L6-v2"
    embed_device: Optional[str] = None

    category_store: str = "json"
    category_catalog_path: Path = DEFAULT_CATALOG_PATH
    category_vectors_path: Path = DEFAULT_VECTORS_PATH
    database_url: Optional[str] = None

    search_default_limit: int = 5
    search_min_score: float = 30.0
    search_embedding_weight: float = 0.4
    search_path_weight: float = 0.6
    search_lexical_fallback: bool = True

    index_batch_size: int = 128
    index_max_workers: int = 4


def get_settings() -> Settings:
    return Settings()
