"""Offline (re)computation of category vectors in independent batches."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from tqdm import tqdm

from category_matcher.models.category import CategoryRecord, CategoryVector
from category_matcher.services.catalog import CategoryStorageError
from category_matcher.services.text_embed_service import TextEmbedder

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 128
DEFAULT_MAX_WORKERS = 4


@dataclass
class IndexReport:
    total: int = 0
    batches: int = 0
    committed: int = 0
    failed_batches: List[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_batches


def build_vectors(
    records: Sequence[CategoryRecord],
    embedder: TextEmbedder,
    catalog: Optional[Sequence[CategoryRecord]] = None,
) -> List[CategoryVector]:
    """Compute vectors for ``records``; ``catalog`` feeds the related-category signal."""
    context = list(catalog) if catalog is not None else list(records)
    return [
        CategoryVector(cat_id=record.cat_id, vector=list(embedder.encode_category(record, context)))
        for record in records
    ]


def split_batches(records: Sequence[CategoryRecord], batch_size: int) -> List[List[CategoryRecord]]:
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")
    return [list(records[start : start + batch_size]) for start in range(0, len(records), batch_size)]


def _index_batch(
    store,
    embedder: TextEmbedder,
    batch: Sequence[CategoryRecord],
    catalog: Sequence[CategoryRecord],
) -> int:
    vectors = build_vectors(batch, embedder, catalog)
    store.save_vectors(vectors)
    return len(vectors)


def reindex(
    store,
    embedder: TextEmbedder,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    max_workers: int = DEFAULT_MAX_WORKERS,
    show_progress: bool = False,
) -> IndexReport:
    """Recompute and save vectors for the whole catalog held by ``store``.

    Each batch is embedded and written on its own, so one failing batch leaves
    the vectors committed by the others in place. The first failure is raised
    as :class:`CategoryStorageError` once every batch has finished.
    """
    catalog = store.load_catalog()
    batches = split_batches(catalog, batch_size)
    report = IndexReport(total=len(catalog), batches=len(batches))
    if not batches:
        logger.info("Category catalog is empty; nothing to index")
        return report

    first_error: Optional[BaseException] = None
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        futures = {
            pool.submit(_index_batch, store, embedder, batch, catalog): number
            for number, batch in enumerate(batches)
        }
        progress = tqdm(
            as_completed(futures),
            total=len(futures),
            desc="Embedding categories",
            disable=not show_progress,
        )
        for future in progress:
            number = futures[future]
            try:
                report.committed += future.result()
            except Exception as exc:
                logger.error("Category batch %d failed: %s", number, exc)
                report.failed_batches.append(number)
                if first_error is None:
                    first_error = exc

    report.failed_batches.sort()
    if first_error is not None:
        raise CategoryStorageError(
            f"{len(report.failed_batches)} of {report.batches} category batches failed",
            report=report,
        ) from first_error

    if hasattr(store, "prune_vectors"):
        removed = store.prune_vectors(record.cat_id for record in catalog)
        if removed:
            logger.info("Removed %d vectors for categories no longer in the catalog", removed)

    logger.info(
        "Indexed %d categories in %d batches", report.committed, report.batches
    )
    return report
