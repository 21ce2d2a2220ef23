"""Full catalog rebuild orchestration.

Sequences the lifecycle protocol for callers that hold every record up
front: prepare a generation, bulk-load records in chunks, refresh, then swap
the alias. Any failure aborts before the alias swap, so the previously
installed generation keeps serving queries.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from itertools import islice
import logging
import time
from typing import TYPE_CHECKING, Any

from catalog_search.search.bulk import BulkOperation


if TYPE_CHECKING:
    from catalog_search.search.lifecycle import IndexLifecycleManager


logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500


@dataclass(frozen=True)
class CatalogRecord:
    """One catalog document to index."""

    doc_id: str | int
    fields: Mapping[str, Any]
    doc_type: str | None = None


@dataclass(frozen=True)
class RebuildResult:
    """Outcome of a full rebuild."""

    generation: str
    documents_indexed: int
    batches_sent: int
    deleted_generations: tuple[str, ...] = field(default_factory=tuple)
    duration_seconds: float = 0.0


def _chunked(records: Iterable[CatalogRecord], size: int) -> Iterator[list[CatalogRecord]]:
    iterator = iter(records)
    while chunk := list(islice(iterator, size)):
        yield chunk


class RebuildService:
    """Runs ``prepare → bulk load → refresh → install`` on one manager."""

    def __init__(self, manager: IndexLifecycleManager, *, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.manager = manager
        self.batch_size = batch_size

    def rebuild(self, records: Iterable[CatalogRecord]) -> RebuildResult:
        started = time.perf_counter()
        prepared = self.manager.prepare_new_generation()
        logger.info("Rebuilding alias %s into %s", prepared.alias, prepared.name)

        documents = 0
        batches = 0
        for chunk in _chunked(records, self.batch_size):
            operations: list[BulkOperation] = [
                self.manager.create_doc(record.doc_id, dict(record.fields), record.doc_type) for record in chunk
            ]
            self.manager.add_documents(operations)
            documents += len(operations)
            batches += 1
            logger.debug("Sent batch %d (%d documents) to %s", batches, len(operations), prepared.name)

        self.manager.refresh_index()
        installed = self.manager.install_pending_generation()
        deleted = installed.deleted if installed else ()

        duration = time.perf_counter() - started
        logger.info(
            "Rebuild of %s finished: %d documents in %d batches (%.2fs)",
            prepared.alias,
            documents,
            batches,
            duration,
        )
        return RebuildResult(
            generation=prepared.name,
            documents_indexed=documents,
            batches_sent=batches,
            deleted_generations=deleted,
            duration_seconds=duration,
        )
