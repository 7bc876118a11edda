"""Full reindex of every registered document.

For each registered (id, path):
1. Skip documents whose file is missing (not an error)
2. Read the file and replace the document's rows in the store
3. Count the outcome: processed, skipped, or error

One bad document never aborts the run. Progress is reported as an
integer percentage, only when it changes.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from orgmeta.config.settings import AppSettings
from orgmeta.db_sqlite.metadata import (
    clear_index,
    index_document,
    open_store,
    prune_unregistered,
    vacuum,
)
from orgmeta.features.id_registry.id_locations import RegisteredDocument, read_registered_ids

ProgressCallback = Callable[[int, int, int], None]


@dataclass
class IndexSummary:
    """Outcome counts of a reindex run."""

    processed: int = 0
    skipped: int = 0
    errors: int = 0

    @property
    def total(self) -> int:
        return self.processed + self.skipped + self.errors

    def describe(self) -> str:
        return (
            f"{self.processed} documents with frontmatter, "
            f"{self.skipped} skipped, {self.errors} errors"
        )


class ProgressReporter:
    """Emit percentage-complete notifications when the integer value changes."""

    def __init__(self, total: int, callback: ProgressCallback | None = None):
        self.total = total
        self.callback = callback
        self.done = 0
        self._last_percent: int | None = None

    def advance(self) -> None:
        self.done += 1
        percent = self.done * 100 // self.total if self.total else 100
        if percent == self._last_percent:
            return
        self._last_percent = percent
        if self.callback is not None:
            self.callback(percent, self.done, self.total)
        logger.trace(f"Indexing progress {percent}% ({self.done}/{self.total})")


def _read_document(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def reindex_all(
    db_path: str,
    documents: Sequence[RegisteredDocument],
    root_dir: str,
    on_progress: ProgressCallback | None = None,
) -> IndexSummary:
    """Index every registered document into the store.

    Args:
        db_path: Path to the SQLite store (created if missing)
        documents: Registry records to index
        root_dir: Directory the record paths are relative to
        on_progress: Optional callback(percent, done, total)

    Returns:
        Counts of processed, skipped and failed documents
    """
    summary = IndexSummary()
    progress = ProgressReporter(len(documents), on_progress)
    root = Path(root_dir)

    logger.info(
        "Starting frontmatter reindex",
        extra={"documents": len(documents), "root_dir": root_dir, "db_path": db_path},
    )

    with open_store(db_path) as conn:
        for doc in documents:
            try:
                source = root / doc.path
                if not source.is_file():
                    logger.debug(f"Document file missing, skipping: {doc.path}")
                    summary.skipped += 1
                    continue

                if index_document(conn, doc.id, doc.path, _read_document(source)):
                    summary.processed += 1
                else:
                    summary.skipped += 1

            except Exception as e:
                summary.errors += 1
                logger.error(
                    "Failed to index document",
                    extra={
                        "id": doc.id,
                        "path": doc.path,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    },
                )

            finally:
                progress.advance()

    logger.info(f"Reindex complete: {summary.describe()}")
    return summary


def reindex_from_settings(
    settings: AppSettings,
    on_progress: ProgressCallback | None = None,
    rebuild: bool = False,
    prune: bool = True,
) -> IndexSummary:
    """Read the registry named in settings and reindex every document.

    Args:
        settings: Application settings (store and registry locations)
        on_progress: Optional callback(percent, done, total)
        rebuild: Clear and vacuum the whole store before indexing
        prune: Remove rows for IDs no longer in the registry

    Returns:
        Counts of processed, skipped and failed documents
    """
    root_dir = settings.registry.root_dir_resolved
    documents = read_registered_ids(settings.registry.id_locations_file_resolved, root_dir)
    db_path = settings.store.db_path_resolved

    if rebuild or prune:
        with open_store(db_path) as conn:
            if rebuild:
                clear_index(conn)
                vacuum(conn)
            elif prune:
                prune_unregistered(conn, (doc.id for doc in documents))

    return reindex_all(db_path, documents, root_dir, on_progress)
