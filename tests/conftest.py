"""Pytest fixtures for orgmeta tests.

Provides a temporary org root with documents, a registry writer, a
temporary store path and a loguru capture sink.
"""

from collections.abc import Callable
from pathlib import Path

import pytest
from loguru import logger

from orgmeta.features.id_registry.id_locations import RegisteredDocument
from sample_docs import (
    ARTICLE_DOC,
    BOOK_DOC,
    NO_HEADER_DOC,
    SECOND_BOOK_DOC,
    UNDATED_BOOK_DOC,
)


@pytest.fixture
def org_root(tmp_path: Path) -> Path:
    root = tmp_path / "org"
    root.mkdir()
    return root


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "store" / "org_files.db")


@pytest.fixture
def write_doc(org_root: Path) -> Callable[[str, str], Path]:
    """Write a document under the org root and return its absolute path."""

    def _write(relative_path: str, text: str) -> Path:
        path = org_root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_registry(tmp_path: Path) -> Callable[[list[tuple[str, ...]]], str]:
    """Write an org-id-locations style registry file.

    Each entry is (absolute_path, id, id, ...).
    """

    def _write(entries: list[tuple[str, ...]]) -> str:
        body = " ".join(
            "(" + " ".join('"' + part.replace('"', '\\"') + '"' for part in entry) + ")"
            for entry in entries
        )
        path = tmp_path / ".org-id-locations"
        path.write_text(f"({body})\n", encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def library(write_doc) -> list[RegisteredDocument]:
    """A small set of documents covering books, an article and a bare file."""
    write_doc("books/dune.org", BOOK_DOC)
    write_doc("books/neuromancer.org", SECOND_BOOK_DOC)
    write_doc("books/draft.org", UNDATED_BOOK_DOC)
    write_doc("articles/indexing.org", ARTICLE_DOC)
    write_doc("inbox.org", NO_HEADER_DOC)
    return [
        RegisteredDocument(id="DUNE", path="books/dune.org"),
        RegisteredDocument(id="NEURO", path="books/neuromancer.org"),
        RegisteredDocument(id="DRAFT", path="books/draft.org"),
        RegisteredDocument(id="ART", path="articles/indexing.org"),
        RegisteredDocument(id="INBOX", path="inbox.org"),
    ]


@pytest.fixture
def indexed_store(db_path: str, org_root: Path, library) -> str:
    """Store path with the library fixture already indexed."""
    from orgmeta.features.org_indexer.reindex import reindex_all

    summary = reindex_all(db_path, library, str(org_root))
    assert summary.errors == 0
    return db_path


@pytest.fixture
def log_messages():
    """Capture loguru records as (level, message, extra) tuples."""
    records: list[tuple[str, str, dict]] = []
    handler_id = logger.add(
        lambda msg: records.append(
            (msg.record["level"].name, msg.record["message"], msg.record["extra"])
        ),
        level="TRACE",
    )
    yield records
    logger.remove(handler_id)
