"""Per-document frontmatter indexer.

Turns a document's header block into org_files rows and replaces the
document's previous rows in a single transaction.

Rows written per document:
- one row per header key (value = display text, link = rich link if any)
- file: bare filename, linked back to the document ID
- file.path: path relative to the document root
"""

import sqlite3
from collections.abc import Iterable
from pathlib import PurePosixPath

from loguru import logger

from orgmeta.db_sqlite.metadata.repository import (
    FrontmatterRow,
    delete_rows_for_id,
    insert_rows,
)
from orgmeta.features.frontmatter.parser import extract_link, parse_frontmatter

FILE_KEY = "file"
FILE_PATH_KEY = "file.path"


def synthesize_rows(
    doc_id: str,
    relative_path: str,
    frontmatter: Iterable[tuple[str, str]],
) -> list[FrontmatterRow]:
    """Build the storage rows for one document.

    Args:
        doc_id: Document ID
        relative_path: Path relative to the document root
        frontmatter: (key, raw_value) pairs from parse_frontmatter

    Returns:
        Header rows in source order followed by the file and file.path rows
    """
    rows: list[FrontmatterRow] = []
    for key, raw_value in frontmatter:
        display, link = extract_link(raw_value)
        rows.append(FrontmatterRow(id=doc_id, key=key.lower(), value=display, link=link))

    filename = PurePosixPath(relative_path).name
    rows.append(
        FrontmatterRow(
            id=doc_id,
            key=FILE_KEY,
            value=filename,
            link=f"[[id:{doc_id}][{filename}]]",
        )
    )
    rows.append(FrontmatterRow(id=doc_id, key=FILE_PATH_KEY, value=relative_path))
    return rows


def index_document(conn: sqlite3.Connection, doc_id: str, relative_path: str, text: str) -> bool:
    """Replace a document's rows with those extracted from its text.

    Runs in one transaction: delete old rows, insert new ones, commit.

    Args:
        conn: Open store connection (autocommit mode)
        doc_id: Document ID
        relative_path: Path relative to the document root
        text: Document contents

    Returns:
        True if at least one row was written

    Raises:
        Exception: If anything outside the per-row fallback fails
            (transaction rolled back)
    """
    try:
        conn.execute("BEGIN IMMEDIATE")

        removed = delete_rows_for_id(conn, doc_id)
        frontmatter = parse_frontmatter(text)
        rows = synthesize_rows(doc_id, relative_path, frontmatter)
        written = insert_rows(conn, rows)

        conn.commit()

        logger.debug(
            f"Indexed {doc_id} ({relative_path}): "
            f"{len(frontmatter)} header keys, {written} rows written, {removed} replaced"
        )
        return written > 0

    except Exception:
        # Rollback on any error
        try:
            conn.execute("ROLLBACK")
        except sqlite3.Error:
            pass
        raise
