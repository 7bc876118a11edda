"""SQLite repository for the org_files table.

Write and read helpers for frontmatter rows. All operations are
synchronous and take an open connection; transaction control belongs
to the caller (see indexer.index_document).
"""

import sqlite3
from collections.abc import Iterable
from dataclasses import dataclass

from loguru import logger

from orgmeta.db_sqlite.metadata.db import execute, select

# ============================================================================
# Row Type
# ============================================================================


@dataclass(frozen=True)
class FrontmatterRow:
    """One persisted (id, key) entry."""

    id: str
    key: str
    value: str
    link: str | None = None


# ============================================================================
# Write Operations
# ============================================================================


def delete_rows_for_id(conn: sqlite3.Connection, doc_id: str) -> int:
    """Remove every row belonging to a document.

    Returns:
        Number of rows deleted
    """
    return execute(conn, "DELETE FROM org_files WHERE id = ?", [doc_id])


def upsert_row(conn: sqlite3.Connection, row: FrontmatterRow) -> None:
    """Insert a row, replacing any existing row with the same (id, key).

    Raises:
        sqlite3.Error: If the store rejects the row
    """
    execute(
        conn,
        "INSERT OR REPLACE INTO org_files (id, key, value, link) VALUES (?, ?, ?, ?)",
        [row.id, row.key, row.value, row.link],
    )


def insert_rows(conn: sqlite3.Connection, rows: Iterable[FrontmatterRow]) -> int:
    """Write rows one at a time with a degraded fallback.

    A row the store rejects is retried once with an empty value and no
    link. If that also fails the key is dropped. Neither case stops the
    remaining rows.

    Returns:
        Number of rows written (including degraded ones)
    """
    written = 0
    for row in rows:
        try:
            upsert_row(conn, row)
            written += 1
            continue
        except sqlite3.Error as e:
            logger.warning(
                "Failed to store frontmatter row, retrying with empty value",
                extra={"id": row.id, "key": row.key, "error": str(e)},
            )

        try:
            upsert_row(conn, FrontmatterRow(id=row.id, key=row.key, value=""))
            written += 1
        except sqlite3.Error as e:
            logger.error(
                "Dropping frontmatter key after fallback failed",
                extra={"id": row.id, "key": row.key, "error": str(e)},
            )

    return written


# ============================================================================
# Read Operations
# ============================================================================


def get_rows_for_id(conn: sqlite3.Connection, doc_id: str) -> list[FrontmatterRow]:
    """Get all rows of one document ordered by key."""
    result = select(
        conn,
        "SELECT id, key, value, link FROM org_files WHERE id = ? ORDER BY key",
        [doc_id],
    )
    return [FrontmatterRow(id=r[0], key=r[1], value=r[2] or "", link=r[3]) for r in result]


def get_indexed_ids(conn: sqlite3.Connection) -> set[str]:
    """Get every document ID present in the store."""
    result = select(conn, "SELECT DISTINCT id FROM org_files")
    return {row[0] for row in result}


def get_keys(conn: sqlite3.Connection) -> list[str]:
    """Get all distinct frontmatter keys in alphabetical order."""
    result = select(conn, "SELECT DISTINCT key FROM org_files ORDER BY key")
    return [row[0] for row in result]
