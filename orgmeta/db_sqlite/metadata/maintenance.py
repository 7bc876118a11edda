"""SQLite metadata maintenance operations.

Operations:
- Full clear (drop every row before a rebuild)
- Registry sync (remove rows for IDs the registry no longer knows)
- Stats and vacuum
"""

import sqlite3
from collections.abc import Iterable

from loguru import logger

from orgmeta.db_sqlite.metadata.db import execute, select
from orgmeta.db_sqlite.metadata.repository import delete_rows_for_id, get_indexed_ids


def clear_index(conn: sqlite3.Connection) -> int:
    """Delete every row in the store.

    Returns:
        Number of rows deleted
    """
    deleted = execute(conn, "DELETE FROM org_files")
    logger.info(f"Metadata index cleared ({deleted} rows)")
    return deleted


def prune_unregistered(conn: sqlite3.Connection, registered_ids: Iterable[str]) -> int:
    """Remove rows for documents that are no longer registered.

    Args:
        conn: Open store connection
        registered_ids: Every ID currently in the registry

    Returns:
        Number of documents removed
    """
    orphaned = get_indexed_ids(conn) - set(registered_ids)
    if not orphaned:
        return 0

    conn.execute("BEGIN IMMEDIATE")
    try:
        for doc_id in orphaned:
            delete_rows_for_id(conn, doc_id)
        conn.commit()
    except Exception:
        conn.execute("ROLLBACK")
        raise

    logger.info(f"Removed {len(orphaned)} unregistered documents from metadata index")
    return len(orphaned)


def vacuum(conn: sqlite3.Connection) -> None:
    """Reclaim unused space in the database.

    Should be called after large deletes.
    """
    conn.execute("VACUUM")
    logger.debug("Metadata database vacuumed")


def get_index_stats(conn: sqlite3.Connection) -> dict:
    """Get statistics about the metadata index.

    Returns:
        Dict with row, document and key counts
    """
    counts = select(
        conn,
        """
        SELECT COUNT(*),
               COUNT(DISTINCT id),
               COUNT(DISTINCT key),
               COUNT(link)
        FROM org_files
        """,
    )[0]
    rows, documents, keys, linked_values = counts
    return {
        "rows": rows,
        "documents": documents,
        "keys": keys,
        "linked_values": linked_values,
    }
