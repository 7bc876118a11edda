"""SQLite metadata database connection management.

Every indexing run and every query opens its own connection through
open_store() and closes it before returning. There is no process-wide
database path; callers pass the location explicitly.

Connections run in autocommit mode (isolation_level=None). Writers that
need atomicity issue BEGIN IMMEDIATE / COMMIT themselves.
"""

import sqlite3
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from loguru import logger

from orgmeta.common.errors import StorageConfigError

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


def _create_connection(db_path: str) -> sqlite3.Connection:
    """Create a new SQLite connection with proper settings.

    Args:
        db_path: Path to the database file

    Returns:
        Configured SQLite connection
    """
    conn = sqlite3.connect(db_path, isolation_level=None)

    conn.execute("PRAGMA journal_mode=WAL")  # Write-Ahead Logging
    conn.execute("PRAGMA synchronous=NORMAL")  # Safe with WAL
    conn.execute("PRAGMA busy_timeout=5000")  # Wait up to 5s on SQLITE_BUSY
    conn.execute("PRAGMA temp_store=MEMORY")  # Temp tables in RAM

    return conn


def _apply_schema(conn: sqlite3.Connection) -> None:
    """Apply schema.sql to the database.

    Statements are idempotent (IF NOT EXISTS), so this runs on every
    writable open.
    """
    conn.executescript(SCHEMA_PATH.read_text())


def require_existing_store(db_path: str | None) -> str:
    """Validate that the store location is set and exists.

    Args:
        db_path: Configured database path (may be None or empty)

    Returns:
        The path, unchanged

    Raises:
        StorageConfigError: If the path is unset or no file exists there
    """
    if not db_path:
        raise StorageConfigError("Metadata store path is not set (ORGMETA_DB_PATH)")
    if not Path(db_path).is_file():
        raise StorageConfigError(f"Metadata store does not exist: {db_path}")
    return db_path


@contextmanager
def open_store(db_path: str | None, create: bool = True) -> Iterator[sqlite3.Connection]:
    """Open the metadata store for the duration of a with-block.

    The connection is closed on exit, including when the block raises or
    is interrupted.

    Args:
        db_path: Path to the SQLite file
        create: Create the file, parent directory and schema if missing.
            When False the store must already exist.

    Yields:
        Configured SQLite connection

    Raises:
        StorageConfigError: If db_path is unset, or missing with create=False
    """
    if create:
        if not db_path:
            raise StorageConfigError("Metadata store path is not set (ORGMETA_DB_PATH)")
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    else:
        require_existing_store(db_path)

    conn = _create_connection(db_path)
    try:
        if create:
            _apply_schema(conn)
            logger.debug(f"Metadata store ready: {db_path}")
        yield conn
    finally:
        conn.close()


def execute(conn: sqlite3.Connection, sql: str, params: Sequence[Any] = ()) -> int:
    """Run a statement that returns no rows.

    Returns:
        Number of rows affected (-1 for statements without a count)
    """
    cursor = conn.execute(sql, list(params))
    return cursor.rowcount


def select(
    conn: sqlite3.Connection,
    sql: str,
    params: Sequence[Any] = (),
    on_row: Callable[[tuple], None] | None = None,
) -> list[tuple]:
    """Run a query and collect its rows.

    Args:
        conn: Open connection
        sql: SELECT statement with ? placeholders
        params: Bound parameter values
        on_row: Optional callback invoked for each row in result order

    Returns:
        All result rows
    """
    rows = conn.execute(sql, list(params)).fetchall()
    if on_row is not None:
        for row in rows:
            on_row(row)
    return rows
