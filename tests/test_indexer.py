"""Tests for row synthesis and per-document indexing."""

import sqlite3

import pytest

from orgmeta.db_sqlite.metadata import (
    FrontmatterRow,
    get_rows_for_id,
    index_document,
    open_store,
    select,
    synthesize_rows,
    upsert_row,
)

# ============================================================================
# Row Synthesis
# ============================================================================


@pytest.mark.unit
def test_synthesize_rows_adds_file_rows():
    rows = synthesize_rows(
        "DUNE",
        "books/dune.org",
        [("TITLE", "Dune"), ("author", "[[id:herbert][Frank Herbert]]")],
    )

    assert rows == [
        FrontmatterRow("DUNE", "title", "Dune", None),
        FrontmatterRow("DUNE", "author", "Frank Herbert", "[[id:herbert][Frank Herbert]]"),
        FrontmatterRow("DUNE", "file", "dune.org", "[[id:DUNE][dune.org]]"),
        FrontmatterRow("DUNE", "file.path", "books/dune.org", None),
    ]


@pytest.mark.unit
def test_synthesize_rows_without_frontmatter():
    rows = synthesize_rows("X", "inbox.org", [])

    assert [row.key for row in rows] == ["file", "file.path"]


# ============================================================================
# Indexing
# ============================================================================


@pytest.mark.integration
def test_document_without_frontmatter_is_found(db_path):
    with open_store(db_path) as conn:
        found = index_document(conn, "INBOX", "inbox.org", "* Heading\n")
        rows = get_rows_for_id(conn, "INBOX")

    assert found is True
    assert {row.key for row in rows} == {"file", "file.path"}


@pytest.mark.integration
def test_reindex_removes_stale_keys(db_path):
    with open_store(db_path) as conn:
        index_document(conn, "A", "a.org", "#+TITLE: A\n#+STATUS: draft\n#+OBSOLETE: yes\n")
        index_document(conn, "A", "a.org", "#+TITLE: A v2\n")
        rows = get_rows_for_id(conn, "A")

    assert {row.key: row.value for row in rows} == {
        "title": "A v2",
        "file": "a.org",
        "file.path": "a.org",
    }


@pytest.mark.integration
def test_duplicate_keys_last_one_wins(db_path):
    with open_store(db_path) as conn:
        index_document(conn, "A", "a.org", "#+TITLE: First\n#+TITLE: Second\n")
        titles = select(
            conn, "SELECT value FROM org_files WHERE id = ? AND key = ?", ["A", "title"]
        )

    assert titles == [("Second",)]


@pytest.mark.integration
def test_upsert_overwrites_same_id_and_key(db_path):
    with open_store(db_path) as conn:
        upsert_row(conn, FrontmatterRow("A", "title", "one"))
        upsert_row(conn, FrontmatterRow("A", "title", "two", "[[id:A][two]]"))
        rows = get_rows_for_id(conn, "A")

    assert rows == [FrontmatterRow("A", "title", "two", "[[id:A][two]]")]


@pytest.mark.integration
def test_other_documents_are_untouched(db_path):
    with open_store(db_path) as conn:
        index_document(conn, "A", "a.org", "#+TITLE: A\n")
        index_document(conn, "B", "b.org", "#+TITLE: B\n")
        index_document(conn, "A", "a.org", "")
        b_rows = get_rows_for_id(conn, "B")

    assert {row.key: row.value for row in b_rows}["title"] == "B"


def _reject_values(conn: sqlite3.Connection, value: str) -> None:
    conn.execute(
        f"""
        CREATE TRIGGER reject_{value} BEFORE INSERT ON org_files
        WHEN NEW.value = '{value}'
        BEGIN SELECT RAISE(ABORT, 'rejected value'); END
        """
    )


@pytest.mark.integration
def test_rejected_row_falls_back_to_empty_value(db_path, log_messages):
    with open_store(db_path) as conn:
        _reject_values(conn, "poison")
        found = index_document(
            conn, "A", "a.org", "#+TITLE: ok\n#+STATUS: [[id:x][poison]]\n#+TYPE: note\n"
        )
        rows = {row.key: row for row in get_rows_for_id(conn, "A")}

    assert found is True
    assert rows["status"] == FrontmatterRow("A", "status", "", None)
    assert rows["title"].value == "ok"
    assert rows["type"].value == "note"
    assert any(level == "WARNING" and "retrying" in message for level, message, _ in log_messages)


@pytest.mark.integration
def test_key_dropped_when_fallback_also_fails(db_path, log_messages):
    with open_store(db_path) as conn:
        _reject_values(conn, "poison")
        conn.execute(
            """
            CREATE TRIGGER reject_status BEFORE INSERT ON org_files
            WHEN NEW.key = 'status'
            BEGIN SELECT RAISE(ABORT, 'rejected key'); END
            """
        )
        found = index_document(conn, "A", "a.org", "#+STATUS: poison\n#+TITLE: kept\n")
        keys = {row.key for row in get_rows_for_id(conn, "A")}

    assert found is True
    assert keys == {"title", "file", "file.path"}
    assert any(level == "ERROR" and "Dropping" in message for level, message, _ in log_messages)


@pytest.mark.integration
def test_failure_outside_row_writes_rolls_back(db_path, monkeypatch):
    import orgmeta.db_sqlite.metadata.indexer as indexer

    with open_store(db_path) as conn:
        index_document(conn, "A", "a.org", "#+TITLE: original\n")

        def explode(*_args):
            raise RuntimeError("synthesis failed")

        monkeypatch.setattr(indexer, "synthesize_rows", explode)
        with pytest.raises(RuntimeError):
            index_document(conn, "A", "a.org", "#+TITLE: replaced\n")

        rows = {row.key: row.value for row in get_rows_for_id(conn, "A")}

    assert rows["title"] == "original"
