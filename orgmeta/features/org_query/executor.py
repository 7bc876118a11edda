"""Run a compiled query and shape its rows.

One output row per document that passes the filter. Values missing
for a document come back as empty strings. In title-link mode the
title column is rewritten into a link to its document.
"""

import re

from loguru import logger

from orgmeta.db_sqlite.metadata import open_store, require_existing_store, select
from orgmeta.features.org_query.compiler import build_query
from orgmeta.features.org_query.schemas import QueryResult, QuerySpec

TITLE_COLUMN = "title"
FILE_LINK_COLUMN = "file.link"

# Display text may itself contain brackets, e.g. "notes [2021].org"
ID_LINK_RE = re.compile(r"^\[\[id:([^\[\]]+)\]\[.*\]\]$")


def title_as_link(title: str | None, file_link: str | None) -> str:
    """Render a title as a link to the document it belongs to.

    Args:
        title: Stored title value (may be absent)
        file_link: Stored link of the file row, e.g. [[id:XYZ][notes.org]]

    Returns:
        [[id:XYZ][title]] when file_link is an id link, otherwise the
        raw title, or "" when there is no title
    """
    if not title:
        return ""
    match = ID_LINK_RE.match(file_link or "")
    if match is None:
        return title
    return f"[[id:{match.group(1)}][{title}]]"


def shape_row(spec: QuerySpec, raw: tuple) -> tuple[str, ...]:
    """Turn (id, *working_columns) into the requested output columns."""
    values = dict(zip(spec.working_columns, raw[1:], strict=True))

    shaped: list[str] = []
    for column in spec.columns:
        if spec.link_display == "title" and column == TITLE_COLUMN:
            shaped.append(title_as_link(values.get(TITLE_COLUMN), values.get(FILE_LINK_COLUMN)))
        else:
            value = values.get(column)
            shaped.append("" if value is None else str(value))
    return tuple(shaped)


def display_headers(spec: QuerySpec) -> list[str]:
    return [spec.column_aliases.get(column, column) for column in spec.columns]


def execute_query(db_path: str | None, spec: QuerySpec) -> QueryResult:
    """Run a query against the metadata store.

    Args:
        db_path: Path to an existing SQLite store
        spec: Validated query description

    Returns:
        Headers (aliased) and one row per matching document

    Raises:
        StorageConfigError: If db_path is unset or missing
    """
    require_existing_store(db_path)
    sql, params = build_query(spec)
    logger.debug("Executing frontmatter query", extra={"sql": sql, "params": params})

    rows: list[tuple[str, ...]] = []
    with open_store(db_path, create=False) as conn:
        select(conn, sql, params, on_row=lambda raw: rows.append(shape_row(spec, raw)))

    logger.debug(f"Query returned {len(rows)} rows")
    return QueryResult(headers=display_headers(spec), rows=rows)
