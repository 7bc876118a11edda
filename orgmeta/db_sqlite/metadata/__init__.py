"""SQLite metadata index for org document frontmatter.

The index is a single table, org_files, with one row per
(document id, frontmatter key). Two synthetic keys are always present
for an indexed document:
- file: bare filename, linked back to the document ID
- file.path: path relative to the document root

Query compilation lives in orgmeta.features.org_query and reads this
table through the select() primitive.
"""

from orgmeta.db_sqlite.metadata.db import (
    execute,
    open_store,
    require_existing_store,
    select,
)
from orgmeta.db_sqlite.metadata.indexer import index_document, synthesize_rows
from orgmeta.db_sqlite.metadata.maintenance import (
    clear_index,
    get_index_stats,
    prune_unregistered,
    vacuum,
)
from orgmeta.db_sqlite.metadata.repository import (
    FrontmatterRow,
    delete_rows_for_id,
    get_indexed_ids,
    get_keys,
    get_rows_for_id,
    insert_rows,
    upsert_row,
)

__all__ = [
    # Database
    "open_store",
    "require_existing_store",
    "execute",
    "select",
    # Indexer
    "index_document",
    "synthesize_rows",
    # Repository - writes
    "FrontmatterRow",
    "delete_rows_for_id",
    "upsert_row",
    "insert_rows",
    # Repository - reads
    "get_rows_for_id",
    "get_indexed_ids",
    "get_keys",
    # Maintenance
    "clear_index",
    "prune_unregistered",
    "vacuum",
    "get_index_stats",
]
