"""
Command line entry point.

Usage:
    orgmeta index [--rebuild] [--no-prune]
    orgmeta query --columns title date --filter '["and", ["type", "book"], "read"]' \\
        --sort date:desc --alias title=Title --title-links --format table
    orgmeta stats

Exit codes:
    0 - Success
    2 - Configuration error (bad settings, filter or store location)
"""

import argparse
import json
import sys

from loguru import logger
from pydantic import ValidationError

from orgmeta.common.errors import ConfigurationError
from orgmeta.config.logger import setup_logging
from orgmeta.config.settings import AppSettings, load_settings
from orgmeta.db_sqlite.metadata import get_index_stats, get_keys, open_store
from orgmeta.features.org_indexer.reindex import reindex_from_settings
from orgmeta.features.org_query.compiler import build_query
from orgmeta.features.org_query.executor import execute_query
from orgmeta.features.org_query.rendering import render_list, render_table
from orgmeta.features.org_query.schemas import QuerySpec


def _parse_sort(values: list[str]) -> list[tuple[str, str]]:
    pairs = []
    for value in values:
        column, _, direction = value.partition(":")
        pairs.append((column, direction or "asc"))
    return pairs


def _parse_aliases(values: list[str]) -> dict[str, str]:
    aliases = {}
    for value in values:
        column, sep, alias = value.partition("=")
        if not sep:
            raise ConfigurationError(f"Alias must look like column=Header, got {value!r}")
        aliases[column] = alias
    return aliases


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="orgmeta", description="Index and query org frontmatter")
    sub = parser.add_subparsers(dest="command", required=True)

    index = sub.add_parser("index", help="Reindex every registered document")
    index.add_argument("--rebuild", action="store_true", help="Clear the store first")
    index.add_argument(
        "--no-prune",
        dest="prune",
        action="store_false",
        help="Keep rows for IDs that left the registry",
    )

    query = sub.add_parser("query", help="Query indexed frontmatter")
    query.add_argument("--columns", nargs="+", required=True, help="Columns to show")
    query.add_argument("--filter", default=None, help="Filter DSL as JSON")
    query.add_argument("--sort", nargs="*", default=[], help="column[:asc|desc]")
    query.add_argument("--alias", nargs="*", default=[], help="column=Header")
    query.add_argument("--title-links", action="store_true", help="Render titles as links")
    query.add_argument("--format", choices=["table", "list"], default="table")
    query.add_argument("--show-sql", action="store_true", help="Print the SQL instead of running")

    sub.add_parser("stats", help="Show index statistics")
    return parser


def _run_index(args: argparse.Namespace, settings: AppSettings) -> int:
    def report(percent: int, done: int, total: int) -> None:
        print(f"\rIndexing... {percent}% ({done}/{total})", end="", file=sys.stderr, flush=True)

    summary = reindex_from_settings(
        settings, on_progress=report, rebuild=args.rebuild, prune=args.prune
    )
    print(file=sys.stderr)
    print(f"Indexed: {summary.describe()}")
    return 0


def _run_query(args: argparse.Namespace, settings: AppSettings) -> int:
    try:
        raw_filter = json.loads(args.filter) if args.filter else None
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"--filter is not valid JSON: {e}") from e

    spec = QuerySpec(
        columns=args.columns,
        column_aliases=_parse_aliases(args.alias),
        filter=raw_filter,
        sort=_parse_sort(args.sort),
        link_display="title" if args.title_links else None,
    )

    if args.show_sql:
        sql, params = build_query(spec)
        print(sql)
        print(json.dumps(params))
        return 0

    result = execute_query(settings.store.db_path_resolved, spec)
    print(render_table(result) if args.format == "table" else render_list(result))
    return 0


def _run_stats(settings: AppSettings) -> int:
    with open_store(settings.store.db_path_resolved, create=False) as conn:
        stats = get_index_stats(conn)
        keys = get_keys(conn)
    for name, value in stats.items():
        print(f"{name}: {value}")
    print(f"key names: {', '.join(keys)}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
    except ValidationError as e:
        print(f"Invalid configuration:\n{e}", file=sys.stderr)
        return 2

    setup_logging(settings.log_level, settings.log_format)

    try:
        if args.command == "index":
            return _run_index(args, settings)
        if args.command == "query":
            return _run_query(args, settings)
        return _run_stats(settings)
    except (ConfigurationError, ValidationError) as e:
        logger.error(f"Configuration error: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
