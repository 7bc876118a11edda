"""Compile a QuerySpec into parameterised SQL over org_files.

Shape of the generated statement:

    SELECT o.id,
           MAX(CASE WHEN o.key = ? THEN o.value END),   -- one per column
           ...
    FROM org_files o
    WHERE <filter predicate>
    GROUP BY o.id
    ORDER BY (<sort col>) IS NULL, <sort col> DESC, ...

Every user-supplied fragment (keys, values, column names) is a bound
parameter. Only operators from the closed Operator enum and sort
directions are written into the SQL text.

Filter predicates test membership of o.id in a subquery, so a filter on
one key never restricts which rows feed the column aggregates.
"""

from typing import Any

from orgmeta.common.errors import FilterError
from orgmeta.features.org_query.schemas import (
    And,
    Compare,
    FilterExpr,
    MatchAll,
    Operator,
    Or,
    QuerySpec,
    SortKey,
    TagContains,
)

LINK_SUFFIX = ".link"
TAGS_KEY = "filetags"

SqlFragment = tuple[str, list[Any]]


# ============================================================================
# Filter Clause
# ============================================================================


def _value_test(operator: Operator) -> str:
    if operator is Operator.EQ:
        return "value = ?"
    if operator is Operator.LIKE:
        return "value LIKE ?"
    if operator.is_numeric:
        return f"CAST(value AS INTEGER) {operator.value} ?"
    raise FilterError(f"Unsupported operator: {operator!r}")


def compile_filter(expr: FilterExpr) -> SqlFragment:
    """Translate a filter expression into a WHERE predicate.

    Returns:
        (predicate SQL over alias o, bound parameters)

    Raises:
        FilterError: If expr is not one of the filter expression types
    """
    if isinstance(expr, MatchAll):
        return "1 = 1", []

    if isinstance(expr, TagContains):
        return (
            "o.id IN (SELECT id FROM org_files WHERE key = ? AND instr(value, ?) > 0)",
            [TAGS_KEY, expr.tag],
        )

    if isinstance(expr, (And, Or)):
        if not expr.children:
            raise FilterError(f"{type(expr).__name__} needs at least one sub-filter")
        joiner = " AND " if isinstance(expr, And) else " OR "
        parts: list[str] = []
        params: list[Any] = []
        for child in expr.children:
            sql, child_params = compile_filter(child)
            parts.append(f"({sql})")
            params.extend(child_params)
        return joiner.join(parts), params

    if isinstance(expr, Compare):
        return (
            f"o.id IN (SELECT id FROM org_files WHERE key = ? AND {_value_test(expr.operator)})",
            [expr.key, expr.value],
        )

    raise FilterError(f"Unsupported filter expression: {expr!r}")


# ============================================================================
# Column and Sort Clauses
# ============================================================================


def compile_column(name: str) -> SqlFragment:
    """Select one scalar per document for a requested column.

    "key.link" selects the link of the row for key, anything else
    selects the value of the row whose key is the column name.
    """
    if name.endswith(LINK_SUFFIX):
        return "MAX(CASE WHEN o.key = ? THEN o.link END)", [name[: -len(LINK_SUFFIX)]]
    return "MAX(CASE WHEN o.key = ? THEN o.value END)", [name]


def compile_sort(sort: list[SortKey]) -> tuple[str | None, list[Any]]:
    """Translate sort keys into an ORDER BY clause.

    Documents with no value for a sort column are placed after those
    that have one, for both directions.

    Returns:
        (clause or None when sort is empty, bound parameters)
    """
    if not sort:
        return None, []

    terms: list[str] = []
    params: list[Any] = []
    for key in sort:
        column_sql, column_params = compile_column(key.column)
        terms.append(f"({column_sql}) IS NULL")
        terms.append(f"{column_sql} {key.direction.upper()}")
        params.extend(column_params)
        params.extend(column_params)

    return "ORDER BY " + ", ".join(terms), params


# ============================================================================
# Full Statement
# ============================================================================


def build_query(spec: QuerySpec) -> SqlFragment:
    """Assemble the SELECT for a query spec.

    Result rows are (id, *working_columns).
    """
    select_parts = ["o.id"]
    params: list[Any] = []
    for name in spec.working_columns:
        column_sql, column_params = compile_column(name)
        select_parts.append(column_sql)
        params.extend(column_params)

    where_sql, where_params = compile_filter(spec.filter)
    params.extend(where_params)

    sql = f"SELECT {', '.join(select_parts)} FROM org_files o WHERE {where_sql} GROUP BY o.id"

    order_sql, order_params = compile_sort(spec.sort)
    if order_sql:
        sql += f" {order_sql}"
        params.extend(order_params)

    return sql, params
