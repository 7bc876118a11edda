"""Parse the nested-list filter DSL into a filter expression tree.

DSL shapes:
    None or []                  match every document
    "book"                      filetags contains "book"
    ["and", f1, f2, ...]        all sub-filters match (":and" also accepted)
    ["or", f1, f2, ...]         any sub-filter matches (":or" also accepted)
    [key, value]                comparison atom

Comparison atoms are resolved in this order, first match wins:
    1. key "file.path"          wildcard match on the relative path
    2. key "file.name"          exact match on the bare filename
    3. value ">=N" "<=N" ">N" "<N"   integer comparison
    4. value containing "%"     wildcard match
    5. anything else            exact match
"""

from typing import Any

from orgmeta.common.errors import FilterError
from orgmeta.db_sqlite.metadata.indexer import FILE_KEY, FILE_PATH_KEY
from orgmeta.features.org_query.schemas import (
    And,
    Compare,
    FilterExpr,
    MatchAll,
    Operator,
    Or,
    TagContains,
)

FILE_NAME_KEY = "file.name"
WILDCARD = "%"

# Longest prefixes first so ">=5" is not read as ">" followed by "=5"
_NUMERIC_PREFIXES = (
    (">=", Operator.GTE),
    ("<=", Operator.LTE),
    (">", Operator.GT),
    ("<", Operator.LT),
)

_COMBINATORS = {"and": And, "or": Or}


def parse_atom(key: str, value: str) -> Compare:
    """Resolve a [key, value] atom into a comparison.

    Raises:
        FilterError: If a numeric operator is followed by a non-integer
    """
    key = key.lower()

    if key == FILE_PATH_KEY:
        return Compare(FILE_PATH_KEY, Operator.LIKE, value)

    if key == FILE_NAME_KEY:
        return Compare(FILE_KEY, Operator.EQ, value)

    for prefix, operator in _NUMERIC_PREFIXES:
        if value.startswith(prefix):
            operand = value[len(prefix) :].strip()
            try:
                return Compare(key, operator, int(operand))
            except ValueError as e:
                raise FilterError(
                    f"Numeric filter on '{key}' needs an integer after '{prefix}', got {operand!r}"
                ) from e

    if WILDCARD in value:
        return Compare(key, Operator.LIKE, value)

    return Compare(key, Operator.EQ, value)


def _keyword(head: Any) -> str | None:
    """Return the normalised combinator name if head looks like one."""
    if not isinstance(head, str):
        return None
    name = head.lower()
    if name.startswith(":"):
        return name[1:]
    if name in _COMBINATORS:
        return name
    return None


def parse_filter(raw: Any) -> FilterExpr:
    """Parse a DSL value (or pass through an already-parsed tree).

    Raises:
        FilterError: On any shape the DSL does not define
    """
    if isinstance(raw, (MatchAll, TagContains, And, Or, Compare)):
        return raw

    if raw is None:
        return MatchAll()

    if isinstance(raw, str):
        return TagContains(raw)

    if not isinstance(raw, (list, tuple)):
        raise FilterError(f"Unsupported filter expression: {raw!r}")

    if not raw:
        return MatchAll()

    keyword = _keyword(raw[0])
    if keyword is not None:
        combinator = _COMBINATORS.get(keyword)
        if combinator is None:
            raise FilterError(f"Unknown filter keyword: {raw[0]}")
        if len(raw) < 2:
            raise FilterError(f"'{raw[0]}' needs at least one sub-filter")
        return combinator(tuple(parse_filter(child) for child in raw[1:]))

    if len(raw) == 2 and all(isinstance(part, str) for part in raw):
        return parse_atom(raw[0], raw[1])

    raise FilterError(f"Unsupported filter expression: {raw!r}")
