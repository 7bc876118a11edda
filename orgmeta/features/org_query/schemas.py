"""Query description types.

A query is described by a QuerySpec (validated once at construction)
whose filter is a closed expression tree:

    MatchAll | TagContains | And | Or | Compare

Compare carries an Operator that is decided when the filter is parsed,
so the compiler never has to re-inspect value prefixes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ============================================================================
# Filter Expression
# ============================================================================


class Operator(str, Enum):
    """Comparison applied to a stored value."""

    EQ = "="
    LIKE = "LIKE"
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="

    @property
    def is_numeric(self) -> bool:
        return self in (Operator.GT, Operator.GTE, Operator.LT, Operator.LTE)


@dataclass(frozen=True)
class MatchAll:
    """Matches every document."""


@dataclass(frozen=True)
class TagContains:
    """Document's filetags value contains the given substring."""

    tag: str


@dataclass(frozen=True)
class And:
    children: tuple["FilterExpr", ...]


@dataclass(frozen=True)
class Or:
    children: tuple["FilterExpr", ...]


@dataclass(frozen=True)
class Compare:
    """Document has a row for key whose value satisfies operator.

    For numeric operators value is an int and the stored value is cast
    to an integer before comparing.
    """

    key: str
    operator: Operator
    value: str | int


FilterExpr = Union[MatchAll, TagContains, And, Or, Compare]


# ============================================================================
# Query Specification / Result
# ============================================================================


class SortKey(BaseModel):
    """One ORDER BY entry. Documents lacking the column sort last."""

    model_config = ConfigDict(frozen=True)

    column: str = Field(min_length=1, description="Frontmatter key (or key.link)")
    direction: Literal["asc", "desc"] = Field(default="asc", description="Sort direction")

    @field_validator("direction", mode="before")
    @classmethod
    def normalize_direction(cls, v: str) -> str:
        return str(v).lower()


class QuerySpec(BaseModel):
    """Everything needed to run one query.

    Transient: built per call, never persisted.
    """

    model_config = ConfigDict(frozen=True)

    columns: list[str] = Field(min_length=1, description="Requested columns, in output order")
    column_aliases: dict[str, str] = Field(
        default_factory=dict, description="Display header per column name"
    )
    filter: Any = Field(default_factory=MatchAll, description="Filter expression tree")
    sort: list[SortKey] = Field(default_factory=list, description="Ordering, applied in sequence")
    link_display: Literal["title"] | None = Field(
        default=None, description="'title' renders the title column as a link to its document"
    )

    @field_validator("columns")
    @classmethod
    def validate_columns(cls, v: list[str]) -> list[str]:
        if any(not name for name in v):
            raise ValueError("Column names must be non-empty")
        return v

    @field_validator("filter", mode="before")
    @classmethod
    def parse_filter_dsl(cls, v: Any) -> FilterExpr:
        """Accept either a parsed expression tree or the nested-list DSL.

        Raises:
            FilterError: If the DSL has an unknown shape
        """
        from orgmeta.features.org_query.filter_parser import parse_filter

        return parse_filter(v)

    @field_validator("sort", mode="before")
    @classmethod
    def parse_sort_pairs(cls, v):
        """Accept (column, direction) pairs as well as SortKey mappings."""
        if v is None:
            return []
        keys = []
        for item in v:
            if isinstance(item, (tuple, list)):
                if len(item) != 2:
                    raise ValueError(f"sort pair must be (column, direction), got {item!r}")
                item = {"column": item[0], "direction": item[1]}
            keys.append(item)
        return keys

    @property
    def working_columns(self) -> list[str]:
        """Columns fetched from the store.

        Title-link display needs title and file.link even when the caller
        did not ask for them.
        """
        columns = list(self.columns)
        if self.link_display == "title":
            for extra in ("title", "file.link"):
                if extra not in columns:
                    columns.append(extra)
        return columns


class QueryResult(BaseModel):
    """Tabular result. Rows are aligned with headers."""

    headers: list[str] = Field(description="Column headers after alias substitution")
    rows: list[tuple[str, ...]] = Field(default_factory=list, description="One row per document")
