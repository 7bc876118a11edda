"""Tests for the nested-list filter DSL parser."""

import pytest

from orgmeta.common.errors import FilterError
from orgmeta.features.org_query.filter_parser import parse_atom, parse_filter
from orgmeta.features.org_query.schemas import (
    And,
    Compare,
    MatchAll,
    Operator,
    Or,
    TagContains,
)


class TestAtomDispatch:
    """Comparison atoms resolve in a fixed order, first match wins."""

    def test_file_path_is_wildcard_even_for_operator_values(self):
        assert parse_atom("file.path", ">=5") == Compare("file.path", Operator.LIKE, ">=5")
        assert parse_atom("file.path", "books/%") == Compare("file.path", Operator.LIKE, "books/%")

    def test_file_name_is_exact_match_on_file_key(self):
        assert parse_atom("file.name", "dune%.org") == Compare("file", Operator.EQ, "dune%.org")

    @pytest.mark.parametrize(
        "value, operator, operand",
        [
            (">=5", Operator.GTE, 5),
            ("<=5", Operator.LTE, 5),
            (">5", Operator.GT, 5),
            ("<5", Operator.LT, 5),
            (">= 10", Operator.GTE, 10),
            ("<-3", Operator.LT, -3),
        ],
    )
    def test_numeric_operators(self, value, operator, operand):
        assert parse_atom("count", value) == Compare("count", operator, operand)

    def test_numeric_operator_wins_over_wildcard(self):
        # ">=5" must not be read as ">" followed by "=5"
        assert parse_atom("count", ">=5").operator is Operator.GTE

    def test_numeric_operator_requires_integer(self):
        with pytest.raises(FilterError, match="integer"):
            parse_atom("count", ">=many")

    def test_wildcard(self):
        assert parse_atom("title", "Du%") == Compare("title", Operator.LIKE, "Du%")

    def test_default_is_exact_match(self):
        assert parse_atom("type", "book") == Compare("type", Operator.EQ, "book")

    def test_keys_are_lower_cased(self):
        assert parse_atom("TYPE", "Book") == Compare("type", Operator.EQ, "Book")


class TestFilterShapes:
    """Top-level DSL shapes."""

    @pytest.mark.parametrize("raw", [None, [], ()])
    def test_empty_matches_all(self, raw):
        assert parse_filter(raw) == MatchAll()

    def test_bare_string_is_tag_filter(self):
        assert parse_filter("scifi") == TagContains("scifi")

    def test_and_or(self):
        expr = parse_filter(["and", ["type", "book"], ["or", "scifi", ["rating", ">3"]]])

        assert expr == And(
            (
                Compare("type", Operator.EQ, "book"),
                Or((TagContains("scifi"), Compare("rating", Operator.GT, 3))),
            )
        )

    @pytest.mark.parametrize("head", [":and", ":AND", "AND"])
    def test_keyword_spellings(self, head):
        expected = And((Compare("type", Operator.EQ, "book"),))
        assert parse_filter([head, ["type", "book"]]) == expected

    def test_parsed_tree_passes_through(self):
        expr = Or((TagContains("a"),))
        assert parse_filter(expr) is expr

    @pytest.mark.parametrize(
        "raw",
        [
            [":not", ["type", "book"]],
            ["and"],
            ["type", "book", "extra"],
            ["type"],
            [["type", "book"]],
            ["rating", 5],
            42,
            {"type": "book"},
        ],
    )
    def test_unknown_shapes_raise(self, raw):
        with pytest.raises(FilterError):
            parse_filter(raw)
