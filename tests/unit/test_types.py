"""Tests for core types."""

import pytest

from relatable.core.types import (
    Cardinality,
    FilterClause,
    JoinClause,
    JoinKind,
    QueryPlan,
    SearchOptions,
    SortDirection,
    is_empty,
    is_empty_bound,
    is_identifier,
)


class TestCardinality:
    """Tests for Cardinality enum."""

    def test_all_values(self):
        assert Cardinality.values() == [
            "one_to_zero",
            "one_to_one",
            "one_to_many",
            "many_to_many",
        ]

    def test_from_many(self):
        """The declarative 0-3 integers map onto the four classes."""
        assert Cardinality.from_many(0) == Cardinality.ONE_TO_ZERO
        assert Cardinality.from_many(1) == Cardinality.ONE_TO_ONE
        assert Cardinality.from_many(2) == Cardinality.ONE_TO_MANY
        assert Cardinality.from_many(3) == Cardinality.MANY_TO_MANY

    def test_from_many_invalid(self):
        with pytest.raises(ValueError, match="Valid values"):
            Cardinality.from_many(4)


class TestIdentifiers:
    """Tests for column name checks."""

    @pytest.mark.parametrize("name", ["post_id", "post-title", "Tag2"])
    def test_valid(self, name):
        assert is_identifier(name) is True

    @pytest.mark.parametrize("name", ["", "post id", "id; DROP TABLE post", "a.b", 5, None])
    def test_invalid(self, name):
        assert is_identifier(name) is False

    def test_custom_pattern(self):
        assert is_identifier("post.id", r"^[a-z_.]+$") is True


class TestIsEmpty:
    def test_empty_values(self):
        for value in (None, "", [], {}, ()):
            assert is_empty(value) is True

    def test_zero_is_not_empty(self):
        """0 and False are real filter values."""
        assert is_empty(0) is False
        assert is_empty(False) is False
        assert is_empty("0") is False


class TestIsEmptyBound:
    @pytest.mark.parametrize("value", [None, "", [], 0, 0.0, "0", False])
    def test_missing(self, value):
        assert is_empty_bound(value) is True

    @pytest.mark.parametrize("value", [1, -1, "00", "2024-01-01", True])
    def test_present(self, value):
        assert is_empty_bound(value) is False


class TestSortDirection:
    def test_parse_case_insensitive(self):
        assert SortDirection.parse("desc") == SortDirection.DESC
        assert SortDirection.parse(" Asc ") == SortDirection.ASC

    def test_parse_invalid(self):
        assert SortDirection.parse("sideways") is None
        assert SortDirection.parse(1) is None


class TestQueryPlan:
    def test_where_and_parameters(self):
        plan = QueryPlan(
            table="post",
            filters=[
                FilterClause(template="post_active = %s", values=(1,)),
                FilterClause(template="post_created >= %s", values=("2024-01-01",)),
            ],
        )
        assert plan.where() == "post_active = %s AND post_created >= %s"
        assert plan.parameters() == [1, "2024-01-01"]

    def test_defaults(self):
        plan = QueryPlan(table="post")
        assert plan.joins == []
        assert plan.start == 0
        assert plan.range is None

    def test_join_constructors(self):
        using = JoinClause.using("post_tag", "post_id")
        on = JoinClause.on("post_post", "post_id = post_id_2")
        assert using.kind == JoinKind.USING and using.column == "post_id"
        assert on.kind == JoinKind.ON and on.condition == "post_id = post_id_2"


class TestSearchOptions:
    """Loosely-typed input is coerced, never rejected."""

    def test_defaults(self):
        options = SearchOptions()
        assert options.filter == {}
        assert options.range is None
        assert options.q == []

    def test_numeric_strings(self):
        options = SearchOptions.model_validate({"range": "10", "start": "20"})
        assert options.range == 10
        assert options.start == 20

    def test_non_numeric_falls_back(self):
        options = SearchOptions.model_validate({"range": "lots", "start": [1]})
        assert options.range is None
        assert options.start is None

    def test_single_keyword(self):
        assert SearchOptions.model_validate({"q": "demo"}).q == ["demo"]

    def test_non_mapping_filter(self):
        assert SearchOptions.model_validate({"filter": "post_id=1"}).filter == {}
