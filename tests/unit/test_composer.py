"""Tests for search plan composition."""

import pytest

from relatable.core.types import (
    ComposerConfig,
    JoinClause,
    SearchOptions,
    SortClause,
    SortDirection,
)
from relatable.query.composer import QueryComposer, keyword_clause
from relatable.schema.models import Schema


@pytest.fixture
def composer() -> QueryComposer:
    return QueryComposer()


class TestCompose:
    def test_keyword_search_example(self, composer, registry):
        plan = composer.compose(registry.get("post"), {"q": "demo", "range": 10, "start": 0})

        assert plan.table == "post"
        assert plan.joins == []
        assert plan.where() == (
            "post_active = %s AND (LOWER(post_title) LIKE %s OR LOWER(post_body) LIKE %s)"
        )
        assert plan.parameters() == [1, "%demo%", "%demo%"]
        assert plan.range == 10
        assert plan.start == 0

    def test_defaults(self, composer, registry):
        plan = composer.compose(registry.get("post"), None)
        assert plan.range == 50
        assert plan.start == 0
        assert plan.where() == "post_active = %s"

    def test_accepts_search_options(self, composer, registry):
        plan = composer.compose(registry.get("post"), SearchOptions(range=5))
        assert plan.range == 5

    def test_explicit_active_filter_wins(self, composer, registry):
        plan = composer.compose(registry.get("post"), {"filter": {"post_active": 0}})
        assert plan.where() == "post_active = %s"
        assert plan.parameters() == [0]

    def test_null_active_filter_means_default(self, composer, registry):
        plan = composer.compose(registry.get("post"), {"filter": {"post_active": None}})
        assert plan.where() == "post_active = %s"
        assert plan.parameters() == [1]

    def test_no_active_field(self, composer, registry):
        plan = composer.compose(registry.get("account"), {})
        assert plan.filters == []
        # one-to-one relations are joined on every search
        assert plan.joins[0] == JoinClause.using("account_profile", "account_id")

    def test_filter_triggers_join(self, composer, registry):
        plan = composer.compose(registry.get("post"), {"filter": {"tag_id": 9}})
        assert plan.joins == [JoinClause.using("post_tag", "post_id")]
        assert plan.where() == "tag_id = %s AND post_active = %s"
        assert plan.parameters() == [9, 1]

    def test_circular_filter_rewritten(self, composer, registry):
        plan = composer.compose(registry.get("post"), {"filter": {"post_id": 5}})
        assert plan.joins == [JoinClause.on("post_post", "post_id = post_id_2")]
        assert plan.where() == "post_active = %s AND post_id_1 = %s"
        assert plan.parameters() == [1, 5]

    def test_invalid_filter_column_dropped(self, composer, registry):
        plan = composer.compose(
            registry.get("post"), {"filter": {"post_title = '' OR 1=1 --": "x"}}
        )
        assert plan.where() == "post_active = %s"

    def test_filter_values_are_bound(self, composer, registry):
        plan = composer.compose(registry.get("post"), {"filter": {"post_title": "'; DROP"}})
        assert "DROP" not in plan.where()
        assert "'; DROP" in plan.parameters()

    def test_multiple_keywords_are_conjunctive(self, composer, registry):
        plan = composer.compose(registry.get("post"), {"q": ["Foo", "bar"]})
        group = "(LOWER(post_title) LIKE %s OR LOWER(post_body) LIKE %s)"
        assert plan.where() == f"post_active = %s AND {group} AND {group}"
        assert plan.parameters() == [1, "%foo%", "%foo%", "%bar%", "%bar%"]

    def test_keywords_ignored_without_searchable_fields(self, composer, registry):
        plan = composer.compose(registry.get("account"), {"q": "demo"})
        assert plan.filters == []

    def test_lenient_pagination(self, composer, registry):
        plan = composer.compose(registry.get("post"), {"range": "abc", "start": "20"})
        assert plan.range == 50
        assert plan.start == 20

    def test_custom_defaults(self, registry):
        composer = QueryComposer(ComposerConfig(default_range=5, active_value=True))
        plan = composer.compose(registry.get("post"), {})
        assert plan.range == 5
        assert plan.parameters() == [True]

    def test_sorts(self, composer, registry):
        plan = composer.compose(
            registry.get("post"),
            {"order": {"post_created": "desc", "post_title": "ASC", "bad col": "ASC"}},
        )
        assert plan.sorts == [
            SortClause(column="post_created", direction=SortDirection.DESC),
            SortClause(column="post_title", direction=SortDirection.ASC),
        ]


class TestSpanClauses:
    """Range predicates, including the lower-bound-only quirk."""

    def test_both_bounds(self, composer):
        clauses = composer.span_clauses({"post_created": ["2024-01-01", "2024-12-31"]})
        assert [c.template for c in clauses] == ["post_created >= %s", "post_created <= %s"]
        assert [c.values for c in clauses] == [("2024-01-01",), ("2024-12-31",)]

    def test_lower_bound_only(self, composer):
        clauses = composer.span_clauses({"post_created": ["2024-01-01"]})
        assert [c.template for c in clauses] == ["post_created >= %s"]

    def test_upper_bound_without_lower_is_ignored(self, composer):
        assert composer.span_clauses({"post_created": [None, "2024-12-31"]}) == []
        assert composer.span_clauses({"post_created": ["", "2024-12-31"]}) == []

    @pytest.mark.parametrize("lower", [0, "0", False, 0.0])
    def test_falsy_lower_bound_drops_the_span(self, composer, lower):
        assert composer.span_clauses({"price": [lower, 10]}) == []

    def test_nonzero_lower_bound(self, composer):
        clauses = composer.span_clauses({"price": [1, 10]})
        assert [c.template for c in clauses] == ["price >= %s", "price <= %s"]

    def test_empty_and_malformed_spans(self, composer):
        assert composer.span_clauses({"price": []}) == []
        assert composer.span_clauses({"price": "10"}) == []
        assert composer.span_clauses({"bad col": [1, 2]}) == []


class TestKeywordClause:
    def test_lowercases_keyword(self):
        clause = keyword_clause(["tag_name"], "News")
        assert clause.template == "(LOWER(tag_name) LIKE %s)"
        assert clause.values == ("%news%",)

    def test_three_fields_two_keywords(self):
        schema = Schema(
            name="product",
            primary="product_id",
            searchable_fields=("product_name", "product_sku", "product_brand"),
        )
        plan = QueryComposer().compose(schema, {"q": ["red", "XL"]})

        group = (
            "(LOWER(product_name) LIKE %s OR LOWER(product_sku) LIKE %s"
            " OR LOWER(product_brand) LIKE %s)"
        )
        assert plan.where() == f"{group} AND {group}"
        assert plan.parameters() == ["%red%"] * 3 + ["%xl%"] * 3


class TestQuoting:
    @pytest.fixture
    def quoted(self) -> QueryComposer:
        return QueryComposer(quote=lambda name: f'"{name}"')

    def test_filters_and_active(self, quoted, registry):
        plan = quoted.compose(registry.get("post"), {"filter": {"tag_id": 9}})
        assert plan.where() == '"tag_id" = %s AND "post_active" = %s'

    def test_circular_join_condition(self, quoted, registry):
        plan = quoted.compose(registry.get("post"), {"filter": {"post_id": 5}})
        assert plan.joins == [JoinClause.on("post_post", '"post_id" = "post_id_2"')]
        assert plan.where() == '"post_active" = %s AND "post_id_1" = %s'

    def test_span(self, quoted):
        clauses = quoted.span_clauses({"item-count": [1, 5]})
        assert [c.template for c in clauses] == ['"item-count" >= %s', '"item-count" <= %s']

    def test_keywords(self, quoted, registry):
        plan = quoted.compose(registry.get("tag"), {"q": "news"})
        assert plan.where() == '(LOWER("tag_name") LIKE %s)'
