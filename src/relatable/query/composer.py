"""Search plan composition.

Turns loosely-typed search options (``filter``, ``span``, ``range``,
``start``, ``order``, ``q``) into a ``QueryPlan``. Column names coming from
the caller are checked against the identifier pattern and silently dropped
when they do not match; values are always bound as parameters. Column names
written into filter templates go through the composer's ``quote`` callable,
so names such as ``item-code`` are not read as expressions.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from relatable.core.types import (
    ComposerConfig,
    FilterClause,
    Intent,
    QueryPlan,
    Quote,
    SearchOptions,
    SortClause,
    SortDirection,
    is_empty,
    is_empty_bound,
    is_identifier,
    unquoted,
)
from relatable.query.resolver import ALL_CARDINALITIES, resolve_joins, rewrite_circular_filter
from relatable.schema.models import Schema

logger = logging.getLogger(__name__)


def keyword_clause(fields: Sequence[str], keyword: str, quote: Quote = unquoted) -> FilterClause:
    """OR-group matching one keyword case-insensitively against every field."""
    where = " OR ".join(f"LOWER({quote(field)}) LIKE %s" for field in fields)
    pattern = f"%{keyword.lower()}%"
    return FilterClause(template=f"({where})", values=(pattern,) * len(fields))


class QueryComposer:
    """Builds search plans for a schema.

    Example:
        composer = QueryComposer()
        plan = composer.compose(schema, {"q": "demo", "range": 10})
        plan.where()
        # "post_active = %s AND (LOWER(post_title) LIKE %s OR LOWER(post_body) LIKE %s)"
    """

    def __init__(self, config: ComposerConfig | None = None, quote: Quote = unquoted) -> None:
        """Initialize the composer.

        Args:
            config: Search defaults and the identifier pattern
            quote: Renders column names into filter templates, usually the
                resource's dialect quoting
        """
        self._config = config or ComposerConfig()
        self._quote = quote

    @property
    def config(self) -> ComposerConfig:
        return self._config

    def _is_identifier(self, name: Any) -> bool:
        if is_identifier(name, self._config.identifier_pattern):
            return True
        logger.debug(f"Dropping invalid column name {name!r}")
        return False

    def compose(self, schema: Schema, options: SearchOptions | Mapping[str, Any] | None) -> QueryPlan:
        """Compose the search plan.

        Args:
            schema: Schema of the searched entity
            options: Search options, as a ``SearchOptions`` or a plain mapping

        Returns:
            The plan for the rows query; the total count reuses its joins
            and filters without pagination
        """
        if not isinstance(options, SearchOptions):
            options = SearchOptions.model_validate(dict(options or {}))

        filters = dict(options.filter)
        if schema.active and filters.get(schema.active) is None:
            filters[schema.active] = self._config.active_value

        joins = resolve_joins(
            schema, ALL_CARDINALITIES, filters.keys(), Intent.SEARCH, quote=self._quote
        )
        filters = rewrite_circular_filter(schema, filters)

        clauses = [
            FilterClause(template=f"{self._quote(column)} = %s", values=(value,))
            for column, value in filters.items()
            if self._is_identifier(column)
        ]
        clauses.extend(self.span_clauses(options.span))

        if schema.searchable_fields:
            clauses.extend(
                keyword_clause(schema.searchable_fields, keyword, self._quote)
                for keyword in options.q
            )

        return QueryPlan(
            table=schema.name,
            joins=joins,
            filters=clauses,
            sorts=self.sort_clauses(options.order),
            start=options.start if options.start is not None else self._config.default_start,
            range=options.range if options.range is not None else self._config.default_range,
        )

    def span_clauses(self, span: Mapping[str, Any]) -> list[FilterClause]:
        """Range predicates.

        Both predicates depend on the lower bound: when it is missing (see
        ``is_empty_bound``, so ``0`` and ``"0"`` count as missing) the upper
        bound is ignored too, and ``[None, 10]`` or ``[0, 10]`` produce no
        predicate at all.
        """
        clauses = []
        for column, value in span.items():
            if is_empty(value) or not self._is_identifier(column):
                continue
            if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
                continue

            lower = value[0] if len(value) > 0 else None
            upper = value[1] if len(value) > 1 else None
            if is_empty_bound(lower):
                continue

            name = self._quote(column)
            clauses.append(FilterClause(template=f"{name} >= %s", values=(lower,)))
            if upper is not None:
                clauses.append(FilterClause(template=f"{name} <= %s", values=(upper,)))
        return clauses

    def sort_clauses(self, order: Mapping[str, Any]) -> list[SortClause]:
        """Sort keys in the given order; invalid columns or directions are dropped."""
        sorts = []
        for column, direction in order.items():
            parsed = SortDirection.parse(direction)
            if parsed is None or not self._is_identifier(column):
                logger.debug(f"Dropping sort {column!r} {direction!r}")
                continue
            sorts.append(SortClause(column=column, direction=parsed))
        return sorts
