"""Relation resolution: which joins and sub-queries a query needs.

Everything here is a pure function of the schema and the caller's filter
keys. Nothing touches the database, so join selection can be tested on its
own.

Self-referential relations (``post`` related to ``post`` through
``post_post``) share column names on both sides, so a USING join would be
ambiguous. They are always joined with an explicit ON condition between the
schema's primary key and the relation's foreign key, and are excluded from
every generic join path.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from relatable.core.types import (
    Cardinality,
    FilterClause,
    Intent,
    JoinClause,
    QueryPlan,
    Quote,
    RelationLookup,
    unquoted,
)
from relatable.schema.models import Relation, Schema

ALL_CARDINALITIES = (
    Cardinality.ONE_TO_ZERO,
    Cardinality.ONE_TO_ONE,
    Cardinality.ONE_TO_MANY,
    Cardinality.MANY_TO_MANY,
)


def circular_condition(schema: Schema, relation: Relation, quote: Quote = unquoted) -> str:
    """ON condition joining a table to itself through a junction."""
    return f"{quote(schema.primary)} = {quote(relation.foreign_key)}"


def needs_join(relation: Relation, filter_keys: Iterable[str], reverse: bool = False) -> bool:
    """Whether a demand-driven join is referenced by the filter set.

    A forward many-to-many join is needed when the caller filters on the
    related entity's key; a reverse join when the caller filters on the
    declaring entity's key.
    """
    if relation.self_referential:
        return False
    key = relation.local_key if reverse else relation.foreign_key
    return key in set(filter_keys)


def _one_to_one_joins(relation: Relation) -> list[JoinClause]:
    return [
        JoinClause.using(relation.table, relation.local_key),
        JoinClause.using(relation.name, relation.foreign_key),
    ]


def resolve_joins(
    schema: Schema,
    cardinalities: Iterable[Cardinality],
    filter_keys: Iterable[str],
    intent: Intent,
    quote: Quote = unquoted,
) -> list[JoinClause]:
    """Build the ordered joins of the main query.

    Args:
        schema: Schema of the queried entity
        cardinalities: Cardinality classes to consider
        filter_keys: Columns the caller filters on (before circular rewrite)
        intent: What the query is for
        quote: Renders column names in ON conditions

    Returns:
        Joins in order: one-to-one, forward many-to-many, reverse
        one-to-many, reverse many-to-many, self-referential
    """
    if intent == Intent.WRITE:
        return []

    classes = set(cardinalities)
    keys = set(filter_keys)
    joins: list[JoinClause] = []

    if Cardinality.ONE_TO_ONE in classes:
        for relation in schema.get_relations(Cardinality.ONE_TO_ONE).values():
            # resolved by a single-row lookup on reads, never joined on search
            if relation.self_referential:
                continue
            joins.extend(_one_to_one_joins(relation))

    if intent != Intent.SEARCH:
        return joins

    if Cardinality.MANY_TO_MANY in classes:
        for relation in schema.get_relations(Cardinality.MANY_TO_MANY).values():
            if needs_join(relation, keys):
                joins.append(JoinClause.using(relation.table, relation.local_key))

    for cardinality in (Cardinality.ONE_TO_MANY, Cardinality.MANY_TO_MANY):
        if cardinality not in classes:
            continue
        for relation in schema.get_reverse_relations(cardinality).values():
            if needs_join(relation, keys, reverse=True):
                joins.append(JoinClause.using(relation.table, relation.foreign_key))

    circular = schema.get_circular()
    if circular is not None and schema.primary in keys:
        joins.append(JoinClause.on(circular.table, circular_condition(schema, circular, quote)))

    return joins


def rewrite_circular_filter(schema: Schema, filters: Mapping[str, Any]) -> dict[str, Any]:
    """Turn a filter on the primary key into a filter on the parent column.

    Filtering ``post`` by ``post_id`` while a ``post_post`` relation exists
    means "children of that post": the value moves to ``post_id_1`` and the
    original entry is removed.
    """
    rewritten = dict(filters)
    circular = schema.get_circular()
    if circular is None or schema.primary not in rewritten:
        return rewritten

    rewritten[circular.local_key] = rewritten.pop(schema.primary)
    return rewritten


def lookup_join(schema: Schema, relation: Relation, quote: Quote = unquoted) -> JoinClause:
    """Join from a junction table to the related entity's table."""
    if relation.self_referential:
        return JoinClause.on(relation.name, circular_condition(schema, relation, quote))
    return JoinClause.using(relation.name, relation.foreign_key)


def resolve_lookups(
    schema: Schema,
    record_id: Any,
    cardinalities: Iterable[Cardinality] = ALL_CARDINALITIES,
    quote: Quote = unquoted,
) -> list[RelationLookup]:
    """Build the independent sub-queries run after a successful read.

    One-to-zero relations (and self-referential one-to-one relations) fetch
    at most one row; one-to-many and many-to-many relations fetch every
    matching row without pagination.
    """
    classes = set(cardinalities)
    lookups: list[RelationLookup] = []

    for cardinality in ALL_CARDINALITIES:
        if cardinality not in classes:
            continue
        for relation in schema.get_relations(cardinality).values():
            if cardinality == Cardinality.ONE_TO_ONE and not relation.self_referential:
                continue

            single = cardinality in (Cardinality.ONE_TO_ZERO, Cardinality.ONE_TO_ONE)
            plan = QueryPlan(
                table=relation.table,
                joins=[lookup_join(schema, relation, quote)],
                filters=[
                    FilterClause(
                        template=f"{quote(relation.local_key)} = %s", values=(record_id,)
                    )
                ],
                range=1 if single else None,
            )
            lookups.append(RelationLookup(name=relation.name, plan=plan, single=single))

    return lookups
