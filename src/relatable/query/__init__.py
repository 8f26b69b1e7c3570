"""Relation resolution, search composition and record materialization."""

from relatable.query.composer import QueryComposer, keyword_clause
from relatable.query.materializer import attach, decode_json, materialize, materialize_rows, prepare
from relatable.query.resolver import (
    ALL_CARDINALITIES,
    needs_join,
    resolve_joins,
    resolve_lookups,
    rewrite_circular_filter,
)

__all__ = [
    "QueryComposer",
    "keyword_clause",
    "ALL_CARDINALITIES",
    "needs_join",
    "resolve_joins",
    "resolve_lookups",
    "rewrite_circular_filter",
    "attach",
    "decode_json",
    "materialize",
    "materialize_rows",
    "prepare",
]
