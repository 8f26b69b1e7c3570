"""Core components for relatable."""

from relatable.core.connection import DatabaseConnection
from relatable.core.types import (
    Cardinality,
    ComposerConfig,
    FilterClause,
    Intent,
    JoinClause,
    JoinKind,
    QueryPlan,
    RelationLookup,
    SearchOptions,
    SearchResult,
    ServiceConfig,
    SortClause,
    SortDirection,
)

__all__ = [
    "DatabaseConnection",
    "Cardinality",
    "Intent",
    "JoinKind",
    "SortDirection",
    "JoinClause",
    "FilterClause",
    "SortClause",
    "QueryPlan",
    "RelationLookup",
    "SearchOptions",
    "SearchResult",
    "ComposerConfig",
    "ServiceConfig",
]
