"""relatable - Schema-Driven Relational Access.

Describe an entity's table, fields and relations once; relatable works out
the joins for reads, searches and links so callers never write SQL or need
to know the join topology.

Example:
    from relatable import SchemaRegistry, SqlResource, SqlService

    registry = SchemaRegistry.from_directory("schemas")
    resource = SqlResource.from_url("sqlite:///blog.db")
    posts = SqlService(resource).set_schema(registry.get("post"))

    # Create with automatic timestamps and UUID fields
    post = posts.create({"post_title": "Hello world"})

    # Pair records through the post_tag junction table
    posts.link("tag", post["post_id"], 9)

    # Search: active rows only, joined to post_tag because tag_id is filtered
    result = posts.search({"filter": {"tag_id": 9}, "q": "hello", "range": 10})
    result.rows, result.total

    # Read one record with every relation attached
    posts.get("post_id", post["post_id"])
"""

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
from relatable.exceptions import (
    ConnectionError,
    NoSchemaAttachedError,
    QueryError,
    RelatableError,
    SchemaNotFoundError,
    UnknownRelationError,
    ValidationError,
)
from relatable.query import (
    QueryComposer,
    materialize,
    materialize_rows,
    resolve_joins,
    resolve_lookups,
    rewrite_circular_filter,
)
from relatable.schema import Relation, Schema, SchemaRegistry
from relatable.service import SqlService
from relatable.sql import SqlModel, SqlResource, SqlSearch

__version__ = "0.1.0"

__all__ = [
    # Main classes
    "SqlService",
    "SqlResource",
    "SqlSearch",
    "SqlModel",
    "DatabaseConnection",
    # Schema
    "Schema",
    "Relation",
    "SchemaRegistry",
    # Types
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
    # Query building
    "QueryComposer",
    "resolve_joins",
    "resolve_lookups",
    "rewrite_circular_filter",
    "materialize",
    "materialize_rows",
    # Exceptions
    "RelatableError",
    "ConnectionError",
    "NoSchemaAttachedError",
    "UnknownRelationError",
    "SchemaNotFoundError",
    "ValidationError",
    "QueryError",
]
