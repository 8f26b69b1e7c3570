"""Schema descriptors and loading."""

from relatable.schema.loader import JSON_FIELD_TYPES, SchemaRegistry
from relatable.schema.models import Relation, Schema

__all__ = [
    "Schema",
    "Relation",
    "SchemaRegistry",
    "JSON_FIELD_TYPES",
]
