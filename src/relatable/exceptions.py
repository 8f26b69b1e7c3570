"""Custom exceptions for relatable.

Errors carry a human-readable message plus a machine-readable context:
- Actionable messages that tell what went wrong AND how to fix it
- Include the available options when relevant

Failures raised by the database driver (``sqlalchemy.exc.*``) are not
wrapped; they propagate to the caller unchanged.
"""

from __future__ import annotations

from typing import Any


class RelatableError(Exception):
    """Base exception for all relatable errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Return error as JSON-serializable dict."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ConnectionError(RelatableError):
    """Failed to connect to the database."""

    pass


class NoSchemaAttachedError(RelatableError):
    """A service operation was called before a schema was attached."""

    def __init__(self, operation: str | None = None) -> None:
        if operation:
            message = (
                f"Cannot run '{operation}': no schema attached. "
                f"Call set_schema() before using the service."
            )
        else:
            message = "No schema attached. Call set_schema() before using the service."
        super().__init__(message, {"operation": operation})
        self.operation = operation


class UnknownRelationError(RelatableError):
    """link/unlink referenced a relation with no declared junction table."""

    def __init__(
        self,
        entity_name: str,
        relation_name: str,
        available_relations: list[str] | None = None,
    ) -> None:
        available = available_relations or []
        table = f"{entity_name}_{relation_name}"
        if available:
            message = (
                f"No relation '{relation_name}' on '{entity_name}' "
                f"(junction table '{table}' is not declared). "
                f"Available relations: {', '.join(available)}"
            )
        else:
            message = (
                f"No relation '{relation_name}' on '{entity_name}' "
                f"(junction table '{table}' is not declared). No relations defined."
            )

        super().__init__(
            message,
            {
                "entity_name": entity_name,
                "relation_name": relation_name,
                "table": table,
                "available_relations": available,
            },
        )
        self.entity_name = entity_name
        self.relation_name = relation_name
        self.available_relations = available


class SchemaNotFoundError(RelatableError):
    """Schema definition does not exist in the registry."""

    def __init__(self, schema_name: str, available_schemas: list[str] | None = None) -> None:
        available = available_schemas or []
        if available:
            message = (
                f"Schema '{schema_name}' not found. Available schemas: {', '.join(available)}"
            )
        else:
            message = f"Schema '{schema_name}' not found. No schemas are registered."

        super().__init__(message, {"schema_name": schema_name, "available_schemas": available})
        self.schema_name = schema_name
        self.available_schemas = available


class ValidationError(RelatableError):
    """Input data validation failed."""

    def __init__(self, message: str, field_errors: dict[str, str] | None = None) -> None:
        super().__init__(message, {"field_errors": field_errors or {}})
        self.field_errors = field_errors or {}


class QueryError(RelatableError):
    """A query could not be built from the given clauses."""

    pass
