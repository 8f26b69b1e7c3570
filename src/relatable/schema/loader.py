"""Loading schemas from declarative definitions.

Definitions are plain dicts (or ``*.json`` files holding one dict each):

    {
        "name": "post",
        "primary": "post_id",
        "fields": [
            {"name": "post_title", "type": "text", "searchable": true},
            {"name": "post_slug", "type": "uuid"},
            {"name": "post_active", "type": "active"}
        ],
        "relations": [{"name": "tag", "many": 3}]
    }

Reverse relations cannot be known from a single definition, so a
``SchemaRegistry`` keeps every definition and derives them when a schema is
requested.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from relatable.core.types import Cardinality
from relatable.exceptions import SchemaNotFoundError, ValidationError
from relatable.schema.models import Relation, Schema

logger = logging.getLogger(__name__)

# Field types stored as serialized JSON
JSON_FIELD_TYPES = frozenset(
    {"json", "tag", "meta", "checkboxes", "multirange", "files", "images", "rawjson"}
)


def _parse_cardinality(many: Any) -> Cardinality:
    if isinstance(many, Cardinality):
        return many
    if isinstance(many, bool):
        raise ValueError(f"Invalid relation 'many' value {many!r}")
    if isinstance(many, int):
        return Cardinality.from_many(many)
    if isinstance(many, str):
        if many.isdigit():
            return Cardinality.from_many(int(many))
        try:
            return Cardinality(many.lower())
        except ValueError:
            raise ValueError(
                f"Invalid relation 'many' value '{many}'. "
                f"Valid values: 0-3 or {', '.join(Cardinality.values())}"
            ) from None
    raise ValueError(f"Invalid relation 'many' value {many!r}")


class SchemaRegistry:
    """Keeps declarative schema definitions and builds ``Schema`` objects."""

    def __init__(self, definitions: list[dict[str, Any]] | None = None) -> None:
        self._definitions: dict[str, dict[str, Any]] = {}
        for definition in definitions or []:
            self.register(definition)

    @classmethod
    def from_directory(cls, path: str | Path) -> SchemaRegistry:
        """Load every ``*.json`` definition found in a directory.

        Raises:
            FileNotFoundError: If the directory doesn't exist
            json.JSONDecodeError: If a file contains invalid JSON
        """
        directory = Path(path)
        if not directory.is_dir():
            raise FileNotFoundError(f"Schema directory not found: {path}")

        registry = cls()
        for file_path in sorted(directory.glob("*.json")):
            with file_path.open("r") as f:
                registry.register(json.load(f))
        logger.info(f"Loaded {len(registry)} schema(s) from {directory}")
        return registry

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def register(self, definition: dict[str, Any]) -> None:
        """Add or replace a definition.

        Raises:
            ValidationError: If the definition has no name
        """
        name = definition.get("name") if isinstance(definition, dict) else None
        if not name or not isinstance(name, str):
            raise ValidationError(
                "Schema definition needs a 'name'.", {"name": "missing or not a string"}
            )
        self._definitions[name] = definition

    def list_schemas(self) -> list[str]:
        """Names of all registered schemas, sorted."""
        return sorted(self._definitions)

    def primary_of(self, name: str) -> str:
        """Primary key column of a schema, registered or not."""
        definition = self._definitions.get(name)
        if definition and definition.get("primary"):
            return str(definition["primary"])
        return f"{name}_id"

    def _build_relations(self, definition: dict[str, Any]) -> list[Relation]:
        source = definition["name"]
        source_primary = self.primary_of(source)
        relations = []
        for spec in definition.get("relations", []):
            target = spec["name"]
            if target == source:
                local_key = f"{source_primary}_1"
                foreign_key = f"{source_primary}_2"
            else:
                local_key = source_primary
                foreign_key = self.primary_of(target)

            relations.append(
                Relation(
                    name=target,
                    table=spec.get("table") or f"{source}_{target}",
                    local_key=spec.get("local_key") or local_key,
                    foreign_key=spec.get("foreign_key") or foreign_key,
                    cardinality=_parse_cardinality(spec.get("many", 1)),
                    source=source,
                )
            )
        return relations

    def get(self, name: str) -> Schema:
        """Build the schema for ``name``, including its reverse relations.

        Raises:
            SchemaNotFoundError: If no definition is registered under ``name``
        """
        definition = self._definitions.get(name)
        if definition is None:
            raise SchemaNotFoundError(name, self.list_schemas())

        created = updated = active = None
        uuid_fields: list[str] = []
        json_fields: list[str] = []
        searchable_fields: list[str] = []

        for field in definition.get("fields", []):
            field_name = field["name"]
            field_type = str(field.get("type", "text")).lower()
            if field_type == "created":
                created = field_name
            elif field_type == "updated":
                updated = field_name
            elif field_type == "active":
                active = field_name
            elif field_type == "uuid":
                uuid_fields.append(field_name)
            elif field_type in JSON_FIELD_TYPES:
                json_fields.append(field_name)

            if field.get("searchable"):
                searchable_fields.append(field_name)

        reverse_relations = [
            relation
            for other_name, other in self._definitions.items()
            if other_name != name
            for relation in self._build_relations(other)
            if relation.name == name
        ]

        return Schema(
            name=name,
            primary=self.primary_of(name),
            created=created,
            updated=updated,
            active=active,
            uuid_fields=tuple(uuid_fields),
            json_fields=tuple(json_fields),
            searchable_fields=tuple(searchable_fields),
            relations=tuple(self._build_relations(definition)),
            reverse_relations=tuple(reverse_relations),
        )

    def describe(self, name: str) -> dict[str, Any]:
        """Schema as a JSON-serializable dict."""
        return self.get(name).to_dict()
