"""Schema descriptors: the immutable metadata every query is built from.

A ``Schema`` describes one entity's table and its declared relations. A
``Relation`` is a tagged variant: its cardinality plus whether it points
back at the declaring entity (a self-referential relation such as a
parent/child hierarchy stored in ``post_post``).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from relatable.core.types import Cardinality, is_identifier


def _check_identifier(value: Any) -> Any:
    if value is not None and not is_identifier(value):
        raise ValueError(
            f"'{value}' is not a valid identifier (letters, digits, hyphen and underscore only)"
        )
    return value


class Relation(BaseModel):
    """A relation declared by ``source`` towards the entity ``name``."""

    name: str = Field(..., description="Related entity name, also the attach name on reads")
    table: str = Field(..., description="Junction table holding the pairing")
    local_key: str = Field(..., description="Declaring entity's key column in the junction")
    foreign_key: str = Field(..., description="Related entity's key column in the junction")
    cardinality: Cardinality
    source: str = Field(..., description="Entity that declares the relation")

    model_config = {"frozen": True}

    @field_validator("name", "table", "local_key", "foreign_key", "source")
    @classmethod
    def _identifier(cls, value: str) -> str:
        return _check_identifier(value)

    @property
    def self_referential(self) -> bool:
        """True when both sides of the relation are the same table."""
        return self.name == self.source

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "table": self.table,
            "local_key": self.local_key,
            "foreign_key": self.foreign_key,
            "cardinality": self.cardinality.value,
            "source": self.source,
            "self_referential": self.self_referential,
        }


class Schema(BaseModel):
    """Immutable description of one entity.

    Attached to a service once, before any operation, and never mutated.
    """

    name: str = Field(..., description="Table name")
    primary: str = Field(..., description="Primary key column")
    created: str | None = Field(default=None, description="Creation timestamp column")
    updated: str | None = Field(default=None, description="Update timestamp column")
    active: str | None = Field(default=None, description="Visibility flag column")
    uuid_fields: tuple[str, ...] = ()
    json_fields: tuple[str, ...] = ()
    searchable_fields: tuple[str, ...] = ()
    relations: tuple[Relation, ...] = ()
    reverse_relations: tuple[Relation, ...] = ()

    model_config = {"frozen": True}

    @field_validator("name", "primary", "created", "updated", "active")
    @classmethod
    def _identifier(cls, value: str | None) -> str | None:
        return _check_identifier(value)

    @field_validator("uuid_fields", "json_fields", "searchable_fields")
    @classmethod
    def _field_names(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for name in value:
            _check_identifier(name)
        return value

    @model_validator(mode="after")
    def _relations_belong_to_schema(self) -> Schema:
        for relation in self.relations:
            if relation.source != self.name:
                raise ValueError(
                    f"Relation '{relation.table}' is declared by '{relation.source}', "
                    f"not by '{self.name}'. Put it in reverse_relations instead."
                )
        for relation in self.reverse_relations:
            if relation.name != self.name:
                raise ValueError(
                    f"Reverse relation '{relation.table}' points at '{relation.name}', "
                    f"not at '{self.name}'."
                )
        return self

    def get_relations(self, cardinality: Cardinality | None = None) -> dict[str, Relation]:
        """Relations declared by this entity, keyed by junction table."""
        return {
            r.table: r
            for r in self.relations
            if cardinality is None or r.cardinality == cardinality
        }

    def get_reverse_relations(
        self, cardinality: Cardinality | None = None
    ) -> dict[str, Relation]:
        """Relations other entities declare towards this one, keyed by table."""
        return {
            r.table: r
            for r in self.reverse_relations
            if cardinality is None or r.cardinality == cardinality
        }

    def get_circular(self) -> Relation | None:
        """The relation from this entity to itself, if any."""
        for relation in self.relations:
            if relation.self_referential:
                return relation
        return None

    def junction(self, relation_name: str) -> Relation | None:
        """Find the relation stored in ``{name}_{relation_name}``."""
        return self.get_relations().get(f"{self.name}_{relation_name}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "primary": self.primary,
            "created": self.created,
            "updated": self.updated,
            "active": self.active,
            "uuid_fields": list(self.uuid_fields),
            "json_fields": list(self.json_fields),
            "searchable_fields": list(self.searchable_fields),
            "relations": [r.to_dict() for r in self.relations],
            "reverse_relations": [r.to_dict() for r in self.reverse_relations],
        }
