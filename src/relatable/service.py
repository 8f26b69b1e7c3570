"""Schema-driven CRUD service.

``SqlService`` is the public entry point. Attach a schema, then create, read,
search, update, remove and link records without writing SQL; joins follow
from the schema's declared relations.

Example:
    resource = SqlResource.from_url("sqlite:///blog.db")
    service = SqlService(resource).set_schema(registry.get("post"))

    post = service.create({"post_title": "Hello"})
    service.link("tag", post["post_id"], 9)
    found = service.search({"filter": {"tag_id": 9}, "q": "hello"})
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from relatable.core.types import (
    Cardinality,
    FilterClause,
    Intent,
    JoinKind,
    QueryPlan,
    SearchOptions,
    SearchResult,
    ServiceConfig,
    is_identifier,
)
from relatable.exceptions import NoSchemaAttachedError, UnknownRelationError, ValidationError
from relatable.query.composer import QueryComposer
from relatable.query.materializer import attach, materialize, materialize_rows, prepare
from relatable.query.resolver import resolve_joins, resolve_lookups
from relatable.schema.models import Relation, Schema
from relatable.sql.base import Resource, SearchBuilder

logger = logging.getLogger(__name__)


def generate_uuid() -> str:
    """Generate a new random UUID as string."""
    return str(uuid4())


def build_search(resource: Resource, plan: QueryPlan) -> SearchBuilder:
    """Replay a query plan onto a fresh search builder."""
    search = resource.search(plan.table)
    for join in plan.joins:
        if join.kind == JoinKind.USING:
            search.inner_join_using(join.table, join.column or "")
        else:
            search.inner_join_on(join.table, join.condition or "")
    for clause in plan.filters:
        search.add_filter(clause.template, *clause.values)
    for sort in plan.sorts:
        search.add_sort(sort.column, sort.direction.value)
    search.set_start(plan.start)
    if plan.range is not None:
        search.set_range(plan.range)
    return search


class SqlService:
    """CRUD operations for the entity described by the attached schema.

    The service keeps no state between calls other than the schema, which
    is read-only. Errors raised by the resource are not caught.
    """

    def __init__(self, resource: Resource, config: ServiceConfig | None = None) -> None:
        """Initialize the service.

        Args:
            resource: Execution resource (``SqlResource`` or compatible)
            config: Write policies and search defaults
        """
        self._resource = resource
        self._config = config or ServiceConfig()
        self._composer = QueryComposer(self._config.composer, quote=resource.quote)
        self._schema: Schema | None = None

    @property
    def resource(self) -> Resource:
        return self._resource

    @property
    def schema(self) -> Schema | None:
        return self._schema

    def set_schema(self, schema: Schema) -> SqlService:
        """Attach the schema every operation works on."""
        self._schema = schema
        return self

    def _require_schema(self, operation: str) -> Schema:
        if self._schema is None:
            raise NoSchemaAttachedError(operation)
        return self._schema

    def _check_key(self, key: str) -> None:
        if not is_identifier(key, self._config.composer.identifier_pattern):
            raise ValidationError(
                f"Invalid column name '{key}'. Use letters, digits, hyphen and underscore only.",
                {str(key): "invalid column name"},
            )

    def _timestamp(self, table: str, column: str, now: datetime) -> Any:
        # date columns take the datetime itself, the format only applies to text
        if self._config.timestamp_format and not self._resource.is_datetime(table, column):
            return now.strftime(self._config.timestamp_format)
        return now

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a record.

        Stamps the created/updated fields with the same time and fills
        every UUID field with a fresh value.

        Returns:
            The stored record, materialized
        """
        schema = self._require_schema("create")
        data = dict(data)

        now = datetime.now(UTC).replace(microsecond=0)
        for field in (schema.created, schema.updated):
            if field:
                data[field] = self._timestamp(schema.name, field, now)

        for field in schema.uuid_fields:
            data[field] = generate_uuid()

        model = self._resource.model(prepare(data, schema)).save(schema.name)
        logger.debug(f"Created {schema.name} {model.get(schema.primary)!r}")
        return materialize(dict(model), schema) or {}

    def exists(self, key: str, value: Any) -> bool:
        """Whether any row has ``key`` equal to ``value``."""
        schema = self._require_schema("exists")
        self._check_key(key)

        search = self._resource.search(schema.name)
        row = search.add_filter(f"{self._resource.quote(key)} = %s", value).get_row()
        return row is not None

    def get(self, key: str, value: Any) -> dict[str, Any] | None:
        """Fetch one record with its relations.

        One-to-one relations are joined inline. Every other relation is
        fetched by its own query and attached under the relation name.

        Returns:
            The record, or None when nothing matches
        """
        schema = self._require_schema("get")
        self._check_key(key)

        plan = QueryPlan(
            table=schema.name,
            joins=resolve_joins(
                schema, [Cardinality.ONE_TO_ONE], [key], Intent.READ, quote=self._resource.quote
            ),
            filters=[FilterClause(template=f"{self._resource.quote(key)} = %s", values=(value,))],
        )
        row = build_search(self._resource, plan).get_row()
        if not row:
            return None

        record = materialize(row, schema) or {}
        # lookups are keyed by the primary key even when reading by another column
        record_id = row.get(schema.primary, value)
        for lookup in resolve_lookups(schema, record_id, quote=self._resource.quote):
            search = build_search(self._resource, lookup.plan)
            attach(record, lookup, search.get_row() if lookup.single else search.get_rows())
        return record

    def search(self, options: SearchOptions | dict[str, Any] | None = None) -> SearchResult:
        """Search records.

        Args:
            options: ``filter``, ``span``, ``range``, ``start``, ``order``
                and ``q`` (see ``QueryComposer``)

        Returns:
            The requested page of rows and the total number of matches
        """
        schema = self._require_schema("search")
        plan = self._composer.compose(schema, options)
        search = build_search(self._resource, plan)

        rows = materialize_rows(search.get_rows(), schema)
        return SearchResult(rows=rows, total=search.get_total())

    def update(self, data: dict[str, Any]) -> dict[str, Any]:
        """Update a record identified by the primary key in ``data``.

        Raises:
            ValidationError: If ``data`` has no primary key value
        """
        schema = self._require_schema("update")
        if data.get(schema.primary) is None:
            raise ValidationError(
                f"Updating '{schema.name}' requires '{schema.primary}' in the data.",
                {schema.primary: "required"},
            )

        data = dict(data)
        if schema.updated:
            now = datetime.now(UTC).replace(microsecond=0)
            data[schema.updated] = self._timestamp(schema.name, schema.updated, now)

        model = self._resource.model(prepare(data, schema)).save(schema.name)
        return materialize(dict(model), schema) or {}

    def remove(self, value: Any) -> dict[str, Any]:
        """Delete a record by primary key.

        Dependent rows (junction entries, children) are left to the
        database's ON DELETE CASCADE rules.
        """
        schema = self._require_schema("remove")
        model = self._resource.model()
        model[schema.primary] = value
        logger.debug(f"Removing {schema.name} {value!r}")
        return dict(model.remove(schema.name))

    def _junction(self, schema: Schema, relation_name: str) -> Relation:
        relation = schema.junction(relation_name)
        if relation is None:
            raise UnknownRelationError(
                schema.name, relation_name, sorted(r.name for r in schema.relations)
            )
        return relation

    def link(self, relation_name: str, primary1: Any, primary2: Any) -> dict[str, Any]:
        """Pair two records in the relation's junction table.

        Raises:
            UnknownRelationError: If ``{entity}_{relation_name}`` is not declared
        """
        schema = self._require_schema("link")
        relation = self._junction(schema, relation_name)

        model = self._resource.model()
        model[relation.local_key] = primary1
        model[relation.foreign_key] = primary2
        return dict(model.insert(relation.table))

    def unlink(self, relation_name: str, primary1: Any, primary2: Any) -> dict[str, Any]:
        """Remove a pairing from the relation's junction table.

        Raises:
            UnknownRelationError: If ``{entity}_{relation_name}`` is not declared
        """
        schema = self._require_schema("unlink")
        relation = self._junction(schema, relation_name)

        model = self._resource.model()
        model[relation.local_key] = primary1
        model[relation.foreign_key] = primary2
        return dict(model.remove(relation.table))
