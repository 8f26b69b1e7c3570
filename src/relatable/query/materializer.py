"""Record materialization: raw rows in, caller-facing records out."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from relatable.core.types import RelationLookup
from relatable.schema.models import Schema

logger = logging.getLogger(__name__)


def decode_json(value: Any, field: str | None = None) -> Any:
    """Decode a stored JSON value; empty or undecodable values become ``{}``."""
    if not value:
        return {}
    if isinstance(value, (dict, list)):
        return value
    if isinstance(value, (str, bytes, bytearray)):
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError:
            logger.warning(f"Field {field!r} holds invalid JSON, using an empty structure")
            return {}
        return decoded if decoded is not None else {}
    return value


def materialize(record: Mapping[str, Any] | None, schema: Schema) -> dict[str, Any] | None:
    """Decode the schema's JSON fields of one record.

    Every declared JSON field is present in the result, even when the row
    did not carry it.
    """
    if record is None:
        return None

    result = dict(record)
    for field in schema.json_fields:
        result[field] = decode_json(result.get(field), field)
    return result


def materialize_rows(rows: Iterable[Mapping[str, Any]], schema: Schema) -> list[dict[str, Any]]:
    """Materialize every row of a result set."""
    return [materialize(row, schema) or {} for row in rows]


def attach(record: dict[str, Any], lookup: RelationLookup, value: Any) -> dict[str, Any]:
    """Store a relation lookup result under the relation's logical name."""
    if lookup.single:
        record[lookup.name] = dict(value) if value else None
    else:
        record[lookup.name] = [dict(row) for row in value or []]
    return record


def prepare(data: Mapping[str, Any], schema: Schema) -> dict[str, Any]:
    """Serialize JSON fields for storage; other values pass through."""
    prepared = dict(data)
    for field in schema.json_fields:
        if field not in prepared:
            continue
        value = prepared[field]
        if value is not None and not isinstance(value, (str, bytes)):
            prepared[field] = json.dumps(value, default=str)
    return prepared
