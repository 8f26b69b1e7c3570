"""Core types, query plan structures and configuration for relatable.

All types are pydantic models so plans and results are JSON-serializable
and easy to inspect in tests and from the CLI.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator

# Column and table names that may be interpolated into SQL text
IDENTIFIER_PATTERN = r"^[a-zA-Z0-9-_]+$"

_IDENTIFIER_RE = re.compile(IDENTIFIER_PATTERN)


def is_identifier(name: Any, pattern: str = IDENTIFIER_PATTERN) -> bool:
    """Check that a name is safe to interpolate as a column or table name."""
    if not isinstance(name, str):
        return False
    if pattern == IDENTIFIER_PATTERN:
        return _IDENTIFIER_RE.match(name) is not None
    return re.match(pattern, name) is not None


def is_empty(value: Any) -> bool:
    """Empty means missing: None, an empty string or an empty collection."""
    if value is None:
        return True
    if isinstance(value, (str, bytes, list, tuple, dict, set)):
        return len(value) == 0
    return False


# Renders a column name for SQL text, such as a dialect's identifier quoting
Quote = Callable[[str], str]


def unquoted(name: str) -> str:
    """Leave a column name as it is."""
    return name


def is_empty_bound(value: Any) -> bool:
    """Whether a span lower bound counts as missing.

    Stricter than ``is_empty``: ``0``, ``"0"`` and ``False`` are missing too.
    """
    if is_empty(value) or value is False:
        return True
    if isinstance(value, (int, float)):
        return value == 0
    return value == "0"


class Cardinality(StrEnum):
    """How many related rows one primary row maps to."""

    ONE_TO_ZERO = "one_to_zero"  # optional single related row
    ONE_TO_ONE = "one_to_one"  # mandatory single related row, joined inline
    ONE_TO_MANY = "one_to_many"
    MANY_TO_MANY = "many_to_many"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid cardinality values."""
        return [c.value for c in cls]

    @classmethod
    def from_many(cls, many: int) -> Cardinality:
        """Map the declarative ``many`` integer (0-3) to a cardinality."""
        mapping = {
            0: cls.ONE_TO_ZERO,
            1: cls.ONE_TO_ONE,
            2: cls.ONE_TO_MANY,
            3: cls.MANY_TO_MANY,
        }
        if many not in mapping:
            raise ValueError(f"Invalid relation 'many' value {many!r}. Valid values: 0, 1, 2, 3")
        return mapping[many]


class Intent(StrEnum):
    """What a query is built for; decides which joins apply."""

    READ = "read"
    SEARCH = "search"
    WRITE = "write"


class JoinKind(StrEnum):
    """How a join clause matches rows."""

    USING = "using"  # shared column name on both sides
    ON = "on"  # explicit equality condition


class SortDirection(StrEnum):
    """Sort directions accepted in ``order``."""

    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def parse(cls, value: Any) -> SortDirection | None:
        """Parse a direction case-insensitively, returning None when invalid."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class JoinClause(BaseModel):
    """A single INNER JOIN in a query plan."""

    table: str
    kind: JoinKind
    column: str | None = None
    condition: str | None = None

    model_config = {"frozen": True}

    @classmethod
    def using(cls, table: str, column: str) -> JoinClause:
        """Join on a column that has the same name on both sides."""
        return cls(table=table, kind=JoinKind.USING, column=column)

    @classmethod
    def on(cls, table: str, condition: str) -> JoinClause:
        """Join on an explicit raw condition."""
        return cls(table=table, kind=JoinKind.ON, condition=condition)


class FilterClause(BaseModel):
    """A WHERE predicate; values are always bound, never interpolated."""

    template: str = Field(..., description="SQL fragment with positional %s placeholders")
    values: tuple[Any, ...] = ()

    model_config = {"frozen": True}


class SortClause(BaseModel):
    """An ORDER BY entry."""

    column: str
    direction: SortDirection = SortDirection.ASC

    model_config = {"frozen": True}


class QueryPlan(BaseModel):
    """Dialect-independent description of a single SELECT."""

    table: str
    joins: list[JoinClause] = Field(default_factory=list)
    filters: list[FilterClause] = Field(default_factory=list)
    sorts: list[SortClause] = Field(default_factory=list)
    start: int = 0
    range: int | None = None  # None means unbounded

    def where(self) -> str:
        """Render the filter templates as one AND-combined condition."""
        return " AND ".join(f.template for f in self.filters)

    def parameters(self) -> list[Any]:
        """Return bound values in placeholder order."""
        return [value for f in self.filters for value in f.values]


class RelationLookup(BaseModel):
    """An independent read sub-query whose result is attached to a record."""

    name: str = Field(..., description="Logical name the result is attached under")
    plan: QueryPlan
    single: bool = Field(default=False, description="Return at most one row")


class SearchOptions(BaseModel):
    """Search input; coerces loosely-typed input instead of rejecting it."""

    filter: dict[Any, Any] = Field(default_factory=dict)
    span: dict[Any, Any] = Field(default_factory=dict)
    range: int | None = None
    start: int | None = None
    order: dict[Any, Any] = Field(default_factory=dict)
    q: list[str] = Field(default_factory=list)

    @field_validator("filter", "span", "order", mode="before")
    @classmethod
    def _mapping_or_empty(cls, value: Any) -> dict[Any, Any]:
        return dict(value) if isinstance(value, Mapping) else {}

    @field_validator("range", "start", mode="before")
    @classmethod
    def _numeric_or_none(cls, value: Any) -> int | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, str):
            value = value.strip()
        if not isinstance(value, (int, float, str)):
            return None
        try:
            return int(float(value))
        except (ValueError, OverflowError):
            return None

    @field_validator("q", mode="before")
    @classmethod
    def _keywords(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return [str(keyword) for keyword in value]
        if isinstance(value, (str, int, float)):
            return [str(value)]
        return []


class SearchResult(BaseModel):
    """Result from a search operation."""

    rows: list[dict[str, Any]]
    total: int


class ComposerConfig(BaseModel):
    """Defaults used when composing search plans."""

    default_range: int = 50
    default_start: int = 0
    active_value: Any = 1
    identifier_pattern: str = IDENTIFIER_PATTERN

    model_config = {"frozen": True}


class ServiceConfig(BaseModel):
    """Write-time policies of the CRUD service."""

    composer: ComposerConfig = Field(default_factory=ComposerConfig)
    # strftime format for created/updated stamps; None stores datetime objects
    timestamp_format: str | None = None

    model_config = {"frozen": True}
