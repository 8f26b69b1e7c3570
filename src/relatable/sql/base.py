"""Execution collaborator interfaces.

The service only talks to these protocols. ``SqlResource`` is the
SQLAlchemy implementation; tests and other backends can provide their own.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SearchBuilder(Protocol):
    """Incrementally built SELECT against one table. Mutators chain."""

    def inner_join_using(self, table: str, column: str) -> SearchBuilder: ...

    def inner_join_on(self, table: str, condition: str) -> SearchBuilder: ...

    def add_filter(self, template: str, *values: Any) -> SearchBuilder: ...

    def add_sort(self, column: str, direction: str = "ASC") -> SearchBuilder: ...

    def set_start(self, start: int) -> SearchBuilder: ...

    def set_range(self, range: int | None) -> SearchBuilder: ...

    def get_row(self) -> dict[str, Any] | None: ...

    def get_rows(self) -> list[dict[str, Any]]: ...

    def get_total(self) -> int: ...


@runtime_checkable
class Model(Protocol):
    """A mutable record that can persist itself into a table."""

    def __getitem__(self, key: str) -> Any: ...

    def __setitem__(self, key: str, value: Any) -> None: ...

    def get(self, key: str, default: Any = None) -> Any: ...

    def keys(self) -> Any: ...

    def save(self, table: str) -> Model: ...

    def insert(self, table: str) -> Model: ...

    def remove(self, table: str) -> Model: ...


@runtime_checkable
class Resource(Protocol):
    """Factory for searches and models bound to one database."""

    def search(self, table: str) -> SearchBuilder: ...

    def model(self, data: dict[str, Any] | None = None) -> Model: ...

    def quote(self, name: str) -> str: ...

    def is_datetime(self, table: str, column: str) -> bool: ...
