"""SQLAlchemy-backed execution resource."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

from sqlalchemy import Date, DateTime, MetaData, Table

from relatable.core.connection import DatabaseConnection
from relatable.sql.model import SqlModel
from relatable.sql.search import SqlSearch

if TYPE_CHECKING:
    from sqlalchemy import Engine


class SqlResource:
    """Hands out search builders and models bound to one engine.

    Table definitions are reflected on first use and cached. Statements run
    on pooled connections, one per call.
    """

    def __init__(self, engine: Engine, connection: DatabaseConnection | None = None) -> None:
        """Initialize the resource.

        Args:
            engine: SQLAlchemy engine
            connection: Owning connection, closed by ``close()`` when given
        """
        self._engine = engine
        self._connection = connection
        self._metadata = MetaData()
        self._lock = threading.Lock()

    @classmethod
    def from_url(cls, url: str, echo: bool = False) -> SqlResource:
        """Create a resource that owns its own connection."""
        connection = DatabaseConnection(url, echo=echo)
        return cls(connection.engine, connection=connection)

    @property
    def engine(self) -> Engine:
        return self._engine

    def quote(self, name: str) -> str:
        """Quote an identifier for the engine's dialect when needed."""
        return self._engine.dialect.identifier_preparer.quote(name)

    def table(self, name: str) -> Table:
        """Reflected table definition.

        Raises:
            sqlalchemy.exc.NoSuchTableError: If the table doesn't exist
        """
        with self._lock:
            if name not in self._metadata.tables:
                Table(name, self._metadata, autoload_with=self._engine)
            return self._metadata.tables[name]

    def is_datetime(self, table: str, column: str) -> bool:
        """Whether a column stores dates natively rather than as text."""
        columns = self.table(table).c
        if column not in columns:
            return False
        return isinstance(columns[column].type, (Date, DateTime))

    def search(self, table: str) -> SqlSearch:
        return SqlSearch(self, table)

    def model(self, data: dict[str, Any] | None = None) -> SqlModel:
        return SqlModel(self, data)

    def close(self) -> None:
        """Dispose of the owned connection, if any."""
        if self._connection is not None:
            self._connection.close()
