"""Mutable records that persist themselves through SQLAlchemy Core."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, delete, insert, select, update

from relatable.exceptions import QueryError

if TYPE_CHECKING:
    from sqlalchemy import Table

    from relatable.sql.resource import SqlResource

logger = logging.getLogger(__name__)


class SqlModel(dict):
    """A record bound to a resource.

    Keys that are not columns of the target table are kept on the model but
    ignored when writing, so a model can carry joined or computed values.
    """

    def __init__(self, resource: SqlResource, data: dict[str, Any] | None = None) -> None:
        super().__init__(data or {})
        self._resource = resource

    def _columns(self, table: Table) -> dict[str, Any]:
        return {key: value for key, value in self.items() if key in table.columns}

    def _primary(self, table: Table) -> str | None:
        """Name of a single-column primary key, None for keyless or composite tables."""
        columns = list(table.primary_key.columns)
        return columns[0].name if len(columns) == 1 else None

    def insert(self, table: str) -> SqlModel:
        """Insert the record, filling an auto-generated primary key."""
        target = self._resource.table(table)
        values = self._columns(target)
        primary = self._primary(target)

        with self._resource.engine.begin() as conn:
            result = conn.execute(insert(target).values(**values))
            inserted = result.inserted_primary_key if primary else None

        if primary and self.get(primary) is None and inserted and inserted[0] is not None:
            self[primary] = inserted[0]

        logger.debug(f"Inserted into {table}: {dict(self)}")
        return self

    def _update_row(self, table: str) -> SqlModel:
        """Update the row identified by the primary key.

        Raises:
            QueryError: If the table has no primary key or the model lacks it
        """
        target = self._resource.table(table)
        primary = self._primary(target)
        if primary is None or self.get(primary) is None:
            raise QueryError(
                f"Cannot update '{table}' without its primary key.",
                {"table": table, "primary": primary},
            )

        values = {k: v for k, v in self._columns(target).items() if k != primary}
        if values:
            with self._resource.engine.begin() as conn:
                conn.execute(
                    update(target).where(target.c[primary] == self[primary]).values(**values)
                )
        logger.debug(f"Updated {table} {primary}={self[primary]}")
        return self

    def save(self, table: str) -> SqlModel:
        """Update when the primary key points at an existing row, insert otherwise."""
        target = self._resource.table(table)
        primary = self._primary(target)

        if primary is not None and self.get(primary) is not None:
            with self._resource.engine.connect() as conn:
                found = conn.execute(
                    select(target.c[primary]).where(target.c[primary] == self[primary])
                ).first()
            if found is not None:
                return self._update_row(table)

        return self.insert(table)

    def remove(self, table: str) -> SqlModel:
        """Delete by primary key, or by every given column for keyless tables.

        Raises:
            QueryError: If no condition could be built from the model
        """
        target = self._resource.table(table)
        primary = self._primary(target)

        if primary is not None and self.get(primary) is not None:
            condition = target.c[primary] == self[primary]
        else:
            values = self._columns(target)
            if not values:
                raise QueryError(
                    f"Refusing to delete from '{table}' without any condition.",
                    {"table": table},
                )
            condition = and_(*(target.c[key] == value for key, value in values.items()))

        with self._resource.engine.begin() as conn:
            result = conn.execute(delete(target).where(condition))
        logger.debug(f"Removed {result.rowcount} row(s) from {table}")
        return self
