"""SELECT builder executed through SQLAlchemy.

Filters are written with positional ``%s`` placeholders, e.g.
``add_filter("post_created >= %s", since)``. They are rendered as named
binds (``:p0``, ``:p1``...) so values never end up in the SQL text.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import text

from relatable.core.types import (
    FilterClause,
    JoinClause,
    JoinKind,
    SortClause,
    SortDirection,
)
from relatable.exceptions import QueryError

if TYPE_CHECKING:
    from relatable.sql.resource import SqlResource

logger = logging.getLogger(__name__)

PLACEHOLDER = "%s"


def bind_template(template: str, values: tuple[Any, ...], params: dict[str, Any]) -> str:
    """Replace each ``%s`` with a named bind and record its value in ``params``.

    Raises:
        QueryError: If the number of placeholders and values differ
    """
    parts = template.split(PLACEHOLDER)
    if len(parts) - 1 != len(values):
        raise QueryError(
            f"Filter '{template}' has {len(parts) - 1} placeholder(s) "
            f"but {len(values)} value(s) were given.",
            {"template": template, "values": len(values)},
        )

    rendered = parts[0]
    for value, part in zip(values, parts[1:]):
        name = f"p{len(params)}"
        params[name] = value
        rendered += f":{name}{part}"
    return rendered


class SqlSearch:
    """Search builder for one table.

    Example:
        rows = (
            resource.search("post")
            .inner_join_using("post_tag", "post_id")
            .add_filter("tag_id = %s", 9)
            .add_sort("post_created", "DESC")
            .set_range(10)
            .get_rows()
        )
    """

    def __init__(self, resource: SqlResource, table: str) -> None:
        self._resource = resource
        self._table = table
        self._joins: list[JoinClause] = []
        self._filters: list[FilterClause] = []
        self._sorts: list[SortClause] = []
        self._start = 0
        self._range: int | None = None

    @property
    def table(self) -> str:
        return self._table

    def inner_join_using(self, table: str, column: str) -> SqlSearch:
        self._joins.append(JoinClause.using(table, column))
        return self

    def inner_join_on(self, table: str, condition: str) -> SqlSearch:
        self._joins.append(JoinClause.on(table, condition))
        return self

    def add_filter(self, template: str, *values: Any) -> SqlSearch:
        self._filters.append(FilterClause(template=template, values=values))
        return self

    def add_sort(self, column: str, direction: str = "ASC") -> SqlSearch:
        parsed = SortDirection.parse(direction)
        if parsed is None:
            raise QueryError(
                f"Invalid sort direction '{direction}'. Valid directions: ASC, DESC",
                {"column": column, "direction": direction},
            )
        self._sorts.append(SortClause(column=column, direction=parsed))
        return self

    def set_start(self, start: int) -> SqlSearch:
        self._start = max(int(start), 0)
        return self

    def set_range(self, range: int | None) -> SqlSearch:
        self._range = None if range is None else max(int(range), 0)
        return self

    def _from_clause(self) -> str:
        quote = self._resource.quote
        sql = f"FROM {quote(self._table)}"
        for join in self._joins:
            if join.kind == JoinKind.USING:
                sql += f" INNER JOIN {quote(join.table)} USING ({quote(join.column or '')})"
            else:
                sql += f" INNER JOIN {quote(join.table)} ON ({join.condition})"
        return sql

    def _where_clause(self, params: dict[str, Any]) -> str:
        if not self._filters:
            return ""
        conditions = [bind_template(f.template, f.values, params) for f in self._filters]
        return " WHERE " + " AND ".join(conditions)

    def _order_clause(self) -> str:
        if not self._sorts:
            return ""
        quote = self._resource.quote
        keys = ", ".join(f"{quote(s.column)} {s.direction.value}" for s in self._sorts)
        return f" ORDER BY {keys}"

    def select_statement(self, range: int | None = None) -> tuple[str, dict[str, Any]]:
        """Render the rows query and its bound parameters."""
        params: dict[str, Any] = {}
        sql = f"SELECT * {self._from_clause()}{self._where_clause(params)}{self._order_clause()}"

        limit = range if range is not None else self._range
        if limit is not None:
            sql += " LIMIT :limit OFFSET :offset"
            params["limit"] = limit
            params["offset"] = self._start
        return sql, params

    def count_statement(self) -> tuple[str, dict[str, Any]]:
        """Render the total query: same joins and filters, no pagination."""
        params: dict[str, Any] = {}
        sql = f"SELECT COUNT(*) {self._from_clause()}{self._where_clause(params)}"
        return sql, params

    def get_rows(self) -> list[dict[str, Any]]:
        """All rows in the current window."""
        sql, params = self.select_statement()
        logger.debug(f"Executing: {sql} {params}")
        with self._resource.engine.connect() as conn:
            result = conn.execute(text(sql), params)
            return [dict(row) for row in result.mappings()]

    def get_row(self) -> dict[str, Any] | None:
        """First row in the current window, or None."""
        sql, params = self.select_statement(range=1)
        logger.debug(f"Executing: {sql} {params}")
        with self._resource.engine.connect() as conn:
            row = conn.execute(text(sql), params).mappings().first()
            return dict(row) if row is not None else None

    def get_total(self) -> int:
        """Number of matching rows, ignoring start and range."""
        sql, params = self.count_statement()
        logger.debug(f"Executing: {sql} {params}")
        with self._resource.engine.connect() as conn:
            return int(conn.execute(text(sql), params).scalar() or 0)
