"""Builds parameterized SQL from structured requests.

Identifiers are validated and quoted into the SQL text; every value is
appended to a single parameter list and referenced by a dialect placeholder.
Placeholders are numbered from that list, so values bound earlier (e.g. the
SET clause of an UPDATE) always precede those bound later (its WHERE clause).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from truthordare.utils.validators import validate_identifier, validate_identifiers

from .dialects import Dialect
from .exceptions import EmptyConditionsError, EmptyDataError
from .models import QueryOptions


@dataclass(frozen=True)
class Statement:
    """SQL text plus its positional parameters."""

    sql: str
    params: List[Any] = field(default_factory=list)
    # Quoted table reference, used by backends that read inserted rows back.
    container: Optional[str] = None


def describe_container(table: str, schema: Optional[str] = None) -> str:
    """Human readable container name used in error messages."""
    return f"{schema}.{table}" if schema else table


class QueryBuilder:
    """Composes statements for one dialect."""

    def __init__(self, dialect: Dialect) -> None:
        self.dialect = dialect

    def container(self, table: str, schema: Optional[str] = None) -> str:
        quoted = self.dialect.quote(validate_identifier(table, "table"))
        if schema is None:
            return quoted
        return f"{self.dialect.quote(validate_identifier(schema, 'schema'))}.{quoted}"

    def _bind(self, params: List[Any], value: Any) -> str:
        params.append(value)
        return self.dialect.placeholder(len(params))

    def _assignments(self, data: Mapping[str, Any], params: List[Any]) -> List[str]:
        parts = []
        for column, value in data.items():
            quoted = self.dialect.quote(validate_identifier(column, "column"))
            parts.append(f"{quoted} = {self._bind(params, value)}")
        return parts

    def _where(self, conditions: Mapping[str, Any], params: List[Any]) -> str:
        if not conditions:
            return ""
        return " WHERE " + " AND ".join(self._assignments(conditions, params))

    def _pagination(self, options: Optional[QueryOptions], params: List[Any]) -> str:
        if options is None:
            return ""
        sql = ""
        if options.limit is not None:
            sql += f" LIMIT {self._bind(params, options.limit)}"
        elif options.offset is not None and self.dialect.unbounded_limit is not None:
            sql += f" LIMIT {self.dialect.unbounded_limit}"
        if options.offset is not None:
            sql += f" OFFSET {self._bind(params, options.offset)}"
        return sql

    def select_one(
        self,
        table: str,
        conditions: Mapping[str, Any],
        options: Optional[QueryOptions] = None,
        *,
        schema: Optional[str] = None,
    ) -> Statement:
        container = self.container(table, schema)
        if not conditions:
            raise EmptyConditionsError("Get conditions cannot be empty")
        params: List[Any] = []
        sql = f"SELECT * FROM {container}{self._where(conditions, params)} LIMIT 1"
        if options is not None and options.offset is not None:
            sql += f" OFFSET {self._bind(params, options.offset)}"
        return Statement(sql, params, container)

    def select(
        self,
        table: str,
        conditions: Optional[Mapping[str, Any]] = None,
        options: Optional[QueryOptions] = None,
        *,
        schema: Optional[str] = None,
    ) -> Statement:
        container = self.container(table, schema)
        params: List[Any] = []
        sql = f"SELECT * FROM {container}{self._where(conditions or {}, params)}"
        sql += self._pagination(options, params)
        return Statement(sql, params, container)

    def count(
        self,
        table: str,
        conditions: Optional[Mapping[str, Any]] = None,
        *,
        schema: Optional[str] = None,
    ) -> Statement:
        container = self.container(table, schema)
        params: List[Any] = []
        sql = f"SELECT COUNT(*) AS count FROM {container}{self._where(conditions or {}, params)}"
        return Statement(sql, params, container)

    def insert(self, table: str, data: Mapping[str, Any], *, schema: Optional[str] = None) -> Statement:
        container = self.container(table, schema)
        if not data:
            raise EmptyDataError("Insert data cannot be empty")
        columns = [self.dialect.quote(column) for column in validate_identifiers(data.keys(), "column")]
        params: List[Any] = []
        placeholders = [self._bind(params, value) for value in data.values()]
        sql = f"INSERT INTO {container} ({', '.join(columns)}) VALUES ({', '.join(placeholders)})"
        if self.dialect.insert_returning:
            sql += " RETURNING *"
        return Statement(sql, params, container)

    def update(
        self,
        table: str,
        data: Mapping[str, Any],
        conditions: Mapping[str, Any],
        *,
        schema: Optional[str] = None,
    ) -> Statement:
        container = self.container(table, schema)
        if not data:
            raise EmptyDataError("Update data cannot be empty")
        if not conditions:
            raise EmptyConditionsError(
                "Update conditions cannot be empty - this prevents accidental full table updates"
            )
        params: List[Any] = []
        set_clause = ", ".join(self._assignments(data, params))
        sql = f"UPDATE {container} SET {set_clause}{self._where(conditions, params)}"
        return Statement(sql, params, container)

    def delete(
        self,
        table: str,
        conditions: Mapping[str, Any],
        *,
        schema: Optional[str] = None,
    ) -> Statement:
        container = self.container(table, schema)
        if not conditions:
            raise EmptyConditionsError(
                "Delete conditions cannot be empty - this prevents accidental full table deletion"
            )
        params: List[Any] = []
        sql = f"DELETE FROM {container}{self._where(conditions, params)}"
        return Statement(sql, params, container)
