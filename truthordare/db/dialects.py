"""SQL dialect strategies.

A dialect only knows how to spell things: bind placeholders, quoted
identifiers and a few clause quirks. It never validates or executes.
"""

from __future__ import annotations


class Dialect:
    """Base dialect: double-quoted identifiers, ``?`` placeholders."""

    name = "generic"
    # Whether INSERT statements return the written row themselves.
    insert_returning = False
    # Some engines reject OFFSET unless a LIMIT precedes it.
    unbounded_limit: str | None = None

    def placeholder(self, position: int) -> str:
        """Return the placeholder for the 1-based parameter *position*."""
        return "?"

    def quote(self, identifier: str) -> str:
        return f'"{identifier}"'


class SQLiteDialect(Dialect):
    name = "sqlite"
    unbounded_limit = "-1"

    def quote(self, identifier: str) -> str:
        # SQLite reads an unknown double-quoted name as a string literal,
        # which would make a misspelled condition match every row.
        return f"`{identifier}`"


class PostgresDialect(Dialect):
    name = "postgres"
    insert_returning = True

    def placeholder(self, position: int) -> str:
        return f"${position}"
