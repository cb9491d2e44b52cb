"""Exceptions raised by the data access layer."""


class DatabaseError(Exception):
    """Base class for every data access error."""


class InvalidIdentifierError(DatabaseError, ValueError):
    """A table, schema or column name failed the identifier allow-list."""


class EmptyConditionsError(DatabaseError, ValueError):
    """An operation that must be filtered was called without conditions."""


class EmptyDataError(DatabaseError, ValueError):
    """An insert or update was called without any column values."""


class QueryError(DatabaseError):
    """The driver failed to run a statement; the original error is chained."""


class TransactionError(DatabaseError):
    """A transaction was rolled back, or a finished transaction handle was reused."""


class NestedTransactionError(TransactionError):
    """A transaction was started from inside another transaction."""


class DatabaseConnectionError(DatabaseError):
    """A connection could not be obtained or verified."""


class PoolExhaustedError(DatabaseConnectionError):
    """No pooled connection became available within the configured limits."""
