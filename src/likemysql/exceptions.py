"""
Database-specific exception classes.

Driver errors are never re-shaped: statements fail with the `pymysql.err`
class and server error number the driver raised. The tuples below group
them for use in ``except`` clauses.
"""
import pymysql.err
import sqlalchemy as sa
from pymysql.constants import ER

__all__ = [
    'DatabaseError',
    'ConnectionFailure',
    'PoolExhaustedError',
    'ValidationError',
    'DbConnectionError',
    'IntegrityError',
    'ProgrammingError',
    'OperationalError',
    'DataError',
    'PoolError',
    'FATAL_CONNECT_ERRORS',
    'error_code',
    'is_fatal_connect_error',
]

# Never retried by the readiness probe
FATAL_CONNECT_ERRORS = frozenset({
    ER.ACCESS_DENIED_ERROR,
    ER.DBACCESS_DENIED_ERROR,
    ER.BAD_DB_ERROR,
    })


class DatabaseError(Exception):
    """Base class for all likemysql errors.
    """


class ConnectionFailure(DatabaseError):
    """Error establishing or maintaining a database connection.
    """


class PoolExhaustedError(ConnectionFailure):
    """No pooled connection is free and the pool does not queue.
    """

    def __init__(self, message: str = 'No connections available.') -> None:
        super().__init__(message)


class ValidationError(DatabaseError, ValueError):
    """Error in input validation.
    """


DbConnectionError = (
    pymysql.err.OperationalError,
    pymysql.err.InterfaceError,
    ConnectionFailure,
    )

IntegrityError = (
    pymysql.err.IntegrityError,
    )

ProgrammingError = (
    pymysql.err.ProgrammingError,
    )

OperationalError = (
    pymysql.err.OperationalError,
    )

DataError = (
    pymysql.err.DataError,
    )

PoolError = (
    PoolExhaustedError,
    sa.exc.TimeoutError,
    )


def error_code(exc: BaseException) -> int | None:
    """Return the MySQL server error number carried by a driver error.

    PyMySQL raises errors as ``Error(code, message)``; anything else, or a
    client-side error without a numeric code, gives None.
    """
    orig = getattr(exc, 'orig', None)
    if isinstance(orig, BaseException):
        exc = orig
    args = getattr(exc, 'args', ())
    if args and isinstance(args[0], int) and not isinstance(args[0], bool):
        return args[0]
    return None


def is_fatal_connect_error(exc: BaseException) -> bool:
    """Check if a connection error will fail again no matter how often retried.

    Access denied and unknown database are configuration problems; refused
    connections, timeouts and an exhausted pool may clear up on their own.
    """
    return error_code(exc) in FATAL_CONNECT_ERRORS
