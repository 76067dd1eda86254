"""
Async MySQL access layer over a pooled connection manager.

All statement operations can be called either as:
- Module functions: await db.insert(pool, 'users', {...})
- Pool or ConnectionWrapper methods: await pool.insert('users', {...})

The module functions are facades over the methods.
"""
__version__ = '0.1.0'

from collections.abc import Mapping, Sequence
from typing import Any

from likemysql.connection import ConnectionWrapper
from likemysql.exceptions import ConnectionFailure, DatabaseError, ValidationError
from likemysql.exceptions import DataError, DbConnectionError, IntegrityError
from likemysql.exceptions import OperationalError, PoolError, PoolExhaustedError
from likemysql.exceptions import ProgrammingError
from likemysql.operations import Operations
from likemysql.options import DatabaseOptions, iterdict_data_loader
from likemysql.options import pandas_data_loader
from likemysql.pool import Pool, connect, create_link
from likemysql.result import ExecutionResult, Field
from likemysql.schema import Column
from likemysql.statements import Arithmetic, Assignment, Bound, Statement
from likemysql.transaction import Transaction as transaction


async def query(cn: Operations, sql: str, params: Sequence[Any] = ()) -> ExecutionResult:
    """Execute raw SQL with ``?`` placeholders.
    """
    return await cn.query(sql, params)


async def insert(cn: Operations, table: str, data: Mapping[str, Any]) -> int:
    """Insert one row and return its insert id.
    """
    return await cn.insert(table, data)


async def select(cn: Operations, table: str, columns: Sequence[str] | str = ('*',),
                 find: str | None = None, params: Sequence[Any] = ()) -> Any:
    """Select rows, shaped by the configured data loader.
    """
    return await cn.select(table, columns, find, params)


async def select_one(cn: Operations, table: str, columns: Sequence[str] | str = ('*',),
                     find: str | None = None, params: Sequence[Any] = ()) -> dict[str, Any] | None:
    """Select the first matching row or None.
    """
    return await cn.select_one(table, columns, find, params)


async def exists(cn: Operations, table: str, find: str | None = None,
                 params: Sequence[Any] = ()) -> bool:
    return await cn.exists(table, find, params)


async def count(cn: Operations, table: str, find: str | None = None,
                params: Sequence[Any] = ()) -> int:
    return await cn.count(table, find, params)


async def update(cn: Operations, table: str, data: Assignment | Mapping[str, Any],
                 find: str | None = None, params: Sequence[Any] = ()) -> int:
    """Update matching rows and return the number of changed rows.
    """
    return await cn.update(table, data, find, params)


async def delete(cn: Operations, table: str, find: str | None = None,
                 params: Sequence[Any] = ()) -> int:
    """Delete matching rows and return the number of affected rows.
    """
    return await cn.delete(table, find, params)


async def create_database(cn: Operations, name: str, **kwargs: Any) -> bool:
    return await cn.create_database(name, **kwargs)


async def drop_database(cn: Operations, name: str) -> bool:
    return await cn.drop_database(name)


async def create_table(cn: Operations, name: str, columns: Mapping[str, Any],
                       **kwargs: Any) -> bool:
    """Create a table in the connection's database.
    """
    return await cn.create_table(name, columns, **kwargs)


async def drop_table(cn: Operations, names: str | Sequence[str]) -> bool:
    return await cn.drop_table(names)


__all__ = [
    'connect',
    'create_link',
    'Pool',
    'ConnectionWrapper',
    'transaction',
    'DatabaseOptions',
    'iterdict_data_loader',
    'pandas_data_loader',
    'ExecutionResult',
    'Field',
    'Statement',
    'Bound',
    'Arithmetic',
    'Column',
    'query',
    'insert',
    'select',
    'select_one',
    'exists',
    'count',
    'update',
    'delete',
    'create_database',
    'drop_database',
    'create_table',
    'drop_table',
    'IntegrityError',
    'ProgrammingError',
    'OperationalError',
    'DataError',
    'DbConnectionError',
    'PoolError',
    'PoolExhaustedError',
    'ConnectionFailure',
    'ValidationError',
    'DatabaseError',
]
