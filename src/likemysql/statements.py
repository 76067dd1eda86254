"""
Statement builders.

Every builder is pure: it returns a `Statement` holding the SQL text, the
ordered parameters and the statement kind, which selects how the driver
result is normalized. Nothing is validated here; a malformed statement
fails at the server.

Find fragments are a condition or a trailing clause plus an explicit list
of parameters, one per ``?`` in the fragment:

    >>> select('users', ['password'], 'username = ?', ['joe']).sql
    'SELECT `password` FROM users WHERE username = ?'

Updates take either a plain mapping (each column bound to a placeholder) or
an `Arithmetic` assignment whose right-hand sides are SQL expressions:

    >>> stmt = update('t', Arithmetic({'count': 'count + ?'}, [1]), 'username = ?', ['bob'])
    >>> stmt.sql, stmt.params
    ('UPDATE t SET `count` = count + ? WHERE username = ?', (1, 'bob'))
"""
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from likemysql.exceptions import ValidationError
from likemysql.schema import Column, compile_column, compile_index_group
from likemysql.schema import compile_primary_key, compile_table_options
from likemysql.sql import make_placeholders, parse_find, quote_identifier

__all__ = [
    'DEFAULT_CHARSET',
    'DEFAULT_COLLATE',
    'DEFAULT_ENGINE',
    'Statement',
    'Bound',
    'Arithmetic',
    'Assignment',
    'create_database',
    'drop_database',
    'create_table',
    'drop_table',
    'insert',
    'select',
    'select_one',
    'exists',
    'count',
    'update',
    'delete',
]

DEFAULT_CHARSET = 'utf8mb4'
DEFAULT_COLLATE = 'utf8mb4_unicode_ci'
DEFAULT_ENGINE = 'InnoDB'


@dataclass(frozen=True)
class Statement:
    """SQL text with ``?`` placeholders, its parameters and its kind.

    Kinds: ``ddl``, ``insert``, ``rows``, ``row``, ``exists``, ``count``,
    ``update``, ``delete``.
    """
    sql: str
    params: tuple[Any, ...] = ()
    kind: str = 'rows'


@dataclass(frozen=True)
class Bound:
    """Assignment binding every column to a placeholder."""
    values: Mapping[str, Any]


@dataclass(frozen=True)
class Arithmetic:
    """Assignment whose right-hand sides are SQL expressions.

    ``values`` feed the placeholders inside the expressions and are bound
    ahead of the find fragment's own parameters.
    """
    expressions: Mapping[str, str]
    values: Sequence[Any] = field(default=())


Assignment = Bound | Arithmetic


def _qualify(database: str | None, name: str) -> str:
    if database:
        return f'{quote_identifier(database)}.{quote_identifier(name)}'
    return quote_identifier(name)


def _columns(columns: Sequence[str] | str) -> str:
    if isinstance(columns, str):
        columns = [columns]
    return ', '.join(c if c == '*' else quote_identifier(c) for c in columns)


def create_database(name: str, charset: str = DEFAULT_CHARSET,
                    collate: str = DEFAULT_COLLATE) -> Statement:
    """CREATE DATABASE IF NOT EXISTS with a default charset and collation.
    """
    sql = f'CREATE DATABASE IF NOT EXISTS {quote_identifier(name)} DEFAULT CHARACTER SET {charset} COLLATE {collate}'
    return Statement(sql, kind='ddl')


def drop_database(name: str) -> Statement:
    """DROP DATABASE IF EXISTS.
    """
    return Statement(f'DROP DATABASE IF EXISTS {quote_identifier(name)}', kind='ddl')


def create_table(database: str | None, name: str,
                 columns: Mapping[str, Column | Mapping[str, Any]],
                 unique: Mapping[str, Sequence[str]] | None = None,
                 index: Mapping[str, Sequence[str]] | None = None,
                 engine: str | None = DEFAULT_ENGINE, increment: int | None = None,
                 charset: str | None = DEFAULT_CHARSET,
                 collate: str | None = DEFAULT_COLLATE) -> Statement:
    """CREATE TABLE IF NOT EXISTS in ``database`` (when given).

    Column definitions come first, then the primary key collected from the
    ``primary`` columns, then plain indexes and unique keys.
    """
    primary_keys: list[str] = []
    definitions = [compile_column(col, spec, primary_keys) for col, spec in columns.items()]

    if primary_keys:
        definitions.append(compile_primary_key(primary_keys))
    if index:
        definitions.extend(compile_index_group('INDEX', index).values())
    if unique:
        definitions.extend(compile_index_group('UNIQUE KEY', unique).values())

    body = ',\n'.join(definitions)
    options = compile_table_options(engine, increment, charset, collate)
    sql = f'CREATE TABLE IF NOT EXISTS {_qualify(database, name)} (\n{body}\n){options}'
    return Statement(sql, kind='ddl')


def drop_table(database: str | None, names: str | Sequence[str]) -> Statement:
    """DROP TABLE IF EXISTS for one or many tables.
    """
    if isinstance(names, str):
        names = [names]
    tables = ', '.join(_qualify(database, name) for name in names)
    return Statement(f'DROP TABLE IF EXISTS {tables}', kind='ddl')


def insert(table: str, data: Mapping[str, Any]) -> Statement:
    """INSERT one row, columns and values in mapping order.

    >>> insert('users', {'name': 'ab', 'code': 12})
    Statement(sql='INSERT INTO users (`name`, `code`) VALUES (?, ?)', params=('ab', 12), kind='insert')
    """
    cols = ', '.join(quote_identifier(c) for c in data)
    sql = f'INSERT INTO {table} ({cols}) VALUES ({make_placeholders(len(data))})'
    return Statement(sql, tuple(data.values()), kind='insert')


def select(table: str, columns: Sequence[str] | str = ('*',), find: str | None = None,
           params: Sequence[Any] = ()) -> Statement:
    """SELECT columns (``*`` passes through unquoted) with a find fragment.
    """
    sql = f'SELECT {_columns(columns)} FROM {table}{parse_find(find)}'
    return Statement(sql, tuple(params), kind='rows')


def select_one(table: str, columns: Sequence[str] | str = ('*',), find: str | None = None,
               params: Sequence[Any] = ()) -> Statement:
    """SELECT limited to the first row.
    """
    sql = f'SELECT {_columns(columns)} FROM {table}{parse_find(find)} LIMIT 1'
    return Statement(sql, tuple(params), kind='row')


def exists(table: str, find: str | None = None, params: Sequence[Any] = ()) -> Statement:
    """SELECT EXISTS over the first matching row.
    """
    sql = f'SELECT EXISTS(SELECT 1 FROM {table}{parse_find(find)} LIMIT 1)'
    return Statement(sql, tuple(params), kind='exists')


def count(table: str, find: str | None = None, params: Sequence[Any] = ()) -> Statement:
    """SELECT COUNT(1) of matching rows.
    """
    sql = f'SELECT COUNT(1) FROM {table}{parse_find(find)}'
    return Statement(sql, tuple(params), kind='count')


def _assignment(data: Assignment | Mapping[str, Any]) -> Assignment:
    if isinstance(data, (Bound, Arithmetic)):
        return data
    if isinstance(data, Mapping):
        return Bound(data)
    raise ValidationError(f'update data must be a mapping, Bound or Arithmetic, got {type(data).__name__}')


def update(table: str, data: Assignment | Mapping[str, Any], find: str | None = None,
           params: Sequence[Any] = ()) -> Statement:
    """UPDATE with bound values or arithmetic expressions.
    """
    assignment = _assignment(data)
    if isinstance(assignment, Arithmetic):
        assignments = [f'{quote_identifier(col)} = {expr}'
                       for col, expr in assignment.expressions.items()]
        values = assignment.values
        if isinstance(values, (str, bytes, bytearray)) or not isinstance(values, Sequence):
            values = [values]
        leading = tuple(values)
    else:
        assignments = [f'{quote_identifier(col)} = ?' for col in assignment.values]
        leading = tuple(assignment.values.values())

    sql = f"UPDATE {table} SET {', '.join(assignments)}{parse_find(find)}"
    return Statement(sql, leading + tuple(params), kind='update')


def delete(table: str, find: str | None = None, params: Sequence[Any] = ()) -> Statement:
    """DELETE matching rows.
    """
    sql = f'DELETE FROM {table}{parse_find(find)}'
    return Statement(sql, tuple(params), kind='delete')
