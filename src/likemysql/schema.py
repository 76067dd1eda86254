"""
Column and index definitions for CREATE TABLE.

A column is described by a mapping (or a `Column`), for example:

    {'type': 'decimal', 'length': (11, 2), 'unsigned': True, 'required': True}
    {'type': 'enum', 'length': ('small', 'large'), 'default': 'small'}
    {'type': 'int', 'increment': True, 'primary': True}

Indexes map an index name to its column references. Each reference may
carry a sort direction after a comma: ``['fullname,DESC', 'dni']``.
"""
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields
from typing import Any

from likemysql.exceptions import ValidationError
from likemysql.sql import quote_identifier, quote_literal

__all__ = [
    'MISSING',
    'Column',
    'compile_column',
    'compile_index_group',
    'compile_primary_key',
    'compile_table_options',
]

logger = logging.getLogger(__name__)


class _Missing:
    """Marker for an absent default, distinct from a NULL default."""

    def __repr__(self) -> str:
        return 'MISSING'

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


@dataclass
class Column:
    """Column specification."""
    type: str = 'int'
    length: Any = None
    unsigned: bool = False
    collate: str | None = None
    required: bool = False
    default: Any = MISSING
    increment: bool = False
    primary: bool = False

    def __post_init__(self):
        if not self.type:
            self.type = 'int'

    @classmethod
    def from_spec(cls, spec: 'Column | Mapping[str, Any]') -> 'Column':
        """Build a Column from a mapping, ignoring unknown attributes.
        """
        if isinstance(spec, Column):
            return spec
        if not isinstance(spec, Mapping):
            raise ValidationError(f'Column specification must be a mapping, got {type(spec).__name__}')

        known = {f.name for f in fields(cls)}
        for key in spec:
            if key not in known:
                logger.debug(f'Ignoring unknown column attribute {key!r}')
        return cls(**{k: v for k, v in spec.items() if k in known})


def _format_length(length: Any) -> str:
    if isinstance(length, Sequence) and not isinstance(length, str):
        # strings are quoted for enum/set values, DECIMAL(11,2) stays numeric
        return ','.join(quote_literal(x) if isinstance(x, str) else str(x) for x in length)
    return str(length)


def _format_default(value: Any) -> str:
    if value is None:
        return 'NULL'
    if isinstance(value, bool):
        return 'TRUE' if value else 'FALSE'
    if isinstance(value, str):
        return quote_literal(value)
    return str(value)


def compile_column(name: str, spec: 'Column | Mapping[str, Any]',
                   primary_keys: list[str]) -> str:
    """Compile one column definition.

    Columns flagged ``primary`` are appended to ``primary_keys``; the caller
    turns that list into the PRIMARY KEY clause.

    >>> keys = []
    >>> compile_column('id', {'increment': True, 'primary': True}, keys)
    '  `id` int NOT NULL AUTO_INCREMENT'
    >>> keys
    ['id']
    """
    column = Column.from_spec(spec)

    length = f' ({_format_length(column.length)})' if column.length else ''
    unsigned = ' unsigned' if column.unsigned else ''
    collate = f' COLLATE {column.collate}' if column.collate else ''
    required = ' NOT NULL' if column.required or column.primary else ' NULL'

    # a default never applies to an auto-increment column
    if column.default is not MISSING and not column.increment:
        default = f' DEFAULT {_format_default(column.default)}'
    else:
        default = ''

    increment = ' AUTO_INCREMENT' if column.increment else ''

    if column.primary:
        primary_keys.append(name)

    return f'  {quote_identifier(name)} {column.type}{length}{unsigned}{collate}{required}{default}{increment}'


def compile_primary_key(primary_keys: Sequence[str]) -> str:
    """Compile the PRIMARY KEY clause, empty when there are no keys.
    """
    if not primary_keys:
        return ''
    return f"  PRIMARY KEY ({', '.join(quote_identifier(k) for k in primary_keys)})"


def _parse_index_column(reference: str) -> tuple[str, str]:
    name, _, order = reference.partition(',')
    return name.strip(), order.strip() or 'ASC'


def compile_index_group(keyword: str, index: Mapping[str, Sequence[str]]) -> dict[str, str]:
    """Compile named indexes that share a keyword (``INDEX``, ``UNIQUE KEY``).

    >>> compile_index_group('INDEX', {'person': ['fullname,DESC', 'dni']})
    {'person': '  INDEX `person` (`fullname` DESC, `dni` ASC)'}
    """
    compiled = {}
    for key, references in index.items():
        if isinstance(references, str):
            references = [references]
        columns = ', '.join(
            f'{quote_identifier(name)} {order}'
            for name, order in map(_parse_index_column, references)
        )
        compiled[key] = f'  {keyword} {quote_identifier(key)} ({columns})'
    return compiled


def compile_table_options(engine: str | None = None, increment: int | None = None,
                          charset: str | None = None, collate: str | None = None) -> str:
    """Compile the trailing table options.

    >>> compile_table_options('InnoDB', 100, 'utf8mb4', None)
    ' ENGINE=InnoDB AUTO_INCREMENT=100 CHARSET=utf8mb4'
    """
    options = ''
    if engine:
        options += f' ENGINE={engine}'
    if increment is not None:
        options += f' AUTO_INCREMENT={increment}'
    if charset:
        options += f' CHARSET={charset}'
    if collate:
        options += f' COLLATE={collate}'
    return options
