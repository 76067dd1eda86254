"""
Normalized execution results.

Row-producing statements carry rows and field descriptors; everything else
carries the server's OK-packet counters. For UPDATE the server reports both
the rows its predicate matched (affected) and the rows whose values really
differed (changed):

    >>> parse_info_message('Rows matched: 2  Changed: 1  Warnings: 0')
    (2, 1)
"""
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

__all__ = [
    'Field',
    'ExecutionResult',
    'parse_info_message',
    'driver_status',
    'read_result',
]

logger = logging.getLogger(__name__)

_INFO_MESSAGE = re.compile(r'Rows matched:\s*(\d+)\s+Changed:\s*(\d+)')


@dataclass(frozen=True)
class Field:
    """Result column descriptor (a DB-API ``cursor.description`` item)."""
    name: str
    type_code: Any = None
    display_size: int | None = None
    internal_size: int | None = None
    precision: int | None = None
    scale: int | None = None
    nullable: bool | None = None

    @classmethod
    def from_description(cls, item: Sequence[Any]) -> 'Field':
        item = tuple(item) + (None,) * (7 - len(item))
        return cls(*item[:7])


@dataclass
class ExecutionResult:
    """Outcome of one statement.

    ``changed_rows`` is None for statements whose server reply has no
    ``Rows matched``/``Changed`` message (everything except UPDATE).
    """
    sql: str
    params: tuple[Any, ...] = ()
    rows: list[dict[str, Any]] = field(default_factory=list)
    fields: list[Field] = field(default_factory=list)
    insert_id: int = 0
    field_count: int = 0
    affected_rows: int = 0
    changed_rows: int | None = None
    warning_count: int = 0
    message: str = ''

    @property
    def returns_rows(self) -> bool:
        return bool(self.fields)

    def first_row(self) -> dict[str, Any] | None:
        """First row, or None when the statement produced none.
        """
        return self.rows[0] if self.rows else None

    def scalar(self) -> Any:
        """Sole value of the first row, read by the first field's name.
        """
        return self.rows[0][self.fields[0].name]


def parse_info_message(message: str | bytes | None) -> tuple[int, int] | None:
    """Return (matched, changed) from an UPDATE info message.
    """
    if not message:
        return None
    if isinstance(message, bytes):
        message = message.decode('utf-8', 'replace')
    match = _INFO_MESSAGE.search(message)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def driver_status(cursor: Any) -> tuple[str, int]:
    """Info message and warning count of the cursor's last server reply.

    PyMySQL-based cursors keep the decoded OK packet on ``_result``.
    """
    packet = getattr(cursor, '_result', None)
    message = getattr(packet, 'message', None) or ''
    if isinstance(message, bytes):
        message = message.decode('utf-8', 'replace')
    warnings = getattr(packet, 'warning_count', 0) or 0
    return message, warnings


async def read_result(cursor: Any, sql: str, params: Sequence[Any]) -> ExecutionResult:
    """Read an executed cursor into an `ExecutionResult`.
    """
    message, warnings = driver_status(cursor)

    if cursor.description:
        fields = [Field.from_description(d) for d in cursor.description]
        rows = list(await cursor.fetchall())
        logger.debug(f'Query returned {len(rows)} rows')
        return ExecutionResult(sql, tuple(params), rows=rows, fields=fields,
                               field_count=len(fields), warning_count=warnings,
                               message=message)

    affected = max(cursor.rowcount or 0, 0)
    changed = None
    counts = parse_info_message(message)
    if counts is not None:
        affected, changed = counts

    logger.debug(f'Query affected {affected} rows')
    return ExecutionResult(sql, tuple(params), insert_id=cursor.lastrowid or 0,
                           affected_rows=affected, changed_rows=changed,
                           warning_count=warnings, message=message)
