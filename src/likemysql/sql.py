"""
SQL text helpers.

- `quote_identifier()` - Quote table/column names with backticks
- `make_placeholders()` - Build a ``?, ?, ?`` list
- `parse_find()` - Normalize a find fragment into a WHERE/ORDER BY/LIMIT suffix
- `prepare_query()` - Convert ``?`` placeholders to the driver's ``%s`` style

Statements are always built with ``?`` placeholders. That text is what gets
recorded and logged; `prepare_query()` only runs at dispatch time.
"""
import re
from collections.abc import Sequence
from typing import Any

__all__ = [
    'KNOWN_CLAUSES',
    'quote_identifier',
    'quote_literal',
    'make_placeholders',
    'parse_find',
    'has_placeholders',
    'count_placeholders',
    'prepare_query',
]

# Fragments starting with one of these are appended as-is, anything else
# is a condition
KNOWN_CLAUSES = ('ORDER BY', 'LIMIT', 'GROUP BY')

# Quoted literals and identifiers are copied through untouched
_TOKENIZE = re.compile(r"""
    (?P<string>'(?:[^'\\]|\\.|'')*'|"(?:[^"\\]|\\.|"")*")
    |(?P<ident>`(?:[^`]|``)*`)
    |(?P<qmark>\?)
    |(?P<percent>%)
""", re.VERBOSE)


def quote_identifier(name: str) -> str:
    """Quote a table or column name with backticks.

    >>> quote_identifier('users')
    '`users`'
    >>> quote_identifier('we`ird')
    '`we``ird`'
    """
    return '`' + str(name).replace('`', '``') + '`'


def quote_literal(value: str) -> str:
    """Quote a string as a SQL literal.

    >>> quote_literal("it's")
    "'it''s'"
    """
    return "'" + str(value).replace("'", "''") + "'"


def make_placeholders(count: int) -> str:
    """Return ``count`` comma separated ``?`` placeholders.

    >>> make_placeholders(3)
    '?, ?, ?'
    """
    return ', '.join(['?'] * count)


def parse_find(find: str | None) -> str:
    """Normalize a find fragment into a statement suffix.

    >>> parse_find('id = ?')
    ' WHERE id = ?'
    >>> parse_find('LIMIT 1')
    ' LIMIT 1'
    >>> parse_find(None)
    ''
    """
    if not find:
        return ''
    if find.startswith(KNOWN_CLAUSES):
        return ' ' + find
    return ' WHERE ' + find


def has_placeholders(sql: str | None) -> bool:
    """Check if SQL has ``?`` placeholders outside quoted text.
    """
    return count_placeholders(sql) > 0


def count_placeholders(sql: str | None) -> int:
    """Count ``?`` placeholders outside quoted text.

    >>> count_placeholders("name = ? AND note = '?'")
    1
    """
    if not sql:
        return 0
    return sum(1 for m in _TOKENIZE.finditer(sql) if m.lastgroup == 'qmark')


def prepare_query(sql: str, args: Sequence[Any] | None) -> tuple[str, tuple[Any, ...] | None]:
    """Convert a ``?`` statement into the driver's ``%s`` paramstyle.

    With parameters, every ``?`` outside quoted text becomes ``%s`` and
    every bare ``%`` is doubled, since the driver applies ``%`` formatting.
    Without parameters the driver does no formatting, so the text is sent
    verbatim and the arguments are None.

    >>> prepare_query("SELECT 1 FROM t WHERE a LIKE 'x%' AND b = ?", [2])
    ("SELECT 1 FROM t WHERE a LIKE 'x%%' AND b = %s", (2,))
    >>> prepare_query('SELECT 1', [])
    ('SELECT 1', None)
    """
    if not args:
        return sql, None

    def _replace(match: re.Match[str]) -> str:
        kind = match.lastgroup
        if kind == 'qmark':
            return '%s'
        if kind == 'percent':
            return '%%'
        return match.group(0).replace('%', '%%')

    return _TOKENIZE.sub(_replace, sql), tuple(args)
