"""
Connection and pool options.

`DatabaseOptions` gives every recognized setting an explicit default. Caller
configuration overrides it field by field, either through the constructor or
through `dataclasses.replace`.

The host may be given as a single string, either ``'host:port'`` or a
filesystem path to the server's unix socket:

    >>> parse_host('10.0.0.5:3307')
    ('10.0.0.5', 3307, None)
    >>> parse_host('/var/lib/mysql/mysql.sock')
    ('127.0.0.1', 3306, '/var/lib/mysql/mysql.sock')
"""
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import pandas as pd

__all__ = [
    'DEFAULT_HOST',
    'DEFAULT_PORT',
    'DatabaseOptions',
    'parse_host',
    'iterdict_data_loader',
    'pandas_data_loader',
]

logger = logging.getLogger(__name__)

DEFAULT_HOST = '127.0.0.1'
DEFAULT_PORT = 3306


def iterdict_data_loader(rows: Sequence[dict[str, Any]], fields: Sequence[Any],
                         **kwargs: Any) -> list[dict[str, Any]]:
    """Minimal data loader, rows stay a list of dicts.
    """
    if not rows:
        return []
    return list(rows)


def pandas_data_loader(rows: Sequence[dict[str, Any]], fields: Sequence[Any],
                       **kwargs: Any) -> pd.DataFrame:
    """Load rows into a pandas DataFrame.

    Column order follows the field descriptors, so empty results still carry
    their columns.
    """
    columns = [field.name for field in fields]
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame.from_records(list(rows), columns=columns)


def parse_host(host: str | None) -> tuple[str, int, str | None]:
    """Split a single host string into (hostname, port, unix_socket).

    A string with a colon is ``host:port``; anything else non-empty is a
    socket path. Malformed parts fall back to the defaults.
    """
    if not host:
        return DEFAULT_HOST, DEFAULT_PORT, None

    if ':' not in host:
        return DEFAULT_HOST, DEFAULT_PORT, host

    hostname, _, port = host.partition(':')
    try:
        port = int(port)
    except ValueError:
        logger.debug(f'Invalid port in host {host!r}, using {DEFAULT_PORT}')
        port = DEFAULT_PORT
    return hostname or DEFAULT_HOST, port, None


@dataclass
class DatabaseOptions:
    """Options

    Connection pooling options:
    - connection_limit: Maximum connections in pool (default: 50)
    - wait_for_connections: Queue for a free connection when the pool is
      saturated; when False acquisition fails at once (default: True)
    - pool_timeout: Maximum seconds a queued acquisition waits (default: 30)
    - pool_recycle: Maximum seconds a connection can be idle (default: 300)
    """
    hostname: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    unix_socket: str | None = None
    username: str = 'root'
    password: str = ''
    database: str = ''
    charset: str = 'utf8mb4'
    collation: str = 'utf8mb4_unicode_ci'
    decimal_numbers: bool = False
    data_loader: Callable[..., Any] | None = None
    # Connection pooling parameters
    connection_limit: int = 50
    wait_for_connections: bool = True
    pool_timeout: float = 30
    pool_recycle: int = 300

    def __post_init__(self):
        try:
            self.port = int(self.port)
        except (TypeError, ValueError):
            raise ValueError(f'port must be an integer, got {self.port!r}')
        if self.connection_limit < 1:
            raise ValueError('connection_limit must be at least 1')
        self.hostname = self.hostname or DEFAULT_HOST
        self.database = self.database or ''
        if self.data_loader is None:
            self.data_loader = iterdict_data_loader
        if not callable(self.data_loader):
            raise ValueError('data_loader must be callable')

    @classmethod
    def from_host(cls, host: str | None, user: str | None = None,
                  password: str | None = None, database: str | None = None,
                  **kw: Any) -> 'DatabaseOptions':
        """Build options from a ``host:port`` or socket path string.
        """
        hostname, port, unix_socket = parse_host(host)
        kw.setdefault('hostname', hostname)
        kw.setdefault('port', port)
        kw.setdefault('unix_socket', unix_socket)
        return cls(username=user or 'root', password=password or '',
                   database=database or '', **kw)

    def __str__(self) -> str:
        where = self.unix_socket or f'{self.hostname}:{self.port}'
        return f'{self.username}@{where}/{self.database}'
