"""
Connection pool front end.

`Pool` runs each statement operation on a connection acquired for that one
call and released right after; `get_connection` and `transaction` reserve a
connection for longer work.

    async with connect(hostname='db', username='app', database='shop') as pool:
        await pool.ready()
        await pool.insert('users', {'username': 'joe'})
"""
import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import Any, Self

import sqlalchemy as sa
from likemysql.connection import ConnectionWrapper, create_engine_for_options
from likemysql.exceptions import DbConnectionError, PoolError, PoolExhaustedError
from likemysql.exceptions import is_fatal_connect_error
from likemysql.operations import Operations
from likemysql.options import DatabaseOptions
from likemysql.result import ExecutionResult
from likemysql.statements import Statement
from likemysql.transaction import Transaction
from sqlalchemy.ext.asyncio import AsyncEngine

__all__ = ['Pool', 'connect', 'create_link']

logger = logging.getLogger(__name__)

# Errors the readiness probe waits out, unless fatal
RETRY_ERRORS = DbConnectionError + PoolError + (OSError,)


class Pool(Operations):
    """Pool of MySQL connections.

    Holds the SQLAlchemy async engine; ``engine`` may be passed in to share
    one or to substitute a test double.
    """

    def __init__(self, options: DatabaseOptions, engine: AsyncEngine | None = None) -> None:
        self.options = options
        self.engine = engine if engine is not None else create_engine_for_options(options)
        self.last_execution: ExecutionResult | None = None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None,
                        exc_tb: Any | None) -> None:
        await self.end()

    def checkedout(self) -> int:
        """Number of connections currently reserved from the pool.
        """
        return self.engine.pool.checkedout()

    async def get_connection(self) -> ConnectionWrapper:
        """Reserve a connection; the caller must release it.

        Raises
            PoolExhaustedError: every connection is reserved and the pool
                does not queue (``wait_for_connections=False``)
            pymysql.err.Error: the driver's own connection error
        """
        if not self.options.wait_for_connections \
                and self.checkedout() >= self.options.connection_limit:
            raise PoolExhaustedError()

        try:
            sa_connection = await self.engine.connect()
        except sa.exc.DBAPIError as err:
            raise err.orig from None

        try:
            raw = await sa_connection.get_raw_connection()
        except sa.exc.DBAPIError as err:
            await sa_connection.close()
            raise err.orig from None
        except BaseException:
            await sa_connection.close()
            raise

        connection = ConnectionWrapper(sa_connection, raw.driver_connection, self.options)
        logger.debug(f'Acquired connection {id(connection)} ({self.checkedout()} checked out)')
        return connection

    async def execute(self, statement: Statement) -> ExecutionResult:
        """Execute a built statement on a connection held for this call only.
        """
        async with await self.get_connection() as connection:
            result = await connection.execute(statement)
        self.last_execution = result
        return result

    async def _probe(self) -> None:
        connection = await self.get_connection()
        await connection.release()

    async def wait_connection(self, retries: int = 10, interval: float = 0.5,
                              sleep_func: Callable[[float], Awaitable[Any]] = asyncio.sleep) -> None:
        """Wait until a connection can be acquired, up to ``retries`` attempts.

        Access denied and unknown database errors are raised immediately.
        When every attempt fails the last error is raised.
        """
        attempts = max(1, retries)
        for attempt in range(1, attempts + 1):
            try:
                await self._probe()
                return
            except RETRY_ERRORS as err:
                if is_fatal_connect_error(err):
                    raise
                if attempt >= attempts:
                    logger.error(f'Maximum retries ({attempts}) exceeded: {err}')
                    raise
                logger.warning(f'Connection error (attempt {attempt}/{attempts}): {err}')
                await sleep_func(interval)

    async def ready(self, timeout: float = 15.0, interval: float = 0.5,
                    sleep_func: Callable[[float], Awaitable[Any]] = asyncio.sleep,
                    clock: Callable[[], float] = time.monotonic) -> None:
        """Wait until a connection can be acquired, for at most ``timeout`` seconds.

        ``timeout=0`` makes exactly one attempt. Fatal errors are raised
        immediately, otherwise the last error is raised once time runs out.
        """
        deadline = clock() + timeout
        attempt = 0
        while True:
            attempt += 1
            try:
                await self._probe()
                return
            except RETRY_ERRORS as err:
                if is_fatal_connect_error(err):
                    raise
                if clock() >= deadline:
                    logger.error(f'Database not ready after {attempt} attempts ({timeout}s): {err}')
                    raise
                logger.warning(f'Connection error (attempt {attempt}): {err}')
                await sleep_func(interval)

    async def transaction(self, callback: Callable[[ConnectionWrapper], Any]) -> Any:
        """Run ``callback(connection)`` in a transaction and return its value.

        The callback may be a coroutine function or a plain function.
        """
        async with Transaction(self) as connection:
            value = callback(connection)
            if inspect.isawaitable(value):
                value = await value
        return value

    async def end(self) -> None:
        """Close every pooled connection.
        """
        await self.engine.dispose()
        logger.debug(f'Pool closed for {self.options}')


def connect(options: DatabaseOptions | dict[str, Any] | None = None,
            engine: AsyncEngine | None = None, **kw: Any) -> Pool:
    """Create a pool.

    Args:
        options: Can be:
                - DatabaseOptions object
                - Dictionary of options
                - None, with options specified as keyword arguments
        engine: Prebuilt engine to use instead of creating one
        **kw: Option fields overriding ``options``

    No connection is opened until the first acquisition; call `Pool.ready`
    to confirm the server is reachable.
    """
    if isinstance(options, DatabaseOptions):
        if kw:
            options = replace(options, **kw)
    else:
        options = DatabaseOptions(**{**(options or {}), **kw})
    return Pool(options, engine=engine)


def create_link(host: str | None = None, user: str | None = None,
                password: str | None = None, database: str | None = None,
                **options: Any) -> Pool:
    """Create a pool from a ``'host:port'`` or unix socket path string.

    Examples
        pool = create_link('127.0.0.1:3307', 'root', 'secret', 'shop',
                           connection_limit=1, wait_for_connections=False)
    """
    engine = options.pop('engine', None)
    return Pool(DatabaseOptions.from_host(host, user, password, database, **options),
                engine=engine)
