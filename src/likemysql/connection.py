"""
Engine creation and reserved connections.

SQLAlchemy's async engine owns pooling: checkout, recycling, pre-ping and
invalidation. Statements run on the raw aiomysql connection underneath the
pooled SQLAlchemy connection, so the SQL text sent is exactly the text built
by `likemysql.statements`.

Outside an explicit transaction every statement is committed on its own
(the engine runs in AUTOCOMMIT); `ConnectionWrapper.begin` opens a real
transaction on the reserved connection.
"""
import logging
from typing import Any, Self

import pymysql.converters
import sqlalchemy as sa
from likemysql.cursor import execute as execute_sql
from likemysql.exceptions import ConnectionFailure
from likemysql.operations import Operations
from likemysql.options import DatabaseOptions
from likemysql.result import ExecutionResult
from likemysql.statements import Statement
from pymysql.constants import FIELD_TYPE
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine
from sqlalchemy.ext.asyncio import create_async_engine

__all__ = [
    'ConnectionWrapper',
    'create_url_from_options',
    'connect_args_from_options',
    'create_engine_for_options',
]

logger = logging.getLogger(__name__)


def create_url_from_options(options: DatabaseOptions, url_creator=sa.URL.create):
    """Convert DatabaseOptions to a SQLAlchemy URL.

    Args:
        options: DatabaseOptions object with connection parameters
        url_creator: Function used to create URL objects (default: sqlalchemy.URL.create)

    Returns
        sqlalchemy.URL: URL for the ``mysql+aiomysql`` dialect
    """
    return url_creator(
        drivername='mysql+aiomysql',
        username=options.username,
        password=options.password,
        host=options.hostname,
        port=options.port,
        database=options.database or None,
        query={'charset': options.charset},
    )


def connect_args_from_options(options: DatabaseOptions) -> dict[str, Any]:
    """Driver arguments the URL cannot carry.
    """
    conv = dict(pymysql.converters.decoders)
    if options.decimal_numbers:
        conv[FIELD_TYPE.DECIMAL] = float
        conv[FIELD_TYPE.NEWDECIMAL] = float

    connect_args = {
        'init_command': f'SET NAMES {options.charset} COLLATE {options.collation}',
        'conv': conv,
    }
    if options.unix_socket:
        connect_args['unix_socket'] = options.unix_socket
    return connect_args


def create_engine_for_options(options: DatabaseOptions,
                              engine_factory=create_async_engine,
                              **kwargs: Any) -> AsyncEngine:
    """Create the async engine backing a `Pool`.

    Args:
        options: DatabaseOptions object
        engine_factory: Function to create engines (defaults to create_async_engine)
        **kwargs: Additional arguments passed to engine factory

    A non-queueing pool is sized exactly to ``connection_limit``; the
    exhaustion check itself happens in `Pool.get_connection`.
    """
    url = create_url_from_options(options)
    engine_kwargs = {
        'pool_size': options.connection_limit,
        'max_overflow': 0,
        'pool_timeout': options.pool_timeout,
        'pool_recycle': options.pool_recycle,
        'pool_pre_ping': True,
        'pool_reset_on_return': 'rollback',
        'isolation_level': 'AUTOCOMMIT',
        'connect_args': connect_args_from_options(options),
    }
    engine_kwargs.update(kwargs)

    engine = engine_factory(url, **engine_kwargs)
    logger.debug(f'Created engine for {options} (pool_size={options.connection_limit})')
    return engine


class ConnectionWrapper(Operations):
    """Wraps a pooled SQLAlchemy connection to track calls and execution time

    The wrapper is exclusively owned by whoever acquired it until `release`
    returns it to the pool, or `destroy` invalidates it so the physical
    connection is closed instead of reused.
    """

    def __init__(self, sa_connection: AsyncConnection, driver_connection: Any,
                 options: DatabaseOptions) -> None:
        """Initialize a connection wrapper

        Args:
            sa_connection: Pooled SQLAlchemy connection
            driver_connection: The aiomysql connection underneath it
            options: The DatabaseOptions used to create this connection
        """
        self.sa_connection = sa_connection
        self.driver_connection = driver_connection
        self.options = options
        self.calls = 0
        self.time = 0
        self.in_transaction = False
        self.released = False
        self.destroyed = False
        self.last_execution: ExecutionResult | None = None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None,
                        exc_tb: Any | None) -> None:
        await self.release()

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics

        Args:
            elapsed: Time in seconds that the query took to execute

        """
        self.time += elapsed
        self.calls += 1

    async def execute(self, statement: Statement) -> ExecutionResult:
        """Execute a built statement on this connection.
        """
        if self.released:
            raise ConnectionFailure('Connection was already released')
        result = await execute_sql(self, statement.sql, statement.params)
        self.last_execution = result
        return result

    async def begin(self) -> None:
        await self.driver_connection.begin()
        self.in_transaction = True
        logger.debug(f'BEGIN on connection {id(self)}')

    async def commit(self) -> None:
        await self.driver_connection.commit()
        self.in_transaction = False
        logger.debug(f'COMMIT on connection {id(self)}')

    async def rollback(self) -> None:
        self.in_transaction = False
        await self.driver_connection.rollback()
        logger.debug(f'ROLLBACK on connection {id(self)}')

    async def destroy(self) -> None:
        """Drop the physical connection instead of returning it to the pool.
        """
        if self.destroyed:
            return
        self.destroyed = True
        await self.sa_connection.invalidate()
        logger.debug(f'Destroyed connection {id(self)}')

    async def release(self) -> None:
        """Return the connection to the pool, once.

        An unfinished transaction is rolled back by the pool on return.
        """
        if self.released:
            return
        self.released = True
        self.in_transaction = False
        await self.sa_connection.close()
        logger.debug(f'Connection released: {self.calls} queries in {self.time:.2f}s (avg: {self.time/max(1,self.calls):.3f}s per query)')
