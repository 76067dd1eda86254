"""
Statement dispatch on a raw driver connection.
"""
import logging
import time
from collections.abc import Sequence
from functools import wraps
from typing import Any

import aiomysql
from likemysql.result import ExecutionResult, read_result
from likemysql.sql import prepare_query

__all__ = ['dumpsql', 'execute']

logger = logging.getLogger(__name__)


def dumpsql(func):
    """Decorator for logging SQL statements, parameters and timing."""
    @wraps(func)
    async def wrapper(connwrapper: Any, sql: str, params: Sequence[Any] = ()):
        start = time.time()
        logger.debug(f'SQL:\n{sql}\nargs: {tuple(params)}')
        try:
            return await func(connwrapper, sql, params)
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{sql}\nargs: {tuple(params)}')
            raise
        finally:
            elapsed = time.time() - start
            connwrapper.addcall(elapsed)
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper


@dumpsql
async def execute(connwrapper: Any, sql: str, params: Sequence[Any] = ()) -> ExecutionResult:
    """Execute one statement on the wrapper's driver connection.

    ``sql`` uses ``?`` placeholders; it is converted for the driver here and
    recorded unchanged in the result.
    """
    processed_sql, processed_args = prepare_query(sql, params)
    async with connwrapper.driver_connection.cursor(aiomysql.DictCursor) as cursor:
        await cursor.execute(processed_sql, processed_args)
        return await read_result(cursor, sql, params)
