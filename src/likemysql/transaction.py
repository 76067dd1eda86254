"""
Transaction handling for pooled connections.
"""
import logging
from typing import TYPE_CHECKING, Any

from likemysql.connection import ConnectionWrapper

if TYPE_CHECKING:
    from likemysql.pool import Pool

__all__ = ['Transaction']

logger = logging.getLogger(__name__)


class Transaction:
    """Async context manager reserving one connection for a transaction.

    The block runs with the reserved `ConnectionWrapper`. Leaving the block
    normally commits; leaving it with an error, or a failed COMMIT, rolls
    back. The connection goes back to the pool exactly once on every path,
    even when BEGIN or ROLLBACK fails.

    Transactions do not nest: starting another one inside the block reserves
    a second, independent connection.

    Examples
        async with Transaction(pool) as tx:
            await tx.delete('users', 'id = ?', [1])
            await tx.update('totals', {'users': 0})
    """

    def __init__(self, pool: 'Pool') -> None:
        self.pool = pool
        self.connection: ConnectionWrapper | None = None

    async def __aenter__(self) -> ConnectionWrapper:
        connection = await self.pool.get_connection()
        try:
            await connection.begin()
        except BaseException:
            await connection.release()
            raise
        self.connection = connection
        logger.debug(f'Started transaction for connection {id(connection)}')
        return connection

    async def __aexit__(self, exc_type: type | None, value: Exception | None,
                        traceback: Any | None) -> None:
        connection = self.connection
        try:
            if exc_type is not None:
                logger.warning(f'Rolling back the current transaction: {value!r}')
                await connection.rollback()
                return

            try:
                await connection.commit()
            except BaseException as err:
                logger.warning(f'Commit failed, rolling back: {err!r}')
                await connection.rollback()
                raise
            logger.debug(f'Committed transaction for connection {id(connection)}')
        finally:
            await connection.release()
            self.connection = None
            logger.debug(f'Transaction cleanup complete for connection {id(connection)}')
