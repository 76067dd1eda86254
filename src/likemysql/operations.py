"""
Statement operations shared by `Pool` and `ConnectionWrapper`.

Each operation builds its statement, runs it through ``self.execute`` and
unwraps the result for its role:

- create_database / drop_database / create_table / drop_table - True when
  the server acted, False when ``IF [NOT] EXISTS`` made it a no-op
- insert - the generated insert id (0 without an AUTO_INCREMENT column)
- select - rows through the configured data loader
- select_one - first row or None
- exists - bool
- count - int
- update - changed rows
- delete - affected rows
"""
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from likemysql import statements
from likemysql.result import ExecutionResult
from likemysql.schema import Column
from likemysql.statements import DEFAULT_CHARSET, DEFAULT_COLLATE
from likemysql.statements import DEFAULT_ENGINE, Assignment, Statement

if TYPE_CHECKING:
    from likemysql.options import DatabaseOptions

__all__ = ['Operations']


class Operations(ABC):
    """Mixin turning statement builders into awaitable operations.

    Subclasses provide ``options`` and ``execute(statement)``.
    """

    options: 'DatabaseOptions'

    @abstractmethod
    async def execute(self, statement: Statement) -> ExecutionResult:
        """Run a built statement and return its execution result.
        """

    async def query(self, sql: str, params: Sequence[Any] = ()) -> ExecutionResult:
        """Execute raw SQL with ``?`` placeholders.
        """
        return await self.execute(Statement(sql, tuple(params)))

    async def create_database(self, name: str, charset: str = DEFAULT_CHARSET,
                              collate: str = DEFAULT_COLLATE) -> bool:
        result = await self.execute(statements.create_database(name, charset, collate))
        return result.warning_count == 0

    async def drop_database(self, name: str) -> bool:
        result = await self.execute(statements.drop_database(name))
        return result.warning_count == 0

    async def create_table(self, name: str, columns: Mapping[str, Column | Mapping[str, Any]],
                           unique: Mapping[str, Sequence[str]] | None = None,
                           index: Mapping[str, Sequence[str]] | None = None,
                           engine: str | None = DEFAULT_ENGINE,
                           increment: int | None = None,
                           charset: str | None = DEFAULT_CHARSET,
                           collate: str | None = DEFAULT_COLLATE) -> bool:
        """Create a table in the configured database.

        Returns False when the table already existed.
        """
        statement = statements.create_table(
            self.options.database, name, columns, unique=unique, index=index,
            engine=engine, increment=increment, charset=charset, collate=collate)
        result = await self.execute(statement)
        return result.warning_count == 0

    async def drop_table(self, names: str | Sequence[str]) -> bool:
        result = await self.execute(statements.drop_table(self.options.database, names))
        return result.warning_count == 0

    async def insert(self, table: str, data: Mapping[str, Any]) -> int:
        result = await self.execute(statements.insert(table, data))
        return result.insert_id

    async def select(self, table: str, columns: Sequence[str] | str = ('*',),
                     find: str | None = None, params: Sequence[Any] = ()) -> Any:
        result = await self.execute(statements.select(table, columns, find, params))
        return self.options.data_loader(result.rows, result.fields)

    async def select_one(self, table: str, columns: Sequence[str] | str = ('*',),
                         find: str | None = None,
                         params: Sequence[Any] = ()) -> dict[str, Any] | None:
        result = await self.execute(statements.select_one(table, columns, find, params))
        return result.first_row()

    async def exists(self, table: str, find: str | None = None,
                     params: Sequence[Any] = ()) -> bool:
        result = await self.execute(statements.exists(table, find, params))
        return bool(result.scalar())

    async def count(self, table: str, find: str | None = None,
                    params: Sequence[Any] = ()) -> int:
        result = await self.execute(statements.count(table, find, params))
        return result.scalar()

    async def update(self, table: str, data: Assignment | Mapping[str, Any],
                     find: str | None = None, params: Sequence[Any] = ()) -> int:
        """Update matching rows and return how many actually changed.

        A row matched but already holding the new values counts as affected,
        not changed.
        """
        result = await self.execute(statements.update(table, data, find, params))
        if result.changed_rows is None:
            return result.affected_rows
        return result.changed_rows

    async def delete(self, table: str, find: str | None = None,
                     params: Sequence[Any] = ()) -> int:
        result = await self.execute(statements.delete(table, find, params))
        return result.affected_rows
