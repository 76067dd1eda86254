"""Unit tests for role-specific result unwrapping.

Replies are scripted on the fake engine; the assertions check both the SQL
sent to the driver and the value handed back to the caller.
"""
import likemysql as db
import pandas as pd
import pytest
from likemysql.options import pandas_data_loader
from likemysql.statements import Arithmetic

from tests.fixtures.mocks import Reply, description

USERS = [{'username': 'joe', 'password': '123'}, {'username': 'bob', 'password': '456'}]


class TestDDL:

    async def test_create_database(self, make_pool, fake_engine):
        fake_engine.replies.extend([Reply(rowcount=1), Reply(warning_count=1)])
        pool = make_pool()

        assert await pool.create_database('forex') is True
        assert await pool.create_database('forex') is False

    async def test_drop_database(self, make_pool, fake_engine):
        fake_engine.replies.extend([Reply(), Reply(warning_count=1)])
        pool = make_pool()

        assert await pool.drop_database('forex') is True
        assert await pool.drop_database('forex') is False
        assert fake_engine.executed[0] == ('DROP DATABASE IF EXISTS `forex`', None)

    async def test_create_table_qualified(self, make_pool, fake_engine):
        pool = make_pool(database='shop')

        assert await pool.create_table('users', {'username': {'type': 'varchar', 'length': 16}})
        sql, args = fake_engine.executed[0]
        assert sql.startswith('CREATE TABLE IF NOT EXISTS `shop`.`users` (\n')
        assert args is None

    async def test_drop_table(self, make_pool, fake_engine):
        fake_engine.replies.append(Reply(warning_count=1))
        pool = make_pool(database='shop')

        assert await pool.drop_table('users') is False
        assert fake_engine.executed[0][0] == 'DROP TABLE IF EXISTS `shop`.`users`'


class TestDML:

    async def test_insert_returns_id(self, make_pool, fake_engine):
        fake_engine.replies.append(Reply(rowcount=1, lastrowid=2))
        pool = make_pool()

        assert await pool.insert('users', {'username': 'bob'}) == 2
        assert fake_engine.executed[0] == ('INSERT INTO users (`username`) VALUES (%s)', ('bob',))

    async def test_insert_without_increment(self, make_pool, fake_engine):
        fake_engine.replies.append(Reply(rowcount=1, lastrowid=0))
        assert await make_pool().insert('users', {'id': 1, 'username': 'joe'}) == 0

    async def test_update_reports_changed(self, make_pool, fake_engine):
        fake_engine.replies.append(Reply(rowcount=2, message='(Rows matched: 2  Changed: 1  Warnings: 0'))
        pool = make_pool()

        assert await pool.update('users', {'username': 'alice'}) == 1
        assert pool.last_execution.affected_rows == 2
        assert pool.last_execution.changed_rows == 1

    async def test_update_same_value(self, make_pool, fake_engine):
        fake_engine.replies.append(Reply(rowcount=1, message='(Rows matched: 1  Changed: 0  Warnings: 0'))
        assert await make_pool().update('users', {'username': 'alice'}, 'username = ?', ['alice']) == 0

    async def test_update_arithmetic(self, make_pool, fake_engine):
        fake_engine.replies.append(Reply(rowcount=1, message='(Rows matched: 1  Changed: 1  Warnings: 0'))
        pool = make_pool()

        assert await pool.update('users', Arithmetic({'code': 'code + ?'}, [5]), 'name = ?', ['ab']) == 1
        assert pool.last_execution.sql == 'UPDATE users SET `code` = code + ? WHERE name = ?'
        assert pool.last_execution.params == (5, 'ab')
        assert pool.last_execution.insert_id == 0
        assert pool.last_execution.field_count == 0
        assert pool.last_execution.rows == []
        assert fake_engine.executed[0] == ('UPDATE users SET `code` = code + %s WHERE name = %s', (5, 'ab'))

    async def test_update_without_info_message(self, make_pool, fake_engine):
        fake_engine.replies.append(Reply(rowcount=3))
        assert await make_pool().update('users', {'username': 'x'}) == 3

    async def test_delete_reports_affected(self, make_pool, fake_engine):
        fake_engine.replies.append(Reply(rowcount=2))
        assert await make_pool().delete('users') == 2


class TestQueries:

    async def test_select_rows(self, make_pool, fake_engine):
        fake_engine.replies.append(Reply(description=description('username', 'password'), rows=USERS))
        assert await make_pool().select('users') == USERS

    async def test_select_empty(self, make_pool, fake_engine):
        fake_engine.replies.append(Reply(description=description('username')))
        assert await make_pool().select('users', ['username'], 'username = ?', ['nobody']) == []

    async def test_select_pandas_loader(self, make_pool, fake_engine):
        fake_engine.replies.append(Reply(description=description('username', 'password'), rows=USERS))
        pool = make_pool(data_loader=pandas_data_loader)

        df = await pool.select('users')
        assert isinstance(df, pd.DataFrame)
        assert df['username'].tolist() == ['joe', 'bob']

    async def test_select_one_ignores_loader(self, make_pool, fake_engine):
        fake_engine.replies.append(Reply(description=description('username', 'password'), rows=USERS[:1]))
        pool = make_pool(data_loader=pandas_data_loader)

        assert await pool.select_one('users', ['*'], 'username = ?', ['joe']) == USERS[0]
        assert fake_engine.executed[0] == ('SELECT * FROM users WHERE username = %s LIMIT 1', ('joe',))

    async def test_select_one_none(self, make_pool, fake_engine):
        fake_engine.replies.append(Reply(description=description('name', 'code')))
        pool = make_pool()

        assert await pool.select_one('users', ['name', 'code'], 'name = ?', ['not-exists']) is None
        assert pool.last_execution.sql == 'SELECT `name`, `code` FROM users WHERE name = ? LIMIT 1'

    @pytest.mark.parametrize(('value', 'expected'), [(1, True), (0, False)])
    async def test_exists(self, make_pool, fake_engine, value, expected):
        column = 'EXISTS(SELECT 1 FROM users WHERE name = ? LIMIT 1)'
        fake_engine.replies.append(Reply(description=description(column), rows=[{column: value}]))

        assert await make_pool().exists('users', 'name = ?', ['joe']) is expected

    async def test_count(self, make_pool, fake_engine):
        fake_engine.replies.append(Reply(description=description('COUNT(1)'), rows=[{'COUNT(1)': 2}]))
        assert await make_pool().count('users') == 2

    async def test_query_returns_execution_result(self, make_pool, fake_engine):
        fake_engine.replies.append(Reply(description=description('1'), rows=[{'1': 1}]))
        result = await make_pool().query('SELECT 1')

        assert result.returns_rows
        assert result.scalar() == 1


class TestFacades:

    async def test_module_functions_forward(self, make_pool, fake_engine):
        fake_engine.replies.extend([
            Reply(rowcount=1, lastrowid=1),
            Reply(description=description('COUNT(1)'), rows=[{'COUNT(1)': 1}]),
            Reply(rowcount=1),
        ])
        pool = make_pool()

        assert await db.insert(pool, 'users', {'username': 'joe'}) == 1
        assert await db.count(pool, 'users') == 1
        assert await db.delete(pool, 'users', 'username = ?', ['joe']) == 1

    async def test_module_functions_on_connection(self, make_pool, fake_engine):
        fake_engine.replies.append(Reply(description=description('username'), rows=[{'username': 'joe'}]))
        pool = make_pool()

        async with await pool.get_connection() as cn:
            assert await db.select_one(cn, 'users', ['username']) == {'username': 'joe'}


def test_operations_require_execute():
    from likemysql.operations import Operations

    with pytest.raises(TypeError, match='execute'):
        Operations()
