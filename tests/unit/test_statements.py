"""Unit tests for statement builders.

The SQL text is the wire contract with the driver; these tests pin it
byte for byte.
"""
import pytest
from likemysql import statements
from likemysql.exceptions import ValidationError
from likemysql.statements import Arithmetic, Bound


class TestDatabaseStatements:

    def test_create_database(self):
        stmt = statements.create_database('forex')
        assert stmt.sql == 'CREATE DATABASE IF NOT EXISTS `forex` DEFAULT CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci'
        assert stmt.params == ()
        assert stmt.kind == 'ddl'

    def test_create_database_charset(self):
        stmt = statements.create_database('forex', 'latin1', 'latin1_swedish_ci')
        assert stmt.sql.endswith('DEFAULT CHARACTER SET latin1 COLLATE latin1_swedish_ci')

    def test_drop_database(self):
        stmt = statements.drop_database('forex')
        assert stmt.sql == 'DROP DATABASE IF EXISTS `forex`'
        assert stmt.kind == 'ddl'


class TestCreateTable:

    def test_simple(self):
        stmt = statements.create_table('test', 'users', {'username': {'type': 'varchar', 'length': 16}})
        assert stmt.sql == (
            'CREATE TABLE IF NOT EXISTS `test`.`users` (\n'
            '  `username` varchar (16) NULL\n'
            ') ENGINE=InnoDB CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci'
        )

    def test_without_database(self):
        stmt = statements.create_table('', 'users', {'id': {}})
        assert stmt.sql.startswith('CREATE TABLE IF NOT EXISTS `users` (\n')

    def test_primary_key(self):
        stmt = statements.create_table('test', 'users', {
            'id': {'type': 'int', 'increment': True, 'primary': True},
            'username': {'type': 'varchar', 'length': 16},
            })
        assert stmt.sql == (
            'CREATE TABLE IF NOT EXISTS `test`.`users` (\n'
            '  `id` int NOT NULL AUTO_INCREMENT,\n'
            '  `username` varchar (16) NULL,\n'
            '  PRIMARY KEY (`id`)\n'
            ') ENGINE=InnoDB CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci'
        )

    def test_indexes_before_unique_keys(self):
        stmt = statements.create_table(
            'test', 'items',
            {
                'id': {'type': 'int', 'unsigned': True, 'required': True, 'increment': True, 'primary': True},
                'fullname': {'type': 'varchar', 'length': 64, 'collate': 'utf8mb4_unicode_ci', 'required': True},
                'price': {'type': 'decimal', 'length': [11, 2], 'required': True},
                'dni': {'type': 'int', 'unsigned': True, 'required': True},
                'birthdate': {'type': 'date', 'default': None},
                'size': {'type': 'enum', 'length': ['small', 'large'], 'default': 'small'},
            },
            unique={'person_dni': ['dni', 'fullname']},
            index={'person2': ['fullname,ASC', 'dni,DESC']},
            engine='InnoDB', increment=95406, charset='utf8mb4', collate='utf8mb4_unicode_ci',
        )
        assert stmt.sql == (
            'CREATE TABLE IF NOT EXISTS `test`.`items` (\n'
            '  `id` int unsigned NOT NULL AUTO_INCREMENT,\n'
            '  `fullname` varchar (64) COLLATE utf8mb4_unicode_ci NOT NULL,\n'
            '  `price` decimal (11,2) NOT NULL,\n'
            '  `dni` int unsigned NOT NULL,\n'
            '  `birthdate` date NULL DEFAULT NULL,\n'
            "  `size` enum ('small','large') NULL DEFAULT 'small',\n"
            '  PRIMARY KEY (`id`),\n'
            '  INDEX `person2` (`fullname` ASC, `dni` DESC),\n'
            '  UNIQUE KEY `person_dni` (`dni` ASC, `fullname` ASC)\n'
            ') ENGINE=InnoDB AUTO_INCREMENT=95406 CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci'
        )

    def test_no_table_options(self):
        stmt = statements.create_table('', 't', {'a': {}}, engine=None, charset=None, collate=None)
        assert stmt.sql == 'CREATE TABLE IF NOT EXISTS `t` (\n  `a` int NULL\n)'

    def test_drop_table(self):
        assert statements.drop_table('test', 'users').sql == 'DROP TABLE IF EXISTS `test`.`users`'
        assert statements.drop_table('', ['a', 'b']).sql == 'DROP TABLE IF EXISTS `a`, `b`'


class TestInsert:

    def test_insert(self):
        stmt = statements.insert('users', {'name': 'ab', 'code': 12})
        assert stmt.sql == 'INSERT INTO users (`name`, `code`) VALUES (?, ?)'
        assert stmt.params == ('ab', 12)
        assert stmt.kind == 'insert'


class TestSelect:

    def test_all_columns(self):
        stmt = statements.select('users')
        assert stmt.sql == 'SELECT * FROM users'
        assert stmt.params == ()

    def test_columns_and_find(self):
        stmt = statements.select('users', ['password'], 'username = ?', ['joe'])
        assert stmt.sql == 'SELECT `password` FROM users WHERE username = ?'
        assert stmt.params == ('joe',)

    def test_trailing_clause(self):
        stmt = statements.select('users', ['*'], 'ORDER BY username ASC LIMIT 1')
        assert stmt.sql == 'SELECT * FROM users ORDER BY username ASC LIMIT 1'

    def test_single_column_string(self):
        assert statements.select('users', 'username').sql == 'SELECT `username` FROM users'

    def test_select_one(self):
        stmt = statements.select_one('users', ['name', 'code'], 'name = ?', ['not-exists'])
        assert stmt.sql == 'SELECT `name`, `code` FROM users WHERE name = ? LIMIT 1'
        assert stmt.params == ('not-exists',)
        assert stmt.kind == 'row'

    def test_exists(self):
        stmt = statements.exists('users', 'name = ?', ['not-exists'])
        assert stmt.sql == 'SELECT EXISTS(SELECT 1 FROM users WHERE name = ? LIMIT 1)'
        assert stmt.params == ('not-exists',)

    def test_count(self):
        assert statements.count('users').sql == 'SELECT COUNT(1) FROM users'
        stmt = statements.count('users', 'username = ?', ['joe'])
        assert stmt.sql == 'SELECT COUNT(1) FROM users WHERE username = ?'


class TestUpdate:

    def test_plain_mapping(self):
        stmt = statements.update('users', {'username': 'alice'}, 'username = ?', ['bob'])
        assert stmt.sql == 'UPDATE users SET `username` = ? WHERE username = ?'
        assert stmt.params == ('alice', 'bob')
        assert stmt.kind == 'update'

    def test_bound(self):
        stmt = statements.update('users', Bound({'a': 1, 'b': 2}))
        assert stmt.sql == 'UPDATE users SET `a` = ?, `b` = ?'
        assert stmt.params == (1, 2)

    def test_arithmetic(self):
        stmt = statements.update('t', Arithmetic({'count': 'count + ?'}, [1]), 'username = ?', ['bob'])
        assert stmt.sql == 'UPDATE t SET `count` = count + ? WHERE username = ?'
        assert stmt.params == (1, 'bob')

    def test_arithmetic_scalar_value(self):
        stmt = statements.update('t', Arithmetic({'code': 'code + ?'}, 5), 'name = ?', ['ab'])
        assert stmt.params == (5, 'ab')

    @pytest.mark.parametrize('value', [b'ab', bytearray(b'ab')])
    def test_arithmetic_binary_value(self, value):
        stmt = statements.update('t', Arithmetic({'b': 'CONCAT(b, ?)'}, value), 'id = ?', [1])
        assert stmt.params == (value, 1)

    def test_arithmetic_without_values(self):
        stmt = statements.update('t', Arithmetic({'count': 'count + 1'}), 'LIMIT 1')
        assert stmt.sql == 'UPDATE t SET `count` = count + 1 LIMIT 1'
        assert stmt.params == ()

    def test_invalid_payload(self):
        with pytest.raises(ValidationError):
            statements.update('t', [('count', 1)])


def test_delete():
    assert statements.delete('users').sql == 'DELETE FROM users'
    stmt = statements.delete('users', 'username = ?', ['bob'])
    assert stmt.sql == 'DELETE FROM users WHERE username = ?'
    assert stmt.params == ('bob',)
    assert stmt.kind == 'delete'
