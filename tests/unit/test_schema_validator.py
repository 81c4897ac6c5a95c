import pytest
from database import SchemaValidator
from errors import InvalidColumns, InvalidIdentifier, TableNotFound, UnknownColumn
from errors import UnknownTable


@pytest.fixture
def schema(manager):
    return SchemaValidator(manager)


def test_table_exists_is_exact_match(schema, manager, fake_db):
    fake_db.add_table('Orders', [('id', 'int')])
    with manager.acquire() as conn:
        assert schema.table_exists(conn, 'users')
        assert schema.table_exists(conn, 'Orders')
        assert not schema.table_exists(conn, 'orders')
        assert not schema.table_exists(conn, 'user')
        assert not schema.table_exists(conn, 'ghost')


def test_list_columns(schema, manager):
    with manager.acquire() as conn:
        columns = schema.list_columns(conn, 'users')
    assert [c.name for c in columns] == ['id', 'name']
    assert columns[0].is_primary_key
    assert columns[0].data_type == 'int(11)'
    assert not columns[0].is_nullable
    assert columns[1].to_dict() == {
        'Field': 'name', 'Type': 'varchar(50)', 'Null': 'YES',
        'Key': '', 'Default': '', 'Extra': '',
    }


def test_list_columns_unknown_table(schema, manager, fake_db):
    with manager.acquire() as conn:
        with pytest.raises(TableNotFound):
            schema.list_columns(conn, 'ghost')
        with pytest.raises(UnknownTable) as excinfo:
            schema.list_columns(conn, 'ghost', not_found=False)
    assert not isinstance(excinfo.value, TableNotFound)
    assert not any(sql.startswith('SHOW COLUMNS') for sql in fake_db.statements)


def test_column_exists(schema, manager):
    with manager.acquire() as conn:
        assert schema.column_exists(conn, 'users', 'name')
        assert not schema.column_exists(conn, 'users', 'bogus')
        with pytest.raises(UnknownTable):
            schema.column_exists(conn, 'ghost', 'name')


def test_require_column(schema, manager):
    with manager.acquire() as conn:
        assert schema.require_column(conn, 'users', 'id') == 'id'
        with pytest.raises(UnknownColumn) as excinfo:
            schema.require_column(conn, 'users', 'email', kind='Field')
    assert str(excinfo.value) == "Field 'email' not found in table 'users'"


def test_require_columns_lists_every_invalid_name(schema, manager):
    with manager.acquire() as conn:
        with pytest.raises(InvalidColumns) as excinfo:
            schema.require_columns(conn, 'users', ['id', 'bogus', 'name', 'other'])
    assert excinfo.value.columns == ['bogus', 'other']
    assert 'bogus' in excinfo.value.message and 'other' in excinfo.value.message


def test_existing_but_unsafe_names_are_rejected(schema, manager, fake_db):
    fake_db.add_table('odd`table', [('id', 'int')])
    fake_db.add_table('plain', [('id', 'int'), ('weird col', 'int')])
    with manager.acquire() as conn:
        with pytest.raises(InvalidIdentifier):
            schema.require_table(conn, 'odd`table')
        with pytest.raises(InvalidIdentifier):
            schema.require_column(conn, 'plain', 'weird col')
        with pytest.raises(InvalidIdentifier):
            schema.require_columns(conn, 'plain', ['id', 'weird col'])
    assert not any('odd`table' in sql for sql in fake_db.statements)
    assert not any('weird col' in sql for sql in fake_db.statements)


def test_absent_unsafe_names_are_invalid_not_unknown(schema, manager, fake_db):
    with manager.acquire() as conn:
        with pytest.raises(InvalidIdentifier):
            schema.require_table(conn, 'gho`st')
        with pytest.raises(InvalidIdentifier):
            schema.require_column(conn, 'users', 'na`me')
        with pytest.raises(InvalidIdentifier):
            schema.require_columns(conn, 'users', ['id', 'bo gus'])
    assert fake_db.statements == []


def test_no_schema_caching(schema, manager, fake_db):
    with manager.acquire() as conn:
        assert not schema.table_exists(conn, 'late')
        fake_db.add_table('late', [('id', 'int')])
        assert schema.table_exists(conn, 'late')
