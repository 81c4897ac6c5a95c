import pytest
from errors import InvalidIdentifier
from sql import AllColumns, ExplicitColumns, QueryBuilder, Statement
from sql import check_single_statement, clamp_limit, is_valid_identifier
from sql import parse_projection, quote_identifier, validate_identifier
from sql.validator import StatementValidationError


@pytest.fixture
def builder():
    return QueryBuilder()


@pytest.mark.parametrize('name', ['users', 'order_items', 'Col9', '_x', '2024_sales'])
def test_valid_identifiers_accepted(name):
    assert is_valid_identifier(name)
    assert validate_identifier(name) == name


@pytest.mark.parametrize('name', [
    '', 'a b', 'users;', 'na`me', "o'brien", 'x"y', 'a-b', 'db.table',
    'name--', 'col/*', 'é', 'x' * 65, None, 42, 'users\n', 'id\n',
])
def test_invalid_identifiers_rejected(name):
    assert not is_valid_identifier(name)
    with pytest.raises(InvalidIdentifier):
        validate_identifier(name)


def test_identifier_length_limit():
    assert is_valid_identifier('x' * 64)
    assert not is_valid_identifier('x' * 65)


def test_quote_identifier_uses_backticks():
    assert quote_identifier('users') == '`users`'


def test_check_single_statement_rejects_stacked_and_comments():
    assert check_single_statement('SELECT 1') == 'SELECT 1'
    with pytest.raises(StatementValidationError):
        check_single_statement('SELECT 1; DROP TABLE users')
    with pytest.raises(StatementValidationError):
        check_single_statement('SELECT 1 -- trailing')
    with pytest.raises(StatementValidationError):
        check_single_statement('   ')


@pytest.mark.parametrize(('raw', 'expected'), [
    (None, 20),
    ('', 20),
    ('abc', 20),
    ('-5', 20),
    ('1.5', 20),
    ('0', 0),
    ('5', 5),
    (' 42 ', 42),
    ('1000', 1000),
    ('1001', 1000),
    ('5000', 1000),
    ('99999999999999999999', 1000),
    (7, 7),
    (-1, 20),
    (5000, 1000),
    (True, 20),
])
def test_clamp_limit(raw, expected):
    assert clamp_limit(raw) == expected


def test_clamp_limit_stays_in_range():
    for raw in range(-10, 2000, 37):
        assert 0 <= clamp_limit(str(raw)) <= 1000
        if raw >= 0:
            assert clamp_limit(str(raw)) == min(raw, 1000)


def test_parse_projection():
    assert parse_projection(None) == AllColumns()
    assert parse_projection('') == AllColumns()
    assert parse_projection(' , ') == AllColumns()
    assert parse_projection('id, name') == ExplicitColumns(('id', 'name'))
    assert parse_projection('id,id,name') == ExplicitColumns(('id', 'name'))
    assert AllColumns().describe() == 'all'
    assert ExplicitColumns(('id',)).describe() == ['id']


def test_explicit_columns_requires_names():
    with pytest.raises(ValueError):
        ExplicitColumns(())


def test_fixed_statements(builder):
    assert builder.list_tables() == Statement('SHOW TABLES', {})
    assert builder.list_columns('users').sql == 'SHOW COLUMNS FROM `users`'
    assert builder.row_count('users').sql == 'SELECT COUNT(*) AS count FROM `users`'
    assert builder.row_count('users').params == {}


def test_distinct_values_statement(builder):
    stmt = builder.distinct_values('users', 'name', '5000')
    assert stmt.sql == ('SELECT DISTINCT `name` AS value FROM `users` '
                        'WHERE `name` IS NOT NULL LIMIT 1000')
    assert stmt.params == {}
    assert builder.distinct_values('users', 'name').sql.endswith('LIMIT 20')


def test_filtered_rows_binds_value(builder):
    stmt = builder.filtered_rows('users', 'name', "Alice' OR '1'='1", AllColumns(), '5')
    assert stmt.sql == 'SELECT * FROM `users` WHERE `name` = :value LIMIT 5'
    assert stmt.params == {'value': "Alice' OR '1'='1"}
    assert 'Alice' not in stmt.sql


def test_filtered_rows_projection(builder):
    stmt = builder.filtered_rows('users', 'name', 'Alice', ExplicitColumns(('id', 'name')), None)
    assert stmt.sql == 'SELECT `id`, `name` FROM `users` WHERE `name` = :value LIMIT 20'


@pytest.mark.parametrize('bad', ['na`me', 'x; DROP TABLE users', "a' OR 1=1", 'c/**/d', 'a b', 'users\n', 'id\n'])
def test_bad_identifier_never_reaches_statement(builder, bad):
    calls = [
        lambda: builder.list_columns(bad),
        lambda: builder.row_count(bad),
        lambda: builder.distinct_values('users', bad),
        lambda: builder.distinct_values(bad, 'name'),
        lambda: builder.filtered_rows('users', bad, 'v'),
        lambda: builder.filtered_rows(bad, 'name', 'v'),
        lambda: builder.filtered_rows('users', 'name', 'v', ExplicitColumns(('id', bad))),
    ]
    for call in calls:
        with pytest.raises(InvalidIdentifier):
            call()
