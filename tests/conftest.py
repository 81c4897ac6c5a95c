import pytest
from browser import TableBrowser

pytest_plugins = [
    'tests.fixtures.fake_mysql',
]


@pytest.fixture
def browser(manager):
    return TableBrowser(manager)
