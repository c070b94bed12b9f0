import sqlite3
import unittest
from unittest.mock import patch

import pytest

from portfolio_tracker.infrastructure.storage import InMemoryKeyValueStorage, SqliteKeyValueStorage
from portfolio_tracker.shared.exceptions import StorageError


@pytest.fixture
def sqlite_storage(tmp_path):
    return SqliteKeyValueStorage(str(tmp_path / 'nested' / 'portfolio.db'))


def test_sqlite_storage_creates_parent_directory(tmp_path):
    SqliteKeyValueStorage(str(tmp_path / 'a' / 'b' / 'store.db'))
    assert (tmp_path / 'a' / 'b' / 'store.db').exists()


def test_sqlite_get_set_remove(sqlite_storage):
    assert sqlite_storage.get_item('portfolio-stocks') is None

    sqlite_storage.set_item('portfolio-stocks', '[]')
    assert sqlite_storage.get_item('portfolio-stocks') == '[]'

    sqlite_storage.set_item('portfolio-stocks', '[{"symbol": "CASH"}]')
    assert sqlite_storage.get_item('portfolio-stocks') == '[{"symbol": "CASH"}]'

    sqlite_storage.remove_item('portfolio-stocks')
    assert sqlite_storage.get_item('portfolio-stocks') is None


def test_sqlite_values_survive_new_instance(tmp_path):
    path = str(tmp_path / 'store.db')
    SqliteKeyValueStorage(path).set_item('k', 'v')
    assert SqliteKeyValueStorage(path).get_item('k') == 'v'


def test_sqlite_errors_become_storage_errors(sqlite_storage):
    with patch('portfolio_tracker.infrastructure.storage.sqlite_storage.sqlite3.connect',
               side_effect=sqlite3.OperationalError('unable to open database file')):
        with pytest.raises(StorageError):
            sqlite_storage.get_item('k')


class TestInMemoryStorage(unittest.TestCase):

    def test_get_set_remove(self):
        storage = InMemoryKeyValueStorage({'a': '1'})
        self.assertEqual(storage.get_item('a'), '1')
        storage.set_item('b', '2')
        self.assertEqual(storage.get_item('b'), '2')
        storage.remove_item('a')
        storage.remove_item('missing')
        self.assertIsNone(storage.get_item('a'))
