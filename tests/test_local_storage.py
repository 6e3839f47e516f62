import os
import sys
import tempfile
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db.local_storage import (  # noqa: E402
    LocalStorage,
    MemoryLocalStorage,
    QuotaExceededError,
    SqliteLocalStorage,
    StorageUnavailableError,
    open_local_storage,
)


class SqliteLocalStorageTestCase(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.temp_dir.name, "nested", "storage.sqlite")
        self.storage = SqliteLocalStorage(self.path)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_get_set_remove(self):
        self.assertTrue(self.storage.available())
        self.assertIsNone(self.storage.get_item("cart-storage"))

        self.storage.set_item("cart-storage", '{"a": 1}')
        self.assertEqual(self.storage.get_item("cart-storage"), '{"a": 1}')

        self.storage.set_item("cart-storage", '{"a": 2}')
        self.assertEqual(self.storage.get_item("cart-storage"), '{"a": 2}')

        self.storage.remove_item("cart-storage")
        self.assertIsNone(self.storage.get_item("cart-storage"))
        # removing again is fine
        self.storage.remove_item("cart-storage")

    def test_keys_and_clear(self):
        self.storage.set_item("recentlyViewed", "[]")
        self.storage.set_item("cart-storage", "{}")
        self.assertEqual(self.storage.keys(), ["cart-storage", "recentlyViewed"])
        self.storage.clear()
        self.assertEqual(self.storage.keys(), [])

    def test_survives_new_instance(self):
        self.storage.set_item("k", "v")
        self.assertEqual(SqliteLocalStorage(self.path).get_item("k"), "v")

    def test_quota(self):
        storage = SqliteLocalStorage(self.path, quota=20)
        storage.set_item("a", "x" * 10)
        # replacing a value only counts the new size
        storage.set_item("a", "y" * 15)
        with self.assertRaises(QuotaExceededError):
            storage.set_item("b", "z" * 10)
        self.assertIsNone(storage.get_item("b"))
        self.assertEqual(storage.get_item("a"), "y" * 15)

    def test_unopenable_path(self):
        # a regular file where a directory is expected
        blocker = os.path.join(self.temp_dir.name, "blocker")
        with open(blocker, "w") as f:
            f.write("")
        storage = SqliteLocalStorage(os.path.join(blocker, "storage.sqlite"))

        self.assertFalse(storage.available())
        with self.assertRaises(StorageUnavailableError):
            storage.get_item("k")
        self.assertIsNone(open_local_storage(storage.path))

    def test_open_local_storage(self):
        storage = open_local_storage(self.path, quota=100)
        self.assertIsInstance(storage, SqliteLocalStorage)
        self.assertEqual(storage.quota, 100)


class MemoryLocalStorageTestCase(unittest.TestCase):
    def test_basic(self):
        storage = MemoryLocalStorage()
        storage.set_item("k", "v")
        self.assertEqual(storage.get_item("k"), "v")
        self.assertEqual(storage.keys(), ["k"])
        storage.clear()
        self.assertIsNone(storage.get_item("k"))

    def test_quota(self):
        storage = MemoryLocalStorage(quota=10)
        storage.set_item("k", "v" * 9)
        with self.assertRaises(QuotaExceededError):
            storage.set_item("j", "w")
        storage.set_item("k", "u" * 9)
        self.assertEqual(storage.get_item("k"), "u" * 9)

    def test_interface_is_abstract(self):
        with self.assertRaises(TypeError):
            LocalStorage()

        class KeysOnly(LocalStorage):
            def keys(self):
                return []

        with self.assertRaises(TypeError):
            KeysOnly()


if __name__ == "__main__":
    unittest.main()
