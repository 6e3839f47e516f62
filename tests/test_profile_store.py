import os
import sys
import tempfile
import unittest
from unittest import mock

import aiosqlite

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db import database as db_database  # noqa: E402
from stores.models import UserProfile  # noqa: E402
from stores.profile import ProfileStore, fallback_profile  # noqa: E402


class ProfileStoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        db_database.DB_PATH = os.path.join(self.temp_dir.name, "test.sqlite")
        db_database._initialized = False

        self.store = ProfileStore()

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_initial_state(self):
        self.assertEqual(self.store.profile, UserProfile())
        self.assertTrue(self.store.loading)

    def test_setters(self):
        profile = UserProfile(display_name="Aoi", username="aoi")
        self.store.set_profile(profile)
        self.store.set_loading(False)
        self.assertEqual(self.store.profile, profile)
        self.assertFalse(self.store.loading)

    async def test_refresh_from_catalog(self):
        profile = await self.store.refresh_profile("u1001")
        self.assertEqual(profile.display_name, "Aoi Tanaka")
        self.assertEqual(profile.username, "aoi")
        self.assertEqual(profile.photo_url, "/img/users/u1001.jpg")
        self.assertTrue(profile.bio.startswith("Shore casting"))
        self.assertFalse(self.store.loading)

    async def test_refresh_missing_user_uses_fallback(self):
        profile = await self.store.refresh_profile(
            "nobody", fallback_name="Guest", fallback_email="guest@example.com"
        )
        self.assertEqual(profile, UserProfile(display_name="Guest", username="guest"))

        profile = await self.store.refresh_profile("nobody")
        self.assertEqual(profile, UserProfile(display_name="Anonymous", username="user"))
        self.assertFalse(self.store.loading)

    async def test_refresh_db_error_uses_fallback(self):
        with mock.patch(
            "stores.profile.crud.get_user", side_effect=aiosqlite.OperationalError("locked")
        ):
            profile = await self.store.refresh_profile("u1001", fallback_name="Aoi")
        self.assertEqual(profile.display_name, "Aoi")
        self.assertFalse(self.store.loading)

    async def test_reset(self):
        await self.store.refresh_profile("u1001")
        self.store.reset_profile()
        self.assertEqual(self.store.profile, UserProfile())
        self.assertTrue(self.store.loading)

    def test_fallback_profile(self):
        self.assertEqual(fallback_profile(None, "@example.com").username, "user")
        self.assertEqual(fallback_profile("", None).display_name, "Anonymous")


if __name__ == "__main__":
    unittest.main()
