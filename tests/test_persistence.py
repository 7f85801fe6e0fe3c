"""
Unit Tests - Persistence

Module: tests.test_persistence
Date: 2026-10-18
Version: 0.1.0-alpha

DESCRIPTION:
Tests for the persistence layer:
- JSONStore atomic writes and error handling
- UserStore create/find/update, users.json format and round-trip
- TokenRegistry lookup, lazy expiry, revocation and sweep
"""

import json
import logging
import os
import shutil
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from unittest import mock

from auth_server.persistence import (
    JSONStore,
    TokenNotFoundError,
    TokenRegistry,
    UserExistsError,
    UserNotFoundError,
    UserRecord,
    UserStore,
)
from auth_server.persistence.json_store import JSONStoreFormatError, JSONStoreIOError

logging.basicConfig(
    level=logging.WARNING,
    format="%(name)s - %(levelname)s - %(message)s"
)


class TestJSONStore(unittest.TestCase):
    """Test suite for JSONStore"""

    def setUp(self):
        """Setup before each test"""
        self.test_dir = tempfile.mkdtemp()
        self.store_path = os.path.join(self.test_dir, "nested", "test.json")

    def tearDown(self):
        """Cleanup after each test"""
        if os.path.exists(self.test_dir):
            shutil.rmtree(self.test_dir)

    def test_missing_file_returns_default(self):
        """Test missing file is the default document"""
        store = JSONStore(self.store_path, default_data=[])
        self.assertEqual(store.load(), [])
        self.assertFalse(os.path.exists(self.store_path))

    def test_save_and_load(self):
        """Test saving creates directories and round-trips"""
        store = JSONStore(self.store_path, default_data=[])
        store.save([["a@x.com", {"id": "1"}]])

        self.assertEqual(store.load(), [["a@x.com", {"id": "1"}]])
        self.assertFalse(os.path.exists(self.store_path + ".tmp"))

    def test_file_permissions(self):
        """Test file has restrictive permissions"""
        store = JSONStore(self.store_path)
        store.save({"data": "test"})

        mode = os.stat(self.store_path).st_mode & 0o777
        self.assertEqual(mode, 0o600)

    def test_invalid_json_raises_error(self):
        """Test invalid JSON raises error from load()"""
        os.makedirs(os.path.dirname(self.store_path))
        with open(self.store_path, "w") as f:
            f.write("{invalid json}")

        store = JSONStore(self.store_path, default_data=[])
        with self.assertRaises(JSONStoreFormatError):
            store.load()
        self.assertEqual(store.load_or_default(), [])

    def test_undecodable_bytes_raise_format_error(self):
        """Test non UTF-8 content is a format error"""
        os.makedirs(os.path.dirname(self.store_path))
        with open(self.store_path, "wb") as f:
            f.write(b'[["a@x.com", {"id": "\xff\xfe"}]]')

        store = JSONStore(self.store_path, default_data=[])
        with self.assertRaises(JSONStoreFormatError):
            store.load()
        self.assertEqual(store.load_or_default(), [])

    def test_unserializable_data(self):
        """Test unserializable data raises and leaves no temp file"""
        store = JSONStore(self.store_path)
        with self.assertRaises(JSONStoreIOError):
            store.save({"bad": object()})
        self.assertFalse(os.path.exists(self.store_path + ".tmp"))


class TestUserStore(unittest.TestCase):
    """Test suite for UserStore"""

    def setUp(self):
        """Setup before each test"""
        self.test_dir = tempfile.mkdtemp()
        self.users_file = os.path.join(self.test_dir, "users.json")
        self.store = UserStore(self.users_file)

    def tearDown(self):
        """Cleanup after each test"""
        if os.path.exists(self.test_dir):
            shutil.rmtree(self.test_dir)

    def test_create_user(self):
        """Test creating a user"""
        record = self.store.create("a@x.com", "secret1", "Alice")

        self.assertEqual(record.email, "a@x.com")
        self.assertEqual(record.name, "Alice")
        self.assertIsNone(record.last_login)
        self.assertEqual(len(record.user_id), 36)
        self.assertEqual(self.store.find("a@x.com"), record)

    def test_create_duplicate_raises(self):
        """Test duplicate identity rejected, first record untouched"""
        first = self.store.create("a@x.com", "secret1", "Alice")

        with self.assertRaises(UserExistsError):
            self.store.create("a@x.com", "other-secret", "Mallory")

        self.assertEqual(self.store.find("a@x.com"), first)
        self.assertEqual(self.store.count(), 1)

    def test_identity_not_normalized(self):
        """Test identities keep their case"""
        self.store.create("A@x.com", "secret1")
        self.assertIsNone(self.store.find("a@x.com"))
        self.store.create("a@x.com", "secret1")
        self.assertEqual(self.store.count(), 2)

    def test_ids_unique(self):
        """Test every user gets its own id"""
        ids = {self.store.create(f"u{i}@x.com", "secret1").user_id for i in range(20)}
        self.assertEqual(len(ids), 20)

    def test_public_projection(self):
        """Test public projection omits the secret"""
        record = self.store.create("a@x.com", "secret1")
        self.assertEqual(
            record.public(),
            {"id": record.user_id, "email": "a@x.com", "name": ""},
        )

    def test_find_returns_copy(self):
        """Test mutating a found record does not change the store"""
        self.store.create("a@x.com", "secret1")
        found = self.store.find("a@x.com")
        found.name = "changed"

        self.assertEqual(self.store.find("a@x.com").name, "")

    def test_update(self):
        """Test update replaces the record"""
        record = self.store.create("a@x.com", "secret1")
        record.last_login = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        self.store.update(record)

        self.assertEqual(self.store.find("a@x.com").last_login, record.last_login)

    def test_update_unknown_raises(self):
        """Test update of an unknown or mismatched record"""
        with self.assertRaises(UserNotFoundError):
            self.store.update(UserRecord("id-1", "ghost@x.com", "secret1"))

        record = self.store.create("a@x.com", "secret1")
        record.user_id = "someone-else"
        with self.assertRaises(UserNotFoundError):
            self.store.update(record)

    def test_file_format(self):
        """Test users.json is an array of [email, record] pairs"""
        record = self.store.create("a@x.com", "secret1", "Alice")

        with open(self.users_file) as f:
            data = json.load(f)

        self.assertEqual(data, [[
            "a@x.com",
            {
                "id": record.user_id,
                "email": "a@x.com",
                "name": "Alice",
                "password": "secret1",
                "lastLogin": None,
            },
        ]])

    def test_persist_reload_roundtrip(self):
        """Test reloading yields an identical mapping"""
        self.store.create("a@x.com", "secret1", "Alice")
        bob = self.store.create("b@x.com", "secret2")
        bob.last_login = datetime.now(timezone.utc)
        self.store.update(bob)

        reloaded = UserStore(self.users_file)

        self.assertEqual(reloaded.snapshot(), self.store.snapshot())
        self.assertEqual(list(reloaded.snapshot()), ["a@x.com", "b@x.com"])

    def test_load_zulu_timestamps(self):
        """Test ISO timestamps with a Z suffix are accepted"""
        with open(self.users_file, "w") as f:
            json.dump([[
                "a@x.com",
                {
                    "id": "id-1",
                    "email": "a@x.com",
                    "name": "",
                    "password": "secret1",
                    "lastLogin": "2026-01-02T03:04:05.000Z",
                },
            ]], f)

        record = UserStore(self.users_file).find("a@x.com")
        self.assertEqual(
            record.last_login,
            datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        )

    def test_corrupt_file_starts_empty(self):
        """Test corrupt users.json never raises"""
        with open(self.users_file, "w") as f:
            f.write("not json")
        self.assertEqual(UserStore(self.users_file).count(), 0)

        with open(self.users_file, "w") as f:
            json.dump({"a@x.com": {}}, f)
        self.assertEqual(UserStore(self.users_file).count(), 0)

        with open(self.users_file, "w") as f:
            json.dump([["a@x.com", {"email": "a@x.com"}]], f)
        self.assertEqual(UserStore(self.users_file).count(), 0)

        with open(self.users_file, "wb") as f:
            f.write(b'[["a@x.com", {"id": "\xff\xfe"}]]')
        self.assertEqual(UserStore(self.users_file).count(), 0)

    def test_mistyped_fields_start_empty(self):
        """Test records with wrongly typed fields are rejected"""
        valid = {"id": "1", "email": "a@x.com", "password": "p", "name": ""}
        for overrides in (
            {"lastLogin": 5},
            {"lastLogin": "yesterday"},
            {"id": 1},
            {"password": None},
            {"name": ["Alice"]},
        ):
            with self.subTest(overrides=overrides):
                with open(self.users_file, "w") as f:
                    json.dump([["a@x.com", {**valid, **overrides}]], f)
                self.assertEqual(UserStore(self.users_file).count(), 0)

    def test_key_must_match_record_email(self):
        """Test pairs whose key differs from the record email are rejected"""
        with open(self.users_file, "w") as f:
            json.dump([[
                "b@x.com",
                {"id": "1", "email": "a@x.com", "password": "p", "name": ""},
            ]], f)

        store = UserStore(self.users_file)
        self.assertIsNone(store.find("b@x.com"))
        self.assertEqual(store.count(), 0)

    def test_save_failure_not_fatal(self):
        """Test failed writes are logged and memory stays authoritative"""
        with mock.patch.object(
            self.store.store, "save", side_effect=JSONStoreIOError("disk full")
        ):
            with self.assertLogs("persistence.user_store", level="ERROR"):
                record = self.store.create("a@x.com", "secret1")

        self.assertEqual(self.store.find("a@x.com"), record)
        self.assertFalse(os.path.exists(self.users_file))

    def test_memory_only_store(self):
        """Test store without a file"""
        store = UserStore()
        store.create("a@x.com", "secret1")

        self.assertTrue(store.exists("a@x.com"))
        self.assertFalse(store.save())


class FakeDateClock:
    """Manually advanced UTC clock"""

    def __init__(self):
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


class TestTokenRegistry(unittest.TestCase):
    """Test suite for TokenRegistry"""

    def setUp(self):
        """Setup before each test"""
        self.clock = FakeDateClock()
        self.registry = TokenRegistry(clock=self.clock)
        self.expires_at = self.clock.now + timedelta(days=7)

    def test_register_and_lookup(self):
        """Test a registered token can be found"""
        self.registry.register("jti-1", "token-1", "user-1", "a@x.com", self.expires_at)

        record = self.registry.lookup("jti-1")
        self.assertEqual(record.user_id, "user-1")
        self.assertEqual(record.email, "a@x.com")
        self.assertNotEqual(record.token_hash, "token-1")

    def test_matches_exact_token_only(self):
        """Test a different token under the same id does not match"""
        self.registry.register("jti-1", "token-1", "user-1", "a@x.com", self.expires_at)

        self.assertTrue(self.registry.matches("jti-1", "token-1"))
        self.assertFalse(self.registry.matches("jti-1", "token-2"))
        self.assertFalse(self.registry.matches("jti-2", "token-1"))

    def test_expired_entry_dropped_on_lookup(self):
        """Test expiry is evaluated lazily at lookup"""
        self.registry.register("jti-1", "token-1", "user-1", "a@x.com", self.expires_at)
        self.clock.now = self.expires_at

        self.assertEqual(self.registry.count(), 1)
        self.assertIsNone(self.registry.lookup("jti-1"))
        self.assertEqual(self.registry.count(), 0)

    def test_revoke(self):
        """Test revoked token no longer matches"""
        self.registry.register("jti-1", "token-1", "user-1", "a@x.com", self.expires_at)
        self.registry.revoke("jti-1")

        self.assertFalse(self.registry.matches("jti-1", "token-1"))
        with self.assertRaises(TokenNotFoundError):
            self.registry.revoke("jti-1")

    def test_cleanup_expired(self):
        """Test sweep removes only expired entries"""
        self.registry.register("old", "token-1", "user-1", "a@x.com",
                               self.clock.now + timedelta(hours=1))
        self.registry.register("new", "token-2", "user-1", "a@x.com", self.expires_at)
        self.clock.now += timedelta(hours=2)

        self.assertEqual(self.registry.cleanup_expired(), 1)
        self.assertIsNone(self.registry.lookup("old"))
        self.assertIsNotNone(self.registry.lookup("new"))


if __name__ == "__main__":
    unittest.main(verbosity=2)
