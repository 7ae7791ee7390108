"""Unit tests for the credential and session service."""

import json
import unittest

from campusbook.auth import AuthService, AuthUser, create_auth_service
from campusbook.auth.passwords import hash_password, verify_password
from campusbook.common.exceptions import (
    AlreadyExistsError,
    EmailAlreadyInUseError,
    UserNotFoundError,
    WrongPasswordError,
)
from campusbook.common.settings import Settings
from campusbook.storage import MemoryStorage


class TestAuthService(unittest.IsolatedAsyncioTestCase):
    """Test cases for sign-up, sign-in and session persistence."""

    def setUp(self):
        self.shared: dict[str, str] = {}
        self.storage = MemoryStorage(shared=self.shared)
        self.auth = AuthService(self.storage)
        self.email = "ada@example.com"
        self.password = "correct-horse"

    async def test_create_user_signs_in_and_stores_hash(self):
        user = await self.auth.create_user_with_email_and_password(self.email, self.password)

        self.assertEqual(self.auth.current_user, user)
        self.assertEqual(user.email, self.email)

        stored = json.loads(self.storage.get_item("mockUsers"))
        self.assertEqual(len(stored), 1)
        self.assertEqual(stored[0]["uid"], user.uid)
        self.assertNotEqual(stored[0]["password"], self.password)
        self.assertNotIn(self.password, self.storage.get_item("mockUsers"))

    async def test_duplicate_email_is_rejected(self):
        await self.auth.create_user_with_email_and_password(self.email, self.password)

        with self.assertRaises(EmailAlreadyInUseError) as ctx:
            await self.auth.create_user_with_email_and_password("ADA@example.com ", "other-pass")

        self.assertIsInstance(ctx.exception, AlreadyExistsError)
        self.assertEqual(ctx.exception.error_code, "auth/email-already-in-use")
        self.assertEqual(len(self.auth.load_credentials()), 1)

    async def test_sign_in_success(self):
        created = await self.auth.create_user_with_email_and_password(self.email, self.password)
        await self.auth.sign_out()

        user = await self.auth.sign_in_with_email_and_password(self.email.upper(), self.password)

        self.assertEqual(user.uid, created.uid)
        self.assertEqual(self.auth.current_user, user)

    async def test_sign_in_unknown_email(self):
        with self.assertRaises(UserNotFoundError):
            await self.auth.sign_in_with_email_and_password("nobody@example.com", "whatever")
        self.assertIsNone(self.auth.current_user)

    async def test_sign_in_wrong_password(self):
        await self.auth.create_user_with_email_and_password(self.email, self.password)
        await self.auth.sign_out()

        with self.assertRaises(WrongPasswordError):
            await self.auth.sign_in_with_email_and_password(self.email, "wrong-password")
        self.assertIsNone(self.auth.current_user)

    async def test_session_is_restored_by_new_instance(self):
        user = await self.auth.create_user_with_email_and_password(self.email, self.password)

        reloaded = AuthService(MemoryStorage(shared=self.shared))

        self.assertEqual(reloaded.current_user, user)

    async def test_sign_out_clears_persisted_session(self):
        await self.auth.create_user_with_email_and_password(self.email, self.password)

        await self.auth.sign_out()

        self.assertIsNone(self.auth.current_user)
        self.assertIsNone(self.storage.get_item("mockCurrentUser"))
        self.assertIsNone(AuthService(MemoryStorage(shared=self.shared)).current_user)

    async def test_listeners_receive_current_state_and_changes(self):
        seen = []
        unsubscribe = self.auth.on_auth_state_changed(seen.append)

        user = await self.auth.create_user_with_email_and_password(self.email, self.password)
        await self.auth.sign_out()
        unsubscribe()
        await self.auth.sign_in_with_email_and_password(self.email, self.password)

        self.assertEqual(seen, [None, user, None])

    async def test_failing_listener_does_not_block_others(self):
        seen = []

        def broken(user):
            raise RuntimeError("listener bug")

        self.auth.on_auth_state_changed(lambda user: None)
        self.auth._listeners.append(broken)
        self.auth.on_auth_state_changed(seen.append)

        user = await self.auth.create_user_with_email_and_password(self.email, self.password)

        self.assertEqual(seen, [None, user])

    async def test_delete_user_removes_credentials_and_session(self):
        user = await self.auth.create_user_with_email_and_password(self.email, self.password)

        self.assertTrue(await self.auth.delete_user(user.uid))
        self.assertFalse(await self.auth.delete_user(user.uid))
        self.assertIsNone(self.auth.current_user)
        with self.assertRaises(UserNotFoundError):
            await self.auth.sign_in_with_email_and_password(self.email, self.password)

    async def test_ensure_credentials_keeps_existing_password(self):
        self.assertTrue(await self.auth.ensure_credentials("admin-1", "admin@example.com", "first-pass"))
        self.assertFalse(await self.auth.ensure_credentials("admin-1", "admin@example.com", "second-pass"))

        user = await self.auth.sign_in_with_email_and_password("admin@example.com", "first-pass")
        self.assertEqual(user.uid, "admin-1")

    def test_corrupt_credential_list_is_reset(self):
        for blob in ("not json", '{"email": "x"}'):
            self.storage.set_item("mockUsers", blob)

            self.assertEqual(self.auth.load_credentials(), [])
            self.assertEqual(self.storage.get_item("mockUsers"), "[]")

    def test_malformed_entries_are_skipped(self):
        good = {"uid": "u1", "email": "a@example.com", "password": hash_password("secret1")}
        self.storage.set_item("mockUsers", json.dumps([good, {"email": "missing-uid"}, "junk"]))

        credentials = self.auth.load_credentials()

        self.assertEqual([c.uid for c in credentials], ["u1"])

    def test_unreadable_session_is_dropped(self):
        self.storage.set_item("mockCurrentUser", "{broken")

        auth = AuthService(self.storage)

        self.assertIsNone(auth.current_user)
        self.assertIsNone(self.storage.get_item("mockCurrentUser"))

    def test_auth_user_is_immutable(self):
        user = AuthUser(uid="u1", email="a@example.com")
        with self.assertRaises(Exception):
            user.uid = "u2"


class TestCreateAuthService(unittest.IsolatedAsyncioTestCase):

    async def test_uses_configured_keys(self):
        storage = MemoryStorage()
        settings = Settings(credentials_key="creds", current_user_key="session")
        auth = create_auth_service(storage, settings)

        await auth.create_user_with_email_and_password("ada@example.com", "secret1")

        self.assertIsNotNone(storage.get_item("creds"))
        self.assertIsNotNone(storage.get_item("session"))
        self.assertIsNone(storage.get_item("mockUsers"))


class TestPasswords(unittest.TestCase):

    def test_hash_roundtrip(self):
        hashed = hash_password("secret1")
        self.assertTrue(hashed.startswith("$2b$"))
        self.assertTrue(verify_password("secret1", hashed))
        self.assertFalse(verify_password("secret2", hashed))

    def test_hashes_are_salted(self):
        self.assertNotEqual(hash_password("secret1"), hash_password("secret1"))

    def test_malformed_hash_never_matches(self):
        self.assertFalse(verify_password("secret1", "secret1"))
        self.assertFalse(verify_password("secret1", "md5$1$00$abc"))
        self.assertFalse(verify_password("secret1", "$2b$12$not-a-real-bcrypt-hash"))

    def test_long_passwords_are_not_truncated(self):
        base = "p" * 80
        hashed = hash_password(base + "a")
        self.assertTrue(verify_password(base + "a", hashed))
        self.assertFalse(verify_password(base + "b", hashed))


if __name__ == "__main__":
    unittest.main()
