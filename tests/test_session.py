"""
Tests for the auth session and its on-disk credential storage.

Run with:
    python -m pytest tests/test_session.py
"""
import shutil
import tempfile
import unittest
from unittest.mock import MagicMock

from game_vault.auth import AuthEvent, AuthSession
from game_vault.storage import Storage


class TestStorage(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.storage = Storage(self.tmp)

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def test_missing_file_means_logged_out(self):
        self.assertIsNone(self.storage.load_token())

    def test_save_load_clear(self):
        self.storage.save_token("abc")
        self.assertEqual(Storage(self.tmp).load_token(), "abc")
        self.storage.clear_token()
        self.assertIsNone(self.storage.load_token())
        self.storage.clear_token()

    def test_corrupted_file_reads_as_logged_out(self):
        self.storage.credential_path.write_text("{not json", encoding="utf-8")
        self.assertIsNone(self.storage.load_token())


class TestAuthSession(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.storage = Storage(self.tmp)

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def test_token_survives_restart(self):
        AuthSession(self.storage).login("jwt")
        session = AuthSession(Storage(self.tmp))
        self.assertEqual(session.get_credential(), "jwt")
        self.assertTrue(session.is_authenticated)

    def test_logout_clears_token(self):
        session = AuthSession(self.storage)
        session.login("jwt")
        session.logout()
        self.assertIsNone(session.get_credential())
        self.assertIsNone(AuthSession(self.storage).get_credential())

    def test_in_memory_session(self):
        session = AuthSession()
        self.assertFalse(session.is_authenticated)
        session.login("jwt")
        self.assertEqual(session.get_credential(), "jwt")

    def test_empty_token_rejected(self):
        with self.assertRaises(ValueError):
            AuthSession().login("")

    def test_listeners_get_their_event_only(self):
        session = AuthSession()
        on_login, on_logout = MagicMock(), MagicMock()
        session.subscribe(AuthEvent.LOGIN, on_login)
        session.subscribe(AuthEvent.LOGOUT, on_logout)

        session.login("jwt")
        on_login.assert_called_once_with(AuthEvent.LOGIN)
        on_logout.assert_not_called()

        session.logout()
        on_logout.assert_called_once_with(AuthEvent.LOGOUT)

    def test_closed_subscription_stops_notifications(self):
        session = AuthSession()
        listener = MagicMock()
        with session.subscribe("login", listener) as subscription:
            session.login("a")
        self.assertFalse(subscription.active)
        session.login("b")
        listener.assert_called_once()

    def test_listener_may_unsubscribe_during_emit(self):
        session = AuthSession()
        calls = []
        first = session.subscribe(AuthEvent.LOGOUT, lambda e: (calls.append("first"), first.close()))
        session.subscribe(AuthEvent.LOGOUT, lambda e: calls.append("second"))
        session.logout()
        session.logout()
        self.assertEqual(calls, ["first", "second", "second"])


if __name__ == '__main__':
    unittest.main()
