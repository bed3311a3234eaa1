"""Tests for :mod:`postauth.services.sessions`."""

from unittest import TestCase

from flask import Flask

from ... import domain
from .. import sessions


class TestSessionCookie(TestCase):
    """The user session lives in the signed session cookie."""

    def setUp(self):
        self.app = Flask('foo')
        self.app.config['SECRET_KEY'] = 'foosecret'

    def test_get_without_session(self):
        """No session has been set."""
        with self.app.test_request_context():
            self.assertIsNone(sessions.get_session())

    def test_set_get_unset(self):
        """A session can be set, read back and unset."""
        with self.app.test_request_context():
            self.assertTrue(sessions.set_session(1, 'park@email.com', 'park'))
            self.assertEqual(
                sessions.get_session(),
                domain.UserSession(user_id=1, user_email='park@email.com',
                                   user_name='park')
            )
            sessions.unset_session()
            self.assertIsNone(sessions.get_session())

    def test_set_without_secret(self):
        """The session cannot be signed without a secret key."""
        app = Flask('bar')
        with app.test_request_context():
            self.assertFalse(sessions.set_session(1, 'park@email.com',
                                                  'park'))
