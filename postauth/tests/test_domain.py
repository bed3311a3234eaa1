"""Tests for :mod:`postauth.domain`."""

from unittest import TestCase
from datetime import datetime
from pytz import UTC

from .. import domain


class TestDictCoercion(TestCase):
    """Tests for :func:`domain.from_dict` and :func:`domain.to_dict`."""

    def test_token(self):
        """A token survives a trip through a dict."""
        token = domain.SignUpToken(name='park', email='park@email.com',
                                   password='x', avatar_url='a', pin='0000')
        self.assertEqual(token,
                         domain.from_dict(domain.SignUpToken,
                                          domain.to_dict(token)))

    def test_user_with_datetime(self):
        """Datetimes are rendered as ISO-8601 and parsed back."""
        user = domain.User(user_id=1, name='park', email='park@email.com',
                           created_at=datetime.now(tz=UTC))
        data = domain.to_dict(user)
        self.assertIsInstance(data['created_at'], str)
        self.assertIsNone(data['updated_at'])
        self.assertEqual(user, domain.from_dict(domain.User, data))

    def test_missing_field(self):
        """A dict lacking a required field is rejected."""
        with self.assertRaises(TypeError):
            domain.from_dict(domain.PasswordToken, {'id': 'rst1'})

    def test_unknown_field(self):
        """A dict with unexpected fields is rejected."""
        with self.assertRaises(TypeError):
            domain.from_dict(domain.PasswordToken,
                             {'id': 'rst1', 'password': 'tmpPW', 'pin': '1'})

    def test_not_a_namedtuple(self):
        """Other objects have no dict representation."""
        self.assertEqual(domain.to_dict(('foo',)), {})
