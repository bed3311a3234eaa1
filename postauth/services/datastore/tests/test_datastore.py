"""Tests for :mod:`postauth.services.datastore`."""

from unittest import TestCase, mock

from sqlalchemy.exc import OperationalError

from ....domain import UserKey
from ....exceptions import NotFound, QueryExecutionFailure, UserNotFound
from ... import datastore
from ..models import DBUser, DBUserKey
from .util import temporary_db


class TestUserRepository(TestCase):
    """CRUD over user rows."""

    def test_create_and_find(self):
        """A created user can be found by e-mail and by id."""
        with temporary_db() as session:
            users = datastore.UserRepository(session)
            self.assertTrue(users.create('park', 'park@email.com', 'hash',
                                         'http://avatar'))
            db_user = users.find_by_email('park@email.com')
            self.assertEqual(db_user.name, 'park')
            self.assertEqual(db_user.password, 'hash')
            self.assertIsNotNone(db_user.created_at)
            self.assertEqual(users.find_by_id(db_user.id).email,
                             'park@email.com')

    def test_find_missing(self):
        """Missing users raise distinct errors by id and by e-mail."""
        with temporary_db() as session:
            users = datastore.UserRepository(session)
            with self.assertRaises(NotFound):
                users.find_by_id(42)
            with self.assertRaises(UserNotFound) as ctx:
                users.find_by_email('nobody@email.com')
            self.assertEqual(ctx.exception.email, 'nobody@email.com')

    def test_email_is_unique(self):
        """A second user with the same e-mail is rejected by the database."""
        with temporary_db() as session:
            users = datastore.UserRepository(session)
            users.create('park', 'park@email.com', 'hash', '')
            with self.assertRaises(QueryExecutionFailure):
                users.create('kim', 'park@email.com', 'hash', '')
            self.assertEqual(len(users.find_all()), 1)

    def test_find_all(self):
        """All users are returned, newest first."""
        with temporary_db() as session:
            users = datastore.UserRepository(session)
            users.create('first', 'first@email.com', 'hash', '')
            users.create('second', 'second@email.com', 'hash', '')
            self.assertEqual([u.name for u in users.find_all()],
                             ['second', 'first'])

    def test_partial_update(self):
        """Only the fields that are passed are changed."""
        with temporary_db() as session:
            users = datastore.UserRepository(session)
            users.create('park', 'park@email.com', 'hash', 'a')
            user_id = users.find_by_email('park@email.com').id
            self.assertTrue(users.update(user_id, name='lee'))
            db_user = users.find_by_id(user_id)
            self.assertEqual(db_user.name, 'lee')
            self.assertEqual(db_user.password, 'hash')
            self.assertEqual(db_user.avatar_url, 'a')

    def test_update_missing(self):
        """Updating no rows is not a success."""
        with temporary_db() as session:
            users = datastore.UserRepository(session)
            with self.assertRaises(NotFound):
                users.update(42, name='lee')

    def test_delete(self):
        """Deleting a user removes its key bindings too."""
        with temporary_db() as session:
            users = datastore.UserRepository(session)
            keys = datastore.UserKeyRepository(session)
            users.create('park', 'park@email.com', 'hash', '')
            user_id = users.find_by_email('park@email.com').id
            keys.create(user_id, 'pubkey1')

            self.assertTrue(users.delete(user_id))
            self.assertEqual(session.query(DBUserKey).count(), 0)
            with self.assertRaises(NotFound):
                users.delete(user_id)

    def test_database_failure(self):
        """Driver errors are raised as :class:`.QueryExecutionFailure`."""
        with temporary_db() as session:
            users = datastore.UserRepository(session)
            with mock.patch.object(session, 'execute') as mock_execute:
                mock_execute.side_effect = OperationalError('q', {}, 'gone')
                with self.assertRaises(QueryExecutionFailure):
                    users.find_by_email('park@email.com')


class TestUserKeyRepository(TestCase):
    """Bindings between users and public keys."""

    def test_create(self):
        """A key is bound to the user."""
        with temporary_db() as session:
            users = datastore.UserRepository(session)
            keys = datastore.UserKeyRepository(session)
            users.create('park', 'park@email.com', 'hash', '')
            user_id = users.find_by_email('park@email.com').id

            self.assertTrue(keys.create(user_id, 'pubkey1'))
            bindings = keys.find_by_user_id(user_id)
            self.assertEqual(bindings,
                             [UserKey(user_id=user_id, public_key='pubkey1')])
            self.assertEqual(session.query(DBUser).count(), 1)
