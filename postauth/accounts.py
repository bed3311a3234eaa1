"""
Provides the account workflows: registration, login and password reset.

Registration and password reset are two-step protocols. A request step
issues a short-lived token into the token store and delivers a secret (a pin
or a temporary password) out of band; a completion step matches the secret
against the token, consumes the token, and writes the user record.

The ordering of those steps bounds the inconsistency windows between the two
stores, since neither store participates in the other's transactions:

- Registration consumes the token *before* creating the user, so that a
  token cannot be replayed once its user exists. A failure after the token
  is deleted leaves no user (or a user with no key), and is not rolled back.
- Password reset updates the user *before* deleting the token. A failure to
  delete leaves the token usable until it expires, and is not an error.

A token is only ever deleted after its secret matched. A wrong pin or
temporary password leaves it in place so that the user may try again.
"""

import json
import logging
import secrets
import uuid
from typing import Any, List, Optional, Type

from flask import current_app

from . import domain, passwords
from .exceptions import InvalidArgument, InvalidFormat, NotFound, \
    ServiceError, Unauthorized, UserNotFound
from .mail import MailSession
from .services import datastore
from .services.datastore import UserKeyRepository, UserRepository
from .services.datastore.models import DBUser
from .services.tokens import PasswordTokenRepository, \
    SignUpTokenRepository, TokenStore

logger = logging.getLogger(__name__)

DEFAULT_SIGNUP_TOKEN_TTL = 600
DEFAULT_PASSWORD_TOKEN_TTL = 3600
DEFAULT_PIN_LENGTH = 6


def _deserialize(cls: Type[Any], serialized: bytes) -> Any:
    """Load a token of type ``cls``, or raise :class:`.InvalidFormat`."""
    try:
        data = json.loads(serialized.decode('utf-8'))
        token = domain.from_dict(cls, data)
    except (ValueError, TypeError, RecursionError) as e:
        raise InvalidFormat(f'Stored token is not a {cls.__name__}') from e
    if not all(isinstance(value, str) for value in token):
        raise InvalidFormat(f'Stored token is not a {cls.__name__}')
    return token


def _serialize(token: tuple) -> str:
    return json.dumps(domain.to_dict(token))


def _is_blank(value: Optional[str]) -> bool:
    return not isinstance(value, str) or not value.strip()


def _generate_pin(length: int) -> str:
    return ''.join(str(secrets.randbelow(10)) for _ in range(length))


def to_user(db_user: DBUser) -> domain.User:
    """Project a user row into a :class:`.domain.User`."""
    return domain.User(
        user_id=db_user.id,
        name=db_user.name,
        email=db_user.email,
        avatar_url=db_user.avatar_url,
        created_at=db_user.created_at,
        updated_at=db_user.updated_at
    )


class AccountService(object):
    """
    Orchestrates the token store and the relational store.

    The stores are passed in at construction; the service keeps no other
    state between calls.
    """

    def __init__(self, users: UserRepository, user_keys: UserKeyRepository,
                 signup_tokens: SignUpTokenRepository,
                 password_tokens: PasswordTokenRepository,
                 mailer: Optional[MailSession] = None,
                 signup_ttl: int = DEFAULT_SIGNUP_TOKEN_TTL,
                 password_ttl: int = DEFAULT_PASSWORD_TOKEN_TTL,
                 pin_length: int = DEFAULT_PIN_LENGTH) -> None:
        self.users = users
        self.user_keys = user_keys
        self.signup_tokens = signup_tokens
        self.password_tokens = password_tokens
        self.mailer = mailer if mailer is not None else MailSession()
        self.signup_ttl = signup_ttl
        self.password_ttl = password_ttl
        self.pin_length = pin_length

    def get_one(self, user_id: int) -> domain.User:
        """Find a user by id."""
        return to_user(self.users.find_by_id(user_id))

    def get_list(self) -> List[domain.User]:
        """Find all users, newest first."""
        return [to_user(db_user) for db_user in self.users.find_all()]

    def request_sign_up(self, name: str, email: str, password: str,
                        avatar_url: str = '') -> str:
        """
        Start a registration.

        Stores a :class:`.domain.SignUpToken` under a new token key and mails
        its pin to ``email``.

        Returns
        -------
        str
            The token key, to be passed back to :meth:`create` with the pin.

        """
        if _is_blank(name) or _is_blank(email) or _is_blank(password):
            raise InvalidArgument('name, email and password are required')
        try:
            self.users.find_by_email(email)
        except UserNotFound:
            pass
        else:
            raise InvalidArgument('email is already in use')

        token_key = uuid.uuid4().hex
        token = domain.SignUpToken(
            name=name,
            email=email,
            password=password,
            avatar_url=avatar_url or '',
            pin=_generate_pin(self.pin_length)
        )
        self.signup_tokens.save(token_key, _serialize(token), self.signup_ttl)
        logger.info('Issued sign-up token %s', token_key)
        self.mailer.send_pin(email, token.pin)
        return token_key

    def create(self, user_public_key: str, token_key: str,
               token_pin: str) -> bool:
        """
        Complete a registration and create the user.

        1. Finds the serialized token by ``token_key``.
        2. Deserializes it and compares its pin with ``token_pin``.
        3. If the pins are equal, deletes the token and creates the user,
           then binds ``user_public_key`` to the new user.

        Raises
        ------
        :class:`.NotFound`
            No such token, or it was already consumed.
        :class:`.InvalidFormat`
            The stored token is corrupt.
        :class:`.Unauthorized`
            The pin does not match. The token is left in place.

        """
        if _is_blank(user_public_key):
            raise InvalidArgument('user_public_key is required')
        token: domain.SignUpToken = _deserialize(
            domain.SignUpToken, self.signup_tokens.find(token_key)
        )
        if token_pin != token.pin:
            logger.info('Wrong pin for sign-up token %s', token_key)
            raise Unauthorized('pin does not match')

        self.signup_tokens.delete(token_key)
        logger.info('Consumed sign-up token %s', token_key)

        self.users.create(token.name, token.email,
                          passwords.hash_password(token.password),
                          token.avatar_url)
        db_user = self.users.find_by_email(token.email)
        try:
            return self.user_keys.create(db_user.id, user_public_key)
        except ServiceError:
            logger.warning('User %s was created without a key', db_user.id)
            raise

    def delete(self, user_id: int) -> bool:
        """Delete a user."""
        return self.users.delete(user_id)

    def update(self, user_id: int, name: Optional[str] = None,
               password: Optional[str] = None,
               avatar_url: Optional[str] = None) -> bool:
        """Update the name, password and avatar of a user, where given."""
        fields = (name, password, avatar_url)
        if all(field is None for field in fields):
            raise InvalidArgument('nothing to update')
        if any(field is not None and _is_blank(field) for field in fields):
            raise InvalidArgument('fields may not be empty')

        hashed_password = None
        if password is not None:
            hashed_password = passwords.hash_password(password)
        return self.users.update(user_id, name=name, password=hashed_password,
                                 avatar_url=avatar_url)

    def login(self, email: str, password: str) -> domain.UserSession:
        """
        Check a user's password.

        Raises
        ------
        :class:`.UserNotFound`
            No user has this e-mail address.
        :class:`.Unauthorized`
            The password is not correct.

        """
        if _is_blank(email) or not isinstance(password, str):
            raise InvalidArgument('email and password are required')
        db_user = self.users.find_by_email(email)
        if not passwords.check_password(password, db_user.password):
            logger.info('Wrong password for user %s', db_user.id)
            raise Unauthorized('password does not match')
        return domain.UserSession(user_id=db_user.id,
                                  user_email=db_user.email,
                                  user_name=db_user.name)

    def refresh_session(self, user_id: int) -> domain.UserSession:
        """Reload session data for a user whose profile may have changed."""
        db_user = self.users.find_by_id(user_id)
        return domain.UserSession(user_id=db_user.id,
                                  user_email=db_user.email,
                                  user_name=db_user.name)

    def request_password_reset(self, email: str) -> str:
        """
        Start a password reset.

        Stores a :class:`.domain.PasswordToken` under the user's id, replacing
        any reset already pending, and mails the temporary password.

        Returns
        -------
        str
            The id of the reset request.

        """
        db_user = self.users.find_by_email(email)
        token = domain.PasswordToken(id=uuid.uuid4().hex,
                                     password=secrets.token_urlsafe(12))
        self.password_tokens.save(db_user.id, _serialize(token),
                                  self.password_ttl)
        logger.info('Issued password token %s for user %s', token.id,
                    db_user.id)
        self.mailer.send_temporary_password(email, token.id, token.password)
        return token.id

    def reset_password(self, email: str, token_id: str,
                       temporary_password: str, new_password: str) -> bool:
        """
        Complete a password reset.

        A token that is missing, or that does not match by id or by temporary
        password, is reported as :class:`.UserNotFound`, exactly as an
        unknown e-mail.
        """
        if _is_blank(new_password):
            raise InvalidArgument('new_password is required')
        db_user = self.users.find_by_email(email)
        user_id = db_user.id
        try:
            serialized = self.password_tokens.find(user_id)
        except NotFound as e:
            logger.info('No password token for user %s', user_id)
            raise UserNotFound(email) from e
        token: domain.PasswordToken = _deserialize(domain.PasswordToken,
                                                   serialized)
        if not (token.id == token_id
                and token.password == temporary_password):
            logger.info('Password token mismatch for user %s', user_id)
            raise UserNotFound(email)

        self.users.update(user_id,
                          password=passwords.hash_password(new_password))
        logger.info('Reset password for user %s', user_id)
        try:
            self.password_tokens.delete(user_id)
        except ServiceError as e:
            logger.warning('Could not delete password token for user %s: %s',
                           user_id, e)
        return True


def current_service() -> AccountService:
    """Get an :class:`AccountService` bound to the current application."""
    config = current_app.config
    store = TokenStore.current_store()
    session = datastore.current_session()
    return AccountService(
        UserRepository(session),
        UserKeyRepository(session),
        SignUpTokenRepository(store),
        PasswordTokenRepository(store),
        mailer=MailSession.current_session(),
        signup_ttl=int(config.get('SIGNUP_TOKEN_TTL',
                                  DEFAULT_SIGNUP_TOKEN_TTL)),
        password_ttl=int(config.get('PASSWORD_TOKEN_TTL',
                                    DEFAULT_PASSWORD_TOKEN_TTL)),
        pin_length=int(config.get('SIGNUP_PIN_LENGTH', DEFAULT_PIN_LENGTH))
    )
