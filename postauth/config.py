"""Flask configuration."""
import secrets
import os

#################### Token store ####################
REDIS_HOST = os.environ.get('REDIS_HOST', 'localhost')
REDIS_PORT = os.environ.get('REDIS_PORT', '6379')
REDIS_DATABASE = os.environ.get('REDIS_DATABASE', '0')
REDIS_CLUSTER = os.environ.get('REDIS_CLUSTER', '0')

REDIS_FAKE = bool(int(os.environ.get('REDIS_FAKE', '0')))
"""Use the FakeRedis library instead of a redis service.

Useful for testing, dev, beta."""

SIGNUP_TOKEN_TTL = os.environ.get('SIGNUP_TOKEN_TTL', '600')
"""Seconds that a pending registration may wait for its pin."""

SIGNUP_PIN_LENGTH = os.environ.get('SIGNUP_PIN_LENGTH', '6')

PASSWORD_TOKEN_TTL = os.environ.get('PASSWORD_TOKEN_TTL', '3600')
"""Seconds that a temporary password remains valid."""


#################### Database ####################
SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI',
                                         'sqlite:///postauth.db')
SQLALCHEMY_TRACK_MODIFICATIONS = False

CREATE_DB = bool(int(os.environ.get('CREATE_DB', 0)))


#################### Mail ####################
MAIL_HOST = os.environ.get('MAIL_HOST', '')
"""SMTP host used to deliver pins and temporary passwords.

If not set, messages are not sent."""

MAIL_PORT = os.environ.get('MAIL_PORT', '25')
MAIL_SENDER = os.environ.get('MAIL_SENDER', 'no-reply@localhost')


#################### Minor configs ##############################
SECRET_KEY = os.environ.get('SECRET_KEY', secrets.token_urlsafe(16))
"""Sets the `Flask` secret key used to sign the session cookie."""

SESSION_COOKIE_HTTPONLY = True

LOGLEVEL = int(os.environ.get('LOGLEVEL', 20))
