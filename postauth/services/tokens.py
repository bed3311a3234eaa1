"""
Key-value storage for short-lived credential tokens.

Tokens are opaque serialized blobs with a per-entry expiry. The
:class:`TokenStore` wraps the Redis connection, and the repositories below
derive keys for each kind of token. Repositories never deserialize the blobs
they return; that is left to the caller, so that storage failures stay
distinct from format errors.
"""

import logging
from typing import Optional, Union

from flask import Flask, current_app
import fakeredis
import redis
import redis.cluster

from ..exceptions import NotFound, StoreFailure

logger = logging.getLogger(__name__)


class TokenStore(object):
    """
    Manages a connection to Redis.

    The StrictRedis instance is thread safe and connections are attached at
    the time a command is executed. This class provides a container for
    configuration and maps backend errors to :class:`.StoreFailure`.
    """

    def __init__(self, host: str, port: int, db: int, cluster: bool = False,
                 fake: bool = False) -> None:
        """Open the connection to Redis."""
        logger.debug('New Redis connection at %s, port %s', host, port)
        self.r: Union[redis.StrictRedis, redis.cluster.RedisCluster]
        if fake:
            self.r = fakeredis.FakeStrictRedis()
        elif cluster:
            self.r = redis.cluster.RedisCluster(host=host, port=port)
        else:
            self.r = redis.StrictRedis(host=host, port=port, db=db)

    def get(self, key: str) -> Optional[bytes]:
        """Get the value stored at ``key``, or ``None`` if there is none."""
        try:
            value: Optional[bytes] = self.r.get(key)
        except redis.exceptions.ConnectionError as e:
            raise StoreFailure(f'Connection failed: {e}') from e
        except redis.exceptions.RedisError as e:
            raise StoreFailure(f'Failed to get: {e}') from e
        return value

    def put(self, key: str, value: bytes, ttl: int) -> None:
        """Store ``value`` at ``key``, expiring after ``ttl`` seconds."""
        try:
            self.r.set(key, value, ex=ttl)
        except redis.exceptions.ConnectionError as e:
            raise StoreFailure(f'Connection failed: {e}') from e
        except redis.exceptions.RedisError as e:
            raise StoreFailure(f'Failed to put: {e}') from e

    def delete(self, key: str) -> int:
        """Delete ``key``, returning the number of entries removed."""
        try:
            count: int = self.r.delete(key)
        except redis.exceptions.ConnectionError as e:
            raise StoreFailure(f'Connection failed: {e}') from e
        except redis.exceptions.RedisError as e:
            raise StoreFailure(f'Failed to delete: {e}') from e
        return count

    @classmethod
    def init_app(cls, app: Flask) -> None:
        """Set default configuration parameters for an application instance."""
        app.config.setdefault('REDIS_HOST', 'localhost')
        app.config.setdefault('REDIS_PORT', '6379')
        app.config.setdefault('REDIS_DATABASE', '0')
        app.config.setdefault('REDIS_CLUSTER', '0')
        app.config.setdefault('REDIS_FAKE', False)
        app.config.setdefault('SIGNUP_TOKEN_TTL', '600')
        app.config.setdefault('PASSWORD_TOKEN_TTL', '3600')

    @classmethod
    def get_store(cls, app: Flask) -> 'TokenStore':
        """Create a new :class:`TokenStore` from application config."""
        config = app.config
        return cls(config.get('REDIS_HOST', 'localhost'),
                   int(config.get('REDIS_PORT', '6379')),
                   int(config.get('REDIS_DATABASE', '0')),
                   cluster=str(config.get('REDIS_CLUSTER', '0')) == '1',
                   fake=bool(config.get('REDIS_FAKE', False)))

    @classmethod
    def current_store(cls) -> 'TokenStore':
        """Get/create the :class:`TokenStore` for the current application."""
        app = current_app._get_current_object()     # type: ignore
        if 'postauth.tokens' not in app.extensions:
            app.extensions['postauth.tokens'] = cls.get_store(app)
        store: TokenStore = app.extensions['postauth.tokens']
        return store


class TokenRepository(object):
    """
    Finds, saves and deletes serialized tokens of one kind.

    Subclasses only decide how an identifier maps to a key in the store.
    """

    prefix = 'token'

    def __init__(self, store: TokenStore) -> None:
        self._store = store

    def key_for(self, identifier: object) -> str:
        """Get the store key for a token identifier."""
        return f'{self.prefix}:{identifier}'

    def find(self, identifier: object) -> bytes:
        """
        Get the serialized token stored for ``identifier``, undecoded.

        Raises
        ------
        :class:`.NotFound`
            There is no token, or it has expired.
        :class:`.StoreFailure`
            The backend could not be reached.

        """
        key = self.key_for(identifier)
        value = self._store.get(key)
        if value is None:
            logger.debug('No such token: %s', key)
            raise NotFound(identifier)
        return value

    def save(self, identifier: object, serialized: str, ttl: int) -> None:
        """Store a serialized token, replacing any previous one."""
        self._store.put(self.key_for(identifier), serialized.encode('utf-8'),
                        ttl)

    def delete(self, identifier: object) -> bool:
        """
        Delete the token stored for ``identifier``.

        Deleting a token that was already deleted raises :class:`.NotFound`,
        exactly as for one that never existed.
        """
        if self._store.delete(self.key_for(identifier)) < 1:
            raise NotFound(identifier)
        return True


class SignUpTokenRepository(TokenRepository):
    """Pending registrations, keyed by an opaque token key."""

    prefix = 'signup'


class PasswordTokenRepository(TokenRepository):
    """Pending password resets, one slot per user id."""

    prefix = 'password'
