"""Salted one-way hashing of user passwords."""

from typing import Optional
import secrets
from base64 import b64encode, b64decode
import binascii
import hashlib

SALT_LENGTH = 16


def _hash_salt_and_password(salt: bytes, password: str) -> bytes:
    return hashlib.sha256(salt + b'-' + password.encode('utf-8')).digest()


def hash_password(password: str, salt: Optional[bytes] = None) -> str:
    """
    Generate a secure hash of a password.

    The salt is stored in front of the digest, so that the same salt can be
    used again to verify a submitted password. A new random salt is generated
    when none is given.
    """
    if salt is None:
        salt = secrets.token_bytes(SALT_LENGTH)
    hashed = _hash_salt_and_password(salt, password)
    return b64encode(salt + hashed).decode('ascii')


def check_password(password: str, encrypted: str) -> bool:
    """
    Check a password against an encrypted hash.

    The submitted password is hashed under the salt of ``encrypted`` and the
    two digests are compared; the stored hash is never reversed.
    """
    try:
        salt = b64decode(encrypted)[:SALT_LENGTH]
    except (binascii.Error, ValueError):
        return False
    return secrets.compare_digest(hash_password(password, salt).encode('ascii'),
                                  encrypted.encode('utf-8'))
