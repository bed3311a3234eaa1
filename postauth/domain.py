"""Defines account and credential-token concepts for the accounts service."""

from typing import Any, NamedTuple, Optional
from datetime import datetime
import dateutil.parser


class User(NamedTuple):
    """
    Read-only projection of a user account.

    This is the only shape in which user data leaves the service; it never
    carries the password hash.
    """

    user_id: int
    """Unique identifier, generated by the relational store."""

    name: str
    """Display name."""

    email: str
    """Unique e-mail address used to log in."""

    avatar_url: str = ''
    """URL of the user's profile picture."""

    created_at: Optional[datetime] = None
    """When the account was created."""

    updated_at: Optional[datetime] = None
    """When the account was last modified."""


class UserSession(NamedTuple):
    """The minimal user data materialized into a session."""

    user_id: int
    user_email: str
    user_name: str


class UserKey(NamedTuple):
    """Binds a client-supplied public key to a user account."""

    user_id: int
    public_key: str


class SignUpToken(NamedTuple):
    """
    A pending registration, waiting for pin confirmation.

    Stored in the token store under an opaque token key, and consumed exactly
    once when the user confirms the pin that was delivered out of band.
    """

    name: str
    email: str

    password: str
    """Password as entered; it is hashed only when the user is created."""

    avatar_url: str

    pin: str
    """Short numeric code sent to :attr:`email`."""


class PasswordToken(NamedTuple):
    """
    A pending password reset.

    Stored in the token store under the owning user's id, so that there is at
    most one outstanding reset per user.
    """

    id: str
    """Identifier of the reset request, distinct from the user id."""

    password: str
    """Temporary one-time password, compared as an opaque shared secret."""


def to_dict(obj: tuple) -> dict:
    """
    Generate a dict representation of a NamedTuple instance.

    Child NamedTuple instances are cast recursively, and datetimes are
    rendered as ISO-8601 strings.
    """
    if not hasattr(obj, '_asdict'):  # NamedTuple-generated classes have this.
        return {}
    data = obj._asdict()  # type: ignore

    def _cast(value: Any) -> Any:
        if hasattr(value, '_asdict'):
            return to_dict(value)
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, list):
            return [_cast(v) for v in value]
        return value

    return {key: _cast(value) for key, value in data.items()}


def from_dict(cls: type, data: dict) -> Any:
    """
    Generate a NamedTuple instance from a dict.

    Fields annotated as datetimes are parsed from ISO-8601 strings. Keys that
    are not fields of ``cls``, or missing required fields, raise
    :class:`TypeError`.
    """
    data = dict(data)
    for field, field_type in cls.__annotations__.items():   # type: ignore
        value = data.get(field)
        if isinstance(value, str) and field_type in (datetime,
                                                     Optional[datetime]):
            data[field] = dateutil.parser.parse(value)
    return cls(**data)
