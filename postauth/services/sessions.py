"""
Integration with the signed session cookie.

The session blob holds just enough to identify the logged-in user; it is
signed with the application ``SECRET_KEY`` by Flask.
"""

import logging
from typing import Optional

from flask import session

from .. import domain

logger = logging.getLogger(__name__)

SESSION_KEYS = ('user_id', 'user_email', 'user_name')


def get_session() -> Optional[domain.UserSession]:
    """Get the user session for the current request, if there is one."""
    try:
        return domain.UserSession(**{key: session[key]
                                     for key in SESSION_KEYS})
    except KeyError:
        return None


def set_session(user_id: int, user_email: str, user_name: str) -> bool:
    """Write the user session into the session cookie."""
    try:
        session['user_id'] = user_id
        session['user_email'] = user_email
        session['user_name'] = user_name
    except RuntimeError as e:   # No secret key, or no request context.
        logger.error('Could not set session: %s', e)
        return False
    return True


def unset_session() -> None:
    """Remove the user session from the session cookie."""
    for key in SESSION_KEYS:
        session.pop(key, None)
