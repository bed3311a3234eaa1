"""
Relational storage of user accounts and their public keys.

Every mutation reports how many rows it affected: an insert that affects no
row is a :class:`.QueryExecutionFailure`, and an update or delete that
affects no row is a :class:`.NotFound`.
"""

import logging
from datetime import datetime
from typing import List, Optional

from pytz import UTC
from sqlalchemy import delete, insert, select, update
from sqlalchemy.orm import Session

from ...domain import UserKey
from ...exceptions import NotFound, QueryExecutionFailure, UserNotFound
from . import util
from .models import DBUser, DBUserKey

logger = logging.getLogger(__name__)

init_app = util.init_app
create_all = util.create_all
drop_all = util.drop_all
current_session = util.current_session
transaction = util.transaction


class UserRepository(object):
    """CRUD over user accounts."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_by_id(self, user_id: int) -> DBUser:
        """Load a user by id, or raise :class:`.NotFound`."""
        with transaction(self._session) as session:
            db_user: Optional[DBUser] = session.get(DBUser, user_id)
        if db_user is None:
            raise NotFound(user_id)
        return db_user

    def find_by_email(self, email: str) -> DBUser:
        """Load a user by e-mail address, or raise :class:`.UserNotFound`."""
        with transaction(self._session) as session:
            db_user: Optional[DBUser] = session.execute(
                select(DBUser).where(DBUser.email == email)
            ).scalar_one_or_none()
        if db_user is None:
            raise UserNotFound(email)
        return db_user

    def find_all(self) -> List[DBUser]:
        """Load all users, newest first."""
        with transaction(self._session) as session:
            return list(session.execute(
                select(DBUser).order_by(DBUser.created_at.desc(),
                                        DBUser.id.desc())
            ).scalars())

    def create(self, name: str, email: str, password: str,
               avatar_url: str) -> bool:
        """
        Insert a new user.

        ``password`` must already be hashed.
        """
        with transaction(self._session) as session:
            count = session.execute(insert(DBUser.__table__).values(
                name=name,
                email=email,
                password=password,
                avatar_url=avatar_url
            )).rowcount
        if count < 1:
            raise QueryExecutionFailure('No user was created')
        logger.debug('Created user %s', email)
        return True

    def update(self, user_id: int, name: Optional[str] = None,
               password: Optional[str] = None,
               avatar_url: Optional[str] = None) -> bool:
        """
        Update the fields of a user that are not ``None``.

        ``password`` must already be hashed.
        """
        values = {key: value for key, value
                  in [('name', name), ('password', password),
                      ('avatar_url', avatar_url)]
                  if value is not None}
        values['updated_at'] = datetime.now(tz=UTC)
        with transaction(self._session) as session:
            count = session.execute(
                update(DBUser).where(DBUser.id == user_id).values(**values)
            ).rowcount
        if count < 1:
            raise NotFound(user_id)
        return True

    def delete(self, user_id: int) -> bool:
        """Delete a user together with its key bindings."""
        with transaction(self._session) as session:
            session.execute(
                delete(DBUserKey).where(DBUserKey.user_id == user_id)
            )
            count = session.execute(
                delete(DBUser).where(DBUser.id == user_id)
            ).rowcount
        if count < 1:
            raise NotFound(user_id)
        return True


class UserKeyRepository(object):
    """Bindings between user accounts and client public keys."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, user_id: int, public_key: str) -> bool:
        """Bind ``public_key`` to the user."""
        with transaction(self._session) as session:
            count = session.execute(insert(DBUserKey.__table__).values(
                user_id=user_id,
                public_key=public_key
            )).rowcount
        if count < 1:
            raise QueryExecutionFailure('No user key was created')
        return True

    def find_by_user_id(self, user_id: int) -> List[UserKey]:
        """Load the key bindings of a user."""
        with transaction(self._session) as session:
            return [UserKey(user_id=db_key.user_id,
                            public_key=db_key.public_key)
                    for db_key in session.execute(
                        select(DBUserKey).where(DBUserKey.user_id == user_id)
                    ).scalars()]
