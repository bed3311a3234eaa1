"""SQLAlchemy models for database integration."""

from datetime import datetime

from flask_sqlalchemy import SQLAlchemy
from pytz import UTC
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

db: SQLAlchemy = SQLAlchemy()


def _now() -> datetime:
    return datetime.now(tz=UTC)


class DBUser(db.Model):     # type: ignore
    """
    User accounts.

    +---------------+--------------+------+-----+---------+----------------+
    | Field         | Type         | Null | Key | Default | Extra          |
    +---------------+--------------+------+-----+---------+----------------+
    | id            | int          | NO   | PRI | NULL    | auto_increment |
    | name          | varchar(255) | NO   |     |         |                |
    | email         | varchar(255) | NO   | UNI |         |                |
    | password      | varchar(255) | NO   |     |         |                |
    | avatar_url    | text         | NO   |     |         |                |
    | created_at    | datetime     | NO   |     | now     |                |
    | updated_at    | datetime     | NO   |     | now     |                |
    +---------------+--------------+------+-----+---------+----------------+
    """

    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)
    """Salted hash, see :mod:`postauth.passwords`."""
    avatar_url = Column(Text, nullable=False, default='')
    created_at = Column(DateTime, nullable=False, default=_now)
    updated_at = Column(DateTime, nullable=False, default=_now)

    keys = relationship('DBUserKey', back_populates='user',
                        cascade='all, delete-orphan')


class DBUserKey(db.Model):  # type: ignore
    """Public keys bound to user accounts."""

    __tablename__ = 'user_keys'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(ForeignKey('users.id', ondelete='CASCADE'),
                     nullable=False, index=True)
    public_key = Column(Text, nullable=False)

    user = relationship('DBUser', back_populates='keys')
