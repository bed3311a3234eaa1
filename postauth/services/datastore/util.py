"""Helpers and Flask application integration."""

import logging
from contextlib import contextmanager
from typing import Generator

from flask import Flask
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...exceptions import QueryExecutionFailure
from .models import db

logger = logging.getLogger(__name__)


@contextmanager
def transaction(session: Session) -> Generator[Session, None, None]:
    """
    Context manager for database transaction.

    Commits on a clean exit and rolls back on any error. Errors raised by
    SQLAlchemy are re-raised as :class:`.QueryExecutionFailure`.
    """
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        logger.error('Commit failed, rolling back: %s', str(e))
        session.rollback()
        raise QueryExecutionFailure(f'Query failed: {e}') from e
    except Exception:
        session.rollback()
        raise


def init_app(app: Flask) -> None:
    """Set configuration defaults and attach session to the application."""
    app.config.setdefault('SQLALCHEMY_DATABASE_URI', 'sqlite:///:memory:')
    app.config.setdefault('SQLALCHEMY_TRACK_MODIFICATIONS', False)
    db.init_app(app)


def current_session() -> Session:
    """Get/create database session for this context."""
    return db.session


def create_all() -> None:
    """Create all tables in the database."""
    db.create_all()


def drop_all() -> None:
    """Drop all tables in the database."""
    db.drop_all()


def is_available() -> bool:
    """Check our connection to the database."""
    try:
        db.session.execute(text('SELECT 1'))
    except SQLAlchemyError as e:
        logger.error('Encountered an error talking to database: %s', e)
        return False
    return True
