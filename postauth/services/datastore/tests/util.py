"""Testing helpers."""

from contextlib import contextmanager
from flask import Flask
from ... import datastore


@contextmanager
def temporary_db(database_url: str = 'sqlite:///:memory:',
                 create: bool = True, drop: bool = True):
    """Provide an in-memory sqlite database for testing purposes."""
    app = Flask('foo')
    app.config['SQLALCHEMY_DATABASE_URI'] = database_url
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    datastore.init_app(app)
    with app.app_context():
        if create:
            datastore.create_all()
        try:
            yield datastore.current_session()
        finally:
            if drop:
                datastore.drop_all()
