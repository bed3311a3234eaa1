"""Application factory for the accounts service."""

import logging
from http import HTTPStatus as status
from typing import Optional

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException

from . import routes
from .exceptions import NotFound, ServiceError, Unauthorized, UserNotFound
from .mail import MailSession
from .services import datastore
from .services.tokens import TokenStore

logger = logging.getLogger(__name__)


def jsonify_exception(error: HTTPException) -> Response:
    """Render a werkzeug HTTP exception as JSON."""
    exc_resp = error.get_response()
    response = jsonify(reason=error.description)
    response.status_code = exc_resp.status_code
    return response


def jsonify_service_error(error: ServiceError) -> Response:
    """Render a :class:`.ServiceError` as JSON, with a fixed status."""
    if isinstance(error, UserNotFound):
        # The e-mail is kept for the logs only.
        logger.info('User not found: %s', error.email)
        response = jsonify(reason='user is not found')
        response.status_code = status.NOT_FOUND
    elif isinstance(error, NotFound):
        response = jsonify(reason=str(error))
        response.status_code = status.NOT_FOUND
    elif isinstance(error, Unauthorized):
        response = jsonify(reason=str(error))
        response.status_code = status.UNAUTHORIZED
    else:
        logger.error('%s: %s', type(error).__name__, error)
        response = jsonify(reason='internal server error')
        response.status_code = status.INTERNAL_SERVER_ERROR
    return response


def create_web_app(config: Optional[dict] = None) -> Flask:
    """Initialize and configure the accounts application."""
    app = Flask('postauth')
    app.config.from_pyfile('config.py')
    if config is not None:
        app.config.update(config)
    logging.getLogger('postauth').setLevel(app.config.get('LOGLEVEL', 20))

    TokenStore.init_app(app)
    MailSession.init_app(app)
    datastore.init_app(app)

    app.register_blueprint(routes.blueprint)
    app.errorhandler(HTTPException)(jsonify_exception)
    app.errorhandler(ServiceError)(jsonify_service_error)

    if app.config['CREATE_DB']:
        with app.app_context():
            datastore.create_all()

    return app
