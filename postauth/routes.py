"""Provides the JSON API of the accounts service."""

import logging
from http import HTTPStatus as status
from typing import Any, Tuple

from flask import Blueprint, Response, jsonify, request
from werkzeug.exceptions import InternalServerError, Unauthorized

from . import accounts, domain
from .exceptions import InvalidArgument
from .services import datastore, sessions

logger = logging.getLogger(__name__)

blueprint = Blueprint('postauth', __name__, url_prefix='')


def _get_args(*required: str) -> dict:
    """Get the JSON body of the request, which must have ``required``."""
    args = request.get_json(silent=True)
    if not isinstance(args, dict):
        raise InvalidArgument('request body must be a JSON object')
    for key in required:
        if args.get(key) is None:
            raise InvalidArgument(f'{key} is required')
    return args


def _data(data: Any) -> Response:
    return jsonify({'data': data})


def _require_owner(user_id: int) -> None:
    user_session = sessions.get_session()
    if user_session is None or user_session.user_id != user_id:
        raise Unauthorized('Not logged in as this user')


@blueprint.route('/status', methods=['GET'])
def service_status() -> Tuple[Response, int]:
    """Health check endpoint."""
    if not datastore.util.is_available():
        return jsonify({'reason': 'database is unavailable'}), \
            status.SERVICE_UNAVAILABLE
    return jsonify({'status': 'ok'}), status.OK


@blueprint.route('/auth', methods=['GET'])
def get_auth() -> Response:
    """Get the user session of the current request."""
    user_session = sessions.get_session()
    if user_session is None:
        raise Unauthorized('Not logged in')
    return _data(domain.to_dict(user_session))


@blueprint.route('/auth/login', methods=['POST'])
def login() -> Response:
    """Log in with e-mail and password, and set the user session."""
    args = _get_args('email', 'password')
    user_session = accounts.current_service().login(args['email'],
                                                    args['password'])
    if not sessions.set_session(*user_session):
        raise InternalServerError('Could not set session')
    return _data(domain.to_dict(user_session))


@blueprint.route('/auth/logout', methods=['POST'])
def logout() -> Response:
    """Unset the user session, if there is one."""
    if sessions.get_session() is None:
        return _data(False)
    sessions.unset_session()
    return _data(True)


@blueprint.route('/auth/refresh', methods=['POST'])
def refresh() -> Response:
    """Rewrite the user session from the current user data."""
    user_session = sessions.get_session()
    if user_session is None:
        raise Unauthorized('Not logged in')
    refreshed = accounts.current_service().refresh_session(
        user_session.user_id
    )
    if not sessions.set_session(*refreshed):
        raise InternalServerError('Could not set session')
    return _data(domain.to_dict(refreshed))


@blueprint.route('/auth/signup', methods=['POST'])
def request_sign_up() -> Response:
    """Start a registration; the pin is sent by e-mail."""
    args = _get_args('name', 'email', 'password')
    token_key = accounts.current_service().request_sign_up(
        args['name'], args['email'], args['password'],
        args.get('avatar_url', '')
    )
    return _data(token_key)


@blueprint.route('/auth/password', methods=['POST'])
def request_password_reset() -> Response:
    """Start a password reset; the temporary password is sent by e-mail."""
    args = _get_args('email')
    return _data(accounts.current_service().request_password_reset(
        args['email']
    ))


@blueprint.route('/auth/password', methods=['PUT'])
def reset_password() -> Response:
    """Complete a password reset with the temporary password."""
    args = _get_args('email', 'token_id', 'temporary_password',
                     'new_password')
    return _data(accounts.current_service().reset_password(
        args['email'], args['token_id'], args['temporary_password'],
        args['new_password']
    ))


@blueprint.route('/users', methods=['POST'])
def create_user() -> Response:
    """Complete a registration with the pin."""
    args = _get_args('user_public_key', 'token_key', 'token_pin')
    return _data(accounts.current_service().create(
        args['user_public_key'], args['token_key'], args['token_pin']
    ))


@blueprint.route('/users', methods=['GET'])
def get_users() -> Response:
    """List all users."""
    return _data([domain.to_dict(user) for user
                  in accounts.current_service().get_list()])


@blueprint.route('/users/<int:user_id>', methods=['GET'])
def get_user(user_id: int) -> Response:
    """Get a user."""
    return _data(domain.to_dict(
        accounts.current_service().get_one(user_id)
    ))


@blueprint.route('/users/<int:user_id>', methods=['PATCH'])
def update_user(user_id: int) -> Response:
    """Update the name, password or avatar of the logged-in user."""
    _require_owner(user_id)
    args = _get_args()
    return _data(accounts.current_service().update(
        user_id,
        name=args.get('name'),
        password=args.get('password'),
        avatar_url=args.get('avatar_url')
    ))


@blueprint.route('/users/<int:user_id>', methods=['DELETE'])
def delete_user(user_id: int) -> Response:
    """Delete the logged-in user, and log out."""
    _require_owner(user_id)
    result = accounts.current_service().delete(user_id)
    sessions.unset_session()
    return _data(result)
