"""Exceptions raised by the accounts service and its stores."""


class ServiceError(RuntimeError):
    """Base class for all failures surfaced to callers of the service."""


class NotFound(ServiceError):
    """A keyed record or token does not exist."""

    def __init__(self, key: object) -> None:
        super(NotFound, self).__init__(f'{key} is not found')
        self.key = key


class UserNotFound(ServiceError):
    """
    No user matches the provided credentials.

    Also raised when a password reset token does not match, so that callers
    cannot tell which part of the request was wrong.
    """

    def __init__(self, email: str) -> None:
        super(UserNotFound, self).__init__(f'user {email} is not found')
        self.email = email


class Unauthorized(ServiceError):
    """The supplied secret is not correct."""

    def __init__(self, message: str = 'unauthorized') -> None:
        super(Unauthorized, self).__init__(message)


class InvalidArgument(ServiceError):
    """A required argument is missing or empty."""

    def __init__(self, message: str = 'invalid argument') -> None:
        super(InvalidArgument, self).__init__(message)


class InvalidFormat(ServiceError):
    """A stored token could not be deserialized."""

    def __init__(self, message: str = 'invalid format') -> None:
        super(InvalidFormat, self).__init__(message)


class QueryExecutionFailure(ServiceError):
    """A relational mutation did not affect the expected row."""

    def __init__(self, message: str = 'query execution failure') -> None:
        super(QueryExecutionFailure, self).__init__(message)


class StoreFailure(ServiceError):
    """The token store backend failed."""
