from __future__ import annotations

from http import HTTPStatus


class LoadError(Exception):
    """The reference set could not be loaded."""


class NotFound(LoadError):
    pass


class MalformedData(LoadError):
    pass


class ServiceError(Exception):
    """
    Terminal failure of a single request.

    Each subclass maps 1:1 onto an HTTP status; responses carry no body, so
    the message is only for the log.
    """

    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR


class MethodNotAllowed(ServiceError):
    status = HTTPStatus.METHOD_NOT_ALLOWED


class Unauthorized(ServiceError):
    status = HTTPStatus.UNAUTHORIZED


class BadRequest(ServiceError):
    status = HTTPStatus.BAD_REQUEST


class InternalError(ServiceError):
    status = HTTPStatus.INTERNAL_SERVER_ERROR
