"""Application error taxonomy.

Services raise these; the handlers installed by ``register_error_handlers``
turn them into ``{"message": ...}`` JSON responses with a fixed status code.
Anything else escaping a route is logged and reported as a generic 500.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = 'Something went wrong!'


class ServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class Unauthenticated(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Not authorized, no token'


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'Not authorized'


class Conflict(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Resource already exists'


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found'


class InvalidCredentials(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Invalid credentials'


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Invalid request'


class InternalError(ServiceError):
    pass


def _message_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={'message': message, **extra})


async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error('%s %s failed: %s', request.method, request.url.path, exc.message)
    return _message_response(exc.status_code, exc.message)


def first_error_message(errors) -> str:
    if not errors:
        return ValidationError.default_message

    first = errors[0]
    # Our own validators raise ValueError; report their text without pydantic's prefix.
    if first.get('type') == 'value_error' and isinstance(first.get('ctx', {}).get('error'), ValueError):
        return str(first['ctx']['error'])
    return first.get('msg', ValidationError.default_message)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    raw_errors = exc.errors()
    return _message_response(
        status.HTTP_400_BAD_REQUEST,
        first_error_message(raw_errors),
        errors=jsonable_encoder(raw_errors),
    )


async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception('Database error on %s %s', request.method, request.url.path)
    return _message_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception('Unhandled error on %s %s', request.method, request.url.path)
    return _message_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_database_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
