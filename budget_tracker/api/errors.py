"""
Exception to HTTP response mapping.

| Exception               | Status                    |
|-------------------------|---------------------------|
| InputValidationError    | 400                       |
| InvalidCredentialsError | 401                       |
| UnauthorizedError       | 401                       |
| NotFoundError           | 404                       |
| DuplicateError          | 400                       |
| ConnectionError         | 500                       |
| StorageError            | 500 on GET, 400 otherwise |
| anything else           | 500                       |

Datastore messages are passed to the caller as-is; nothing is retried.
"""

import structlog
from flask import Flask, g, request
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound

from budget_tracker.api.common import components, error_response
from budget_tracker.auth import InvalidCredentialsError, UnauthorizedError
from budget_tracker.services.storage import (
    ConnectionError,
    DuplicateError,
    NotFoundError,
    StorageError,
)
from budget_tracker.validation import InputValidationError


logger = structlog.get_logger(__name__)


def _operation() -> str:
    return f"{request.method} {request.path}"


def register_error_handlers(app: Flask) -> None:

    @app.errorhandler(InputValidationError)
    def handle_validation_error(e: InputValidationError):
        logger.info("request_rejected", reason="validation", field=e.field, message=e.message)
        return error_response(e.message, 400)

    @app.errorhandler(InvalidCredentialsError)
    def handle_invalid_credentials(e: InvalidCredentialsError):
        return error_response(e.message, 401)

    @app.errorhandler(UnauthorizedError)
    def handle_unauthorized(e: UnauthorizedError):
        return error_response(e.message, 401)

    @app.errorhandler(NotFoundError)
    def handle_not_found(e: NotFoundError):
        return error_response(str(e), 404)

    @app.errorhandler(DuplicateError)
    def handle_duplicate(e: DuplicateError):
        return error_response(str(e), 400)

    @app.errorhandler(ConnectionError)
    def handle_connection_error(e: ConnectionError):
        components().audit_logger.log_storage_error(
            _operation(), str(e), user_id=g.get("user_id")
        )
        return error_response(str(e), 500)

    @app.errorhandler(StorageError)
    def handle_storage_error(e: StorageError):
        components().audit_logger.log_storage_error(
            _operation(), str(e), user_id=g.get("user_id")
        )
        return error_response(str(e), 500 if request.method == "GET" else 400)

    @app.errorhandler(NotFound)
    def handle_unknown_route(e: NotFound):
        return error_response("Not found", 404)

    @app.errorhandler(MethodNotAllowed)
    def handle_wrong_method(e: MethodNotAllowed):
        return error_response("Method not allowed", 405)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        return error_response(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("unhandled_exception", operation=_operation())
        components().audit_logger.log_error(
            error_type=type(e).__name__,
            error_message=str(e),
            details={"operation": _operation()},
        )
        return error_response("Internal server error", 500)
