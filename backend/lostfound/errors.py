from __future__ import annotations

import logging

from flask import Flask, jsonify
from marshmallow import ValidationError

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for failures surfaced to API callers as ``{"error": message}``."""

    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class AuthenticationRequired(ServiceError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(ServiceError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(ServiceError):
    status_code = 404
    default_message = "Not found"


class InvalidOperation(ServiceError):
    status_code = 409
    default_message = "Operation not allowed in the current state"


class InvalidOrExpired(ServiceError):
    # One message for wrong, used and expired codes
    status_code = 400
    default_message = "Invalid or expired code"


class DependencyFailure(ServiceError):
    status_code = 502
    default_message = "An upstream service failed"


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ServiceError)
    def _service_error(err: ServiceError):
        return jsonify({"error": err.message}), err.status_code

    @app.errorhandler(ValidationError)
    def _validation_error(err: ValidationError):
        return jsonify({"error": "Invalid input", "fields": err.messages}), 400

    @app.errorhandler(DependencyFailure)
    def _dependency_failure(err: DependencyFailure):
        logger.warning("Dependency failure surfaced to caller: %s", err.message)
        return jsonify({"error": err.message}), err.status_code
