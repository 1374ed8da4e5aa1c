"""Error taxonomy shared by services and the JSON error handlers."""
import logging

from flask import Blueprint, jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)

errors_bp = Blueprint("errors", __name__)


class CatalogError(Exception):
    status_code = 500
    retryable = False

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        payload = {"message": self.message}
        if self.retryable:
            payload["retryable"] = True
        return payload


class ValidationError(CatalogError):
    """Malformed input or a failed business rule; the caller must fix input."""

    status_code = 400


class NotFoundError(CatalogError):
    status_code = 404


class ConflictError(CatalogError):
    """Uniqueness or state violation."""

    status_code = 409


class TransientStoreError(CatalogError):
    """The transaction lost a race with a concurrent writer. Safe to retry."""

    status_code = 409
    retryable = True


class AuthError(CatalogError):
    status_code = 401


class UnexpectedError(CatalogError):
    status_code = 500

    def __init__(self, message="An unexpected error occurred"):
        super().__init__(message)


@errors_bp.app_errorhandler(CatalogError)
def handle_catalog_error(e):
    if e.status_code >= 500 and not isinstance(e, UnexpectedError):
        logger.error("Unexpected catalog error: %s", e.message)
        e = UnexpectedError()
    return jsonify(e.to_dict()), e.status_code


@errors_bp.app_errorhandler(HTTPException)
def handle_http_exception(e):
    msg = e.description or getattr(e, "name", "HTTP Error")
    return jsonify({"message": msg}), e.code


@errors_bp.app_errorhandler(Exception)
def handle_unexpected_exception(e):
    logger.exception("Unhandled exception")
    return handle_catalog_error(UnexpectedError())
