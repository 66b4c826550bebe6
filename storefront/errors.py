# storefront/errors.py
from flask import jsonify
from loguru import logger
from werkzeug.exceptions import HTTPException

from .extensions import db
from .utils.api import api_error


class ApiError(Exception):
    """Base for every error surfaced to API callers."""

    code = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str, data: dict | None = None):
        super().__init__(message)
        self.message = message
        self.data = data or {}

    def as_api(self):
        return api_error(self.message, {"code": self.code, **self.data})


class BadRequest(ApiError):
    code = "BAD_REQUEST"
    status_code = 400


class Unauthorized(ApiError):
    code = "UNAUTHORIZED"
    status_code = 401


class Forbidden(ApiError):
    code = "FORBIDDEN"
    status_code = 403


class NotFound(ApiError):
    code = "NOT_FOUND"
    status_code = 404


class Conflict(ApiError):
    code = "CONFLICT"
    status_code = 409


class InternalServerError(ApiError):
    code = "INTERNAL_SERVER_ERROR"
    status_code = 500


# ---- domain kinds (all reported as BAD_REQUEST) ----------------------------

class OutOfStock(BadRequest):
    pass


class InsufficientStock(BadRequest):
    pass


class Unavailable(BadRequest):
    pass


class InvalidTransition(BadRequest):
    pass


def wrap_unexpected(message: str, exc: Exception) -> InternalServerError:
    err = InternalServerError(message)
    err.__cause__ = exc
    return err


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e: ApiError):
        if e.status_code >= 500:
            db.session.rollback()
            logger.opt(exception=e.__cause__ or e).error("{}: {}", e.code, e.message)
        r = jsonify(e.as_api())
        r.status_code = e.status_code
        return r

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        r = jsonify(api_error(e.description or e.name, {"code": e.name.upper().replace(" ", "_")}))
        r.status_code = e.code or 500
        return r

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        db.session.rollback()
        logger.exception("unhandled error")
        return handle_api_error(wrap_unexpected("Internal server error", e))
