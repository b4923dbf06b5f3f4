from flask import jsonify
from sqlalchemy.exc import IntegrityError

from partnerhub.extensions import db


class AppError(Exception):
    status_code = 400

    def __init__(self, message, status_code=None, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = 400


class AuthorizationError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class StateConflictError(AppError):
    """The entity is not in a state that allows the operation."""

    status_code = 400


class ExternalServiceError(AppError):
    status_code = 502


class PaymentsDisabledError(ExternalServiceError):
    status_code = 503

    def __init__(self, message="Payment service is not configured on the server", status_code=None, **extra):
        super().__init__(message, status_code, **extra)


class RefundFailedError(ExternalServiceError):
    """Refund could not be issued, so the cancellation it gated was not applied."""

    status_code = 500


class LedgerIntegrityError(AppError):
    status_code = 500


def error_response(message, status_code, **extra):
    body = {"success": False, "message": message}
    body.update(extra)
    return jsonify(body), status_code


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(err):
        db.session.rollback()
        if err.status_code >= 500:
            app.logger.error("%s: %s", type(err).__name__, err.message)
        return error_response(err.message, err.status_code, **err.extra)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(_err):
        db.session.rollback()
        app.logger.warning("Database integrity error")
        return error_response("Conflict. Resource already exists.", 409)

    @app.errorhandler(400)
    def bad_request(_err):
        return error_response("Bad request", 400)

    @app.errorhandler(401)
    def unauthorized(_err):
        return error_response("Not authorized", 401)

    @app.errorhandler(403)
    def forbidden(_err):
        return error_response("Forbidden", 403)

    @app.errorhandler(404)
    def not_found(_err):
        return error_response("Not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(_err):
        return error_response("Method not allowed", 405)

    @app.errorhandler(429)
    def too_many_requests(_err):
        return error_response("Too many requests", 429)

    @app.errorhandler(500)
    def server_error(_err):
        db.session.rollback()
        app.logger.exception("Internal server error")
        return error_response("Internal server error", 500)
