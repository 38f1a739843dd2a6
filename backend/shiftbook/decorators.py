# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, jsonify, g, current_app

from .services import session_service
from .services.catalog_service import UnknownItemError
from .services.concurrency import PersistenceError
from .services.report_service import ReportNotFoundError
from .services.shift_service import EntryNotFoundError, InvalidStateError
from .validation import ValidationError, ConflictError


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1]


def require_auth(f):
    """
    Require an authenticated operator session.

    Sets g.current_user to the authenticated User.

    Returns 401 if:
    - No Authorization header
    - Invalid, expired or revoked token
    - User account deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        user = session_service.validate_session(token)
        if not user:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function


def map_domain_errors(action: str):
    """
    Translate service-layer exceptions into JSON error responses.

    ValidationError -> 400, unknown item/entry/report -> 404,
    conflicts and wrong shift status -> 409, failed durable write -> 503.
    Anything else is logged and returned as 500.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except ValidationError as e:
                return jsonify({"error": str(e), "type": type(e).__name__}), 400
            except (UnknownItemError, EntryNotFoundError, ReportNotFoundError) as e:
                return jsonify({"error": str(e), "type": type(e).__name__}), 404
            except (InvalidStateError, ConflictError) as e:
                return jsonify({"error": str(e), "type": type(e).__name__}), 409
            except PersistenceError as e:
                current_app.logger.error("%s: %s", action, e)
                return jsonify({"error": str(e), "type": "PersistenceError", "retryable": True}), 503
            except Exception:
                current_app.logger.exception(action)
                return jsonify({"error": "Internal server error"}), 500

        return decorated_function

    return decorator
