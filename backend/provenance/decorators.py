# Overview: Request decorators for API routes (caller principal, ledger error mapping).

from functools import wraps
from flask import request, jsonify, g, current_app

from .errors import (
    AlreadyExistsError,
    BatchError,
    InvalidStateError,
    LedgerError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

PRINCIPAL_HEADER = "X-Principal"
MAX_PRINCIPAL_LEN = 128

# Most specific first
_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (BatchError, 400),
    (UnauthorizedError, 403),
    (NotFoundError, 404),
    (AlreadyExistsError, 409),
    (InvalidStateError, 409),
)


def status_for(exc: LedgerError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return status
    return 400


def require_principal(f):
    """
    Require an already-authenticated caller principal.

    Signature verification happens upstream (gateway / wallet layer); by the
    time a request reaches this service the principal in X-Principal has been
    proven. Sets g.principal for the route.

    Returns 401 if the header is missing or blank, 400 if it is too long.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        principal = (request.headers.get(PRINCIPAL_HEADER) or "").strip()

        if not principal:
            return jsonify({"error": "Authentication required"}), 401

        if len(principal) > MAX_PRINCIPAL_LEN:
            return jsonify({"error": f"Principal exceeds max length {MAX_PRINCIPAL_LEN}"}), 400

        g.principal = principal
        return f(*args, **kwargs)

    return decorated_function


def ledger_errors(f):
    """Translate LedgerError into a JSON error response with a specific code."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except LedgerError as e:
            return jsonify(e.to_dict()), status_for(e)
        except Exception:
            current_app.logger.exception("Unhandled failure in %s", request.path)
            return jsonify({"error": "Internal server error"}), 500

    return decorated_function
