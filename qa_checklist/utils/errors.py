"""Standardised API responses.

Usage
-----
    from qa_checklist.utils.errors import api_error, api_ok, error_response, E

    return api_ok(project.to_dict(), status=201)
    return api_error(E.VALIDATION_INVALID, "Invalid project id")
    return error_response(err)          # err: ServiceError from a service call

Every body carries ``success``; failures add ``error``, ``code`` and, for
validation failures, ``details`` keyed by field name.
"""

from __future__ import annotations

import logging

from flask import jsonify

from qa_checklist.core.exceptions import ErrorKind, ServiceError

logger = logging.getLogger(__name__)


# ── Error code constants ──────────────────────────────────────────────
class E:
    """Machine-readable error code constants."""

    # Validation – HTTP 400
    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"

    # Not-found – HTTP 404
    NOT_FOUND = "ERR_NOT_FOUND"

    # Conflict / duplicate – HTTP 409
    CONFLICT_DUPLICATE = "ERR_CONFLICT_DUPLICATE"

    # Invalid state transition – HTTP 400
    INVALID_STATE = "ERR_INVALID_STATE"

    # Transport – 405 / 413 / 415 / 429
    METHOD_NOT_ALLOWED = "ERR_METHOD_NOT_ALLOWED"
    PAYLOAD_TOO_LARGE = "ERR_PAYLOAD_TOO_LARGE"
    UNSUPPORTED_MEDIA_TYPE = "ERR_UNSUPPORTED_MEDIA_TYPE"
    RATE_LIMITED = "ERR_RATE_LIMITED"

    # Server – HTTP 500
    INTERNAL = "ERR_INTERNAL"


# ── Default HTTP status mapping ───────────────────────────────────────
_DEFAULT_STATUS: dict[str, int] = {
    E.VALIDATION_REQUIRED: 400,
    E.VALIDATION_INVALID: 400,
    E.NOT_FOUND: 404,
    E.CONFLICT_DUPLICATE: 409,
    E.INVALID_STATE: 400,
    E.METHOD_NOT_ALLOWED: 405,
    E.PAYLOAD_TOO_LARGE: 413,
    E.UNSUPPORTED_MEDIA_TYPE: 415,
    E.RATE_LIMITED: 429,
    E.INTERNAL: 500,
}

# ErrorKind -> (code, status). The only place a service error becomes HTTP.
_KIND_MAP: dict[ErrorKind, tuple[str, int]] = {
    ErrorKind.NOT_FOUND: (E.NOT_FOUND, 404),
    ErrorKind.CONFLICT: (E.CONFLICT_DUPLICATE, 409),
    ErrorKind.INVALID_STATE: (E.INVALID_STATE, 400),
    ErrorKind.VALIDATION_FAILED: (E.VALIDATION_INVALID, 400),
    ErrorKind.INTERNAL: (E.INTERNAL, 500),
}


def api_ok(data=None, *, status: int = 200, message: str | None = None):
    """Return a standard JSON success response."""
    body: dict = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return jsonify(body), status


def api_error(
    code: str,
    message: str,
    *,
    status: int | None = None,
    details: dict | None = None,
):
    """Return a standard JSON error response.

    Parameters
    ----------
    code : str
        Machine-readable error code (use ``E.*`` constants).
    message : str
        Human-readable explanation for developers / UI.
    status : int, optional
        HTTP status override.  Falls back to ``_DEFAULT_STATUS[code]``,
        then to ``400``.
    details : dict, optional
        Field-level breakdown for validation failures.

    Returns
    -------
    tuple[Response, int]
        ``(jsonify(body), http_status)`` – drop-in for Flask views.
    """

    http_status = status or _DEFAULT_STATUS.get(code, 400)

    body: dict = {
        "success": False,
        "error": message,
        "code": code,
    }
    if details:
        body["details"] = details

    return jsonify(body), http_status


def error_response(err: ServiceError):
    """Translate a service error into the JSON error response for its kind.

    Internal failures never leak their message; the cause was logged where
    it happened.
    """
    code, status = _KIND_MAP.get(err.kind, (E.INTERNAL, 500))
    if err.kind is ErrorKind.INTERNAL:
        return api_error(code, "Internal server error", status=status)
    return api_error(code, err.message, status=status, details=err.details or None)


def respond(result, serialize=None, *, status: int = 200, message: str | None = None):
    """Turn a service ``(data, err)`` tuple into a response.

    ``serialize`` maps the data to JSON-ready form (``lambda p: p.to_dict()``).
    """
    data, err = result
    if err:
        return error_response(err)
    return api_ok(serialize(data) if serialize else data, status=status, message=message)


def invalid_ids(**ids):
    """Return a 400 response for the first malformed UUID, else None.

    Usage::

        err = invalid_ids(project_id=project_id)
        if err:
            return err
    """
    from qa_checklist.validation.fields import is_uuid

    for name, value in ids.items():
        if not is_uuid(value):
            label = name.replace("_", " ").capitalize()
            return api_error(E.VALIDATION_INVALID, f"Invalid {label.lower()}",
                             details={name: f"{label} must be a valid UUID"})
    return None
