"""Shared utility functions.

parse_date:          strict YYYY-MM-DD parsing for due dates
json_body:           decoded JSON payload of the current request
db_commit_or_error:  commit, rollback + log on failure, return a ServiceError
"""
import logging
from datetime import date, datetime

from flask import request

from qa_checklist.core.exceptions import ConflictError, InternalError, ValidationError
from qa_checklist.models import db

logger = logging.getLogger(__name__)


def parse_date(value):
    """Parse a ``YYYY-MM-DD`` string to a date object.

    Returns None for empty input, raises ValueError for anything else that
    is not a calendar date in that exact form.
    """
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), "%Y-%m-%d").date()
    except ValueError as exc:
        raise ValueError("Invalid date format. Use YYYY-MM-DD.") from exc


def json_body():
    """Return the request's JSON object payload.

    An empty body reads as ``{}``; a body that is not a JSON object raises
    ValidationError so the caller answers 400 instead of 500.
    """
    if not request.data:
        return {}
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object", details={"body": "Invalid JSON"})
    return data


# ── Database commit helper ───────────────────────────────────────────────────

def db_commit_or_error():
    """Commit the current SQLAlchemy session, returning a ServiceError on failure.

    Returns:
        None on success.
        ConflictError when a unique constraint fires, InternalError otherwise.
        The session is rolled back in both cases.

    Usage::

        err = db_commit_or_error()
        if err:
            return None, err
    """
    from sqlalchemy.exc import IntegrityError, OperationalError

    try:
        db.session.commit()
        return None
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("Integrity error on commit: %s", exc.orig)
        return ConflictError("Duplicate or constraint violation")
    except OperationalError:
        db.session.rollback()
        logger.exception("Database operational error on commit")
        return InternalError()
    except Exception:
        db.session.rollback()
        logger.exception("Unexpected database error on commit")
        return InternalError()
