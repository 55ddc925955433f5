"""
Service boundary: turn raised service errors into tagged results.

Public service functions are written as straight-line code that raises
``ServiceError`` subclasses. Decorated with ``@service_boundary``, they
return ``(data, None)`` on success or ``(None, err)`` on failure, and the
session is rolled back whenever a failure leaves it.

Usage:
    @service_boundary
    def archive_project(project_id, deleted_by=None):
        project = get_or_raise(Project, project_id, "Project")
        ...
        commit()
        return project

    project, err = archive_project(pid)
"""

import functools
import logging

from qa_checklist.core.exceptions import InternalError, ServiceError
from qa_checklist.models import db
from qa_checklist.utils.helpers import db_commit_or_error

logger = logging.getLogger(__name__)


def commit():
    """Commit the session; raise the mapped ServiceError if it fails."""
    err = db_commit_or_error()
    if err:
        raise err


def service_boundary(fn):
    """Wrap a raising service function into the ``(data, err)`` convention."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs), None
        except ServiceError as err:
            db.session.rollback()
            logger.info(
                "%s failed: %s %s", fn.__qualname__, err.kind.value, err.message,
                extra={"event_type": err.kind.value},
            )
            return None, err
        except Exception:
            db.session.rollback()
            logger.exception("Unexpected error in %s", fn.__qualname__)
            return None, InternalError()

    return wrapper
