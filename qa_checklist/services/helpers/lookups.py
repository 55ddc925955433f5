"""
Lookup helpers for service code.

Every get-by-id in the services goes through ``get_or_raise`` so a missing
row is always reported the same way: a ``NotFoundError`` naming the entity,
which the service boundary turns into a tagged 404 result.

Usage:
    project = get_or_raise(Project, project_id, "Project")

    # Scoped: the row must also belong to the given parent
    result = get_or_raise(ChecklistTestResult, result_id, "Test result",
                          checklist_module_id=instance.id)
"""

import logging

from sqlalchemy import select

from qa_checklist.core.exceptions import NotFoundError
from qa_checklist.models import db

logger = logging.getLogger(__name__)


def get_or_raise(model, pk: str, label: str | None = None, **scope):
    """Fetch one entity by primary key, optionally constrained by parent columns.

    Args:
        model: SQLAlchemy model class with an ``id`` column.
        pk: Primary key value.
        label: Entity name used in the error message. Defaults to the class name.
        **scope: ``column=value`` filters the row must also satisfy. A row
                 outside the scope is reported exactly like a missing one.

    Raises:
        ValueError: A scope key names a column the model does not have.
        NotFoundError: No row matches.
    """
    label = label or model.__name__
    stmt = select(model).where(model.id == pk)
    for field, value in scope.items():
        if not hasattr(model, field):
            raise ValueError(f"{model.__name__} has no scope column {field!r}")
        stmt = stmt.where(getattr(model, field) == value)

    obj = db.session.execute(stmt).scalar_one_or_none()
    if obj is None:
        logger.debug("%s id=%s not found (scope=%s)", label, pk, scope or None)
        raise NotFoundError(label, pk)
    return obj

