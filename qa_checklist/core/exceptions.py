"""
Service-layer error hierarchy.

Every public service operation returns a tagged result: ``(data, None)`` on
success, ``(None, ServiceError)`` on failure. Services may raise these types
internally; the ``service_boundary`` decorator turns them into the tuple so
nothing crosses into the blueprints as an exception.

Blueprints map ``ServiceError.kind`` to an HTTP status in one place
(``qa_checklist.utils.errors.error_response``).

Usage:
    from qa_checklist.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError("Project", project_id)
    raise ValidationError("Invalid input", details={"name": "Project name is required"})
"""

from __future__ import annotations

import enum


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INVALID_STATE = "INVALID_STATE"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    INTERNAL = "INTERNAL"


class ServiceError(Exception):
    """Base for all service errors. ``message`` is safe to show to clients."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotFoundError(ServiceError):
    """Raised when a requested resource does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Project", "Test result").
        resource_id: The id that was looked up. Logged, not echoed to clients.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found")


class ConflictError(ServiceError):
    """Raised when an operation would violate a uniqueness rule. Maps to 409."""

    kind = ErrorKind.CONFLICT


class InvalidStateError(ServiceError):
    """Raised when an operation is not allowed in the entity's current state."""

    kind = ErrorKind.INVALID_STATE


class ValidationError(ServiceError):
    """Raised when input is malformed.

    Args:
        message: Summary of what failed.
        details: Field-level breakdown; keys are field names.
    """

    kind = ErrorKind.VALIDATION_FAILED


class InternalError(ServiceError):
    """Unexpected failure (database, storage). Details are only logged."""

    kind = ErrorKind.INTERNAL

    def __init__(self, message: str = "Internal server error", details: dict | None = None) -> None:
        super().__init__(message, details)
