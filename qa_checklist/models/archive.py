"""
Archive Mixin: soft delete for projects.

Adds ``deleted_at`` / ``deleted_by`` columns and query helpers. An archived
row is hidden from the active list but stays restorable until it is
permanently deleted.

Usage:
    class Project(ArchiveMixin, UUIDModel):
        ...

    project.archive(deleted_by="alice@example.com")
    Project.query_active().all()
    Project.query_archived().all()
    project.restore()
"""

from datetime import datetime, timezone

from qa_checklist.models import db


class ArchiveMixin:
    """Mixin that adds archive (soft delete) support to a model."""

    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True, default=None, index=True)
    deleted_by = db.Column(db.String(255), nullable=True)

    def archive(self, deleted_by=None):
        """Mark this record as archived."""
        self.deleted_at = datetime.now(timezone.utc)
        self.deleted_by = deleted_by

    def restore(self):
        """Bring an archived record back to the active list."""
        self.deleted_at = None
        self.deleted_by = None

    @property
    def is_archived(self):
        return self.deleted_at is not None

    @classmethod
    def query_active(cls):
        """Return a query that excludes archived records."""
        return cls.query.filter(cls.deleted_at.is_(None))

    @classmethod
    def query_archived(cls):
        """Return only archived records."""
        return cls.query.filter(cls.deleted_at.isnot(None))
