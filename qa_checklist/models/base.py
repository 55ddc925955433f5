"""
UUIDModel: abstract base class for all tracker tables.

Adds:
  - ``id`` UUID string primary key
  - ``created_at`` / ``updated_at`` timestamps
  - ``_iso()`` helper for serializers
"""

import uuid
from datetime import datetime, timezone

from qa_checklist.models import db


def _uuid():
    """Generate a new UUID4 string for primary keys."""
    return str(uuid.uuid4())


def _utcnow():
    return datetime.now(timezone.utc)


class UUIDModel(db.Model):
    """Abstract base with a UUID primary key and audit timestamps."""
    __abstract__ = True

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )

    @staticmethod
    def _iso(value):
        return value.isoformat() if value else None
