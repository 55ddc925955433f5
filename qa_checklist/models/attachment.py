"""Image evidence attached to a checklist test result."""

from datetime import datetime, timezone

from qa_checklist.models import db
from qa_checklist.models.base import _uuid


class TestCaseAttachment(db.Model):
    """Metadata for one stored image. The bytes live in the object store."""

    __tablename__ = "test_case_attachments"
    __test__ = False  # not a pytest class

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    test_result_id = db.Column(
        db.String(36), db.ForeignKey("checklist_test_results.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    file_name = db.Column(db.String(255), nullable=False)
    file_type = db.Column(db.String(100), nullable=False)
    file_size = db.Column(db.Integer, nullable=False)
    file_url = db.Column(db.String(1000), nullable=False)
    storage_path = db.Column(db.String(500), nullable=False)
    uploaded_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "test_result_id": self.test_result_id,
            "file_name": self.file_name,
            "file_type": self.file_type,
            "file_size": self.file_size,
            "file_url": self.file_url,
            "storage_path": self.storage_path,
            "uploaded_at": self.uploaded_at.isoformat() if self.uploaded_at else None,
        }

    def __repr__(self) -> str:
        return f"<TestCaseAttachment {self.id}: {self.file_name}>"
