"""Tester registry and project assignments."""

from datetime import datetime, timezone

from qa_checklist.models import db
from qa_checklist.models.base import UUIDModel, _uuid

DEFAULT_TESTER_COLOR = "#FF6B35"


class Tester(UUIDModel):
    """A person who records results. Color tags their rows in the checklist."""

    __tablename__ = "testers"

    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=True, unique=True)
    color = db.Column(db.String(7), nullable=False, default=DEFAULT_TESTER_COLOR)

    project_links = db.relationship("ProjectTester", backref="tester", cascade="all, delete")
    results = db.relationship("ChecklistTestResult", backref="tester", cascade="all, delete")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "color": self.color,
            "created_at": self._iso(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Tester {self.id}: {self.name}>"


class ProjectTester(db.Model):
    """Join row: tester assigned to a project."""

    __tablename__ = "project_testers"
    __table_args__ = (
        db.UniqueConstraint("project_id", "tester_id", name="uq_project_testers_project_tester"),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    project_id = db.Column(
        db.String(36), db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    tester_id = db.Column(
        db.String(36), db.ForeignKey("testers.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    assigned_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "tester_id": self.tester_id,
            "assigned_at": self.assigned_at.isoformat() if self.assigned_at else None,
        }
