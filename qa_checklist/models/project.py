"""Project model: a release under test, with its archive lifecycle."""

from qa_checklist.models import db
from qa_checklist.models.archive import ArchiveMixin
from qa_checklist.models.base import UUIDModel

PROJECT_STATUSES = ("Draft", "In Progress", "Completed")
PRIORITIES = ("High", "Medium", "Low")


class Project(ArchiveMixin, UUIDModel):
    """A release (name/version/platform) whose checklist is being tested."""

    __tablename__ = "projects"

    name = db.Column(db.String(255), nullable=False, unique=True)
    description = db.Column(db.Text, nullable=True)
    version = db.Column(db.String(50), nullable=True)
    platform = db.Column(db.String(100), nullable=True)
    status = db.Column(
        db.String(20), nullable=False, default="Draft",
        comment="Draft | In Progress | Completed",
    )
    priority = db.Column(
        db.String(10), nullable=False, default="Medium",
        comment="High | Medium | Low",
    )
    due_date = db.Column(db.Date, nullable=True)
    created_by = db.Column(db.String(255), nullable=True)

    checklist_modules = db.relationship(
        "ProjectChecklistModule",
        backref="project",
        cascade="all, delete",
        order_by="ProjectChecklistModule.order_index",
    )
    tester_links = db.relationship(
        "ProjectTester",
        backref="project",
        cascade="all, delete",
    )

    def to_dict(self) -> dict:
        """Serialize project fields for API responses."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "platform": self.platform,
            "status": self.status,
            "priority": self.priority,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "created_by": self.created_by,
            "is_archived": self.is_archived,
            "deleted_at": self._iso(self.deleted_at),
            "deleted_by": self.deleted_by,
            "created_at": self._iso(self.created_at),
            "updated_at": self._iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Project {self.id}: {self.name}>"
