"""Module library: reusable modules and their ordered test cases."""

from qa_checklist.models import db
from qa_checklist.models.base import UUIDModel


class Module(UUIDModel):
    """A named, reusable group of test cases. Independent of projects."""

    __tablename__ = "modules"

    name = db.Column(db.String(255), nullable=False, unique=True)
    description = db.Column(db.Text, nullable=True)
    thumbnail_url = db.Column(db.String(1000), nullable=True)
    thumbnail_file_name = db.Column(db.String(255), nullable=True)
    tags = db.Column(db.JSON, nullable=False, default=list)
    created_by = db.Column(db.String(255), nullable=True)
    order_index = db.Column(db.Integer, nullable=False, default=0)

    testcases = db.relationship(
        "TestCase",
        backref="module",
        cascade="all, delete",
        order_by="TestCase.order_index",
    )

    def to_dict(self, include_testcases=False) -> dict:
        d = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "thumbnail_url": self.thumbnail_url,
            "thumbnail_file_name": self.thumbnail_file_name,
            "tags": list(self.tags or []),
            "created_by": self.created_by,
            "order_index": self.order_index,
            "created_at": self._iso(self.created_at),
            "updated_at": self._iso(self.updated_at),
        }
        if include_testcases:
            d["testcases"] = [tc.to_dict() for tc in self.testcases]
        return d

    def __repr__(self) -> str:
        return f"<Module {self.id}: {self.name}>"


class TestCase(UUIDModel):
    """A single check inside a module. Deleted together with its module."""

    __tablename__ = "testcases"
    __test__ = False  # not a pytest class
    __table_args__ = (
        db.Index("ix_testcases_module_order", "module_id", "order_index"),
    )

    module_id = db.Column(
        db.String(36), db.ForeignKey("modules.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    priority = db.Column(db.String(10), nullable=False, default="Medium")
    order_index = db.Column(db.Integer, nullable=False, default=0)
    image_url = db.Column(db.String(1000), nullable=True)
    image_file_name = db.Column(db.String(255), nullable=True)

    results = db.relationship(
        "ChecklistTestResult",
        backref="testcase",
        cascade="all, delete",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "module_id": self.module_id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "order_index": self.order_index,
            "image_url": self.image_url,
            "image_file_name": self.image_file_name,
            "created_at": self._iso(self.created_at),
            "updated_at": self._iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<TestCase {self.id}: {self.title}>"
