"""
Project checklist models.

A project checklist is an ordered list of module *instances*
(ProjectChecklistModule). Each instance snapshots the library module's name,
may carry its own custom testcases, and owns one ChecklistTestResult per
(testcase, assigned tester) pair.
"""

from qa_checklist.models import db
from qa_checklist.models.base import UUIDModel

RESULT_STATUSES = ("Pending", "Pass", "Fail")


class ProjectChecklistModule(UUIDModel):
    """One attachment of a module to a project."""

    __tablename__ = "project_checklist_modules"
    __table_args__ = (
        db.Index("ix_pcm_project_order", "project_id", "order_index"),
    )

    project_id = db.Column(
        db.String(36), db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    module_id = db.Column(
        db.String(36), db.ForeignKey("modules.id", ondelete="SET NULL"),
        nullable=True, index=True,
        comment="NULL for custom instances or after the library module is deleted",
    )
    module_name = db.Column(db.String(255), nullable=False)
    module_description = db.Column(db.Text, nullable=True)
    is_custom = db.Column(db.Boolean, nullable=False, default=False)
    instance_label = db.Column(db.String(100), nullable=True)
    instance_number = db.Column(db.Integer, nullable=False, default=1)
    order_index = db.Column(db.Integer, nullable=False, default=0)

    module = db.relationship("Module", backref="checklist_instances")
    custom_testcases = db.relationship(
        "ChecklistCustomTestcase",
        backref="checklist_module",
        cascade="all, delete",
        order_by="ChecklistCustomTestcase.order_index",
    )
    results = db.relationship(
        "ChecklistTestResult",
        backref="checklist_module",
        cascade="all, delete",
        order_by="ChecklistTestResult.display_order",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "module_id": self.module_id,
            "module_name": self.module_name,
            "module_description": self.module_description,
            "thumbnail_url": self.module.thumbnail_url if self.module else None,
            "is_custom": self.is_custom,
            "instance_label": self.instance_label,
            "instance_number": self.instance_number,
            "order_index": self.order_index,
            "created_at": self._iso(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<ProjectChecklistModule {self.id}: {self.module_name} #{self.instance_number}>"


class ChecklistCustomTestcase(UUIDModel):
    """A testcase that exists only inside one checklist module instance."""

    __tablename__ = "checklist_custom_testcases"

    checklist_module_id = db.Column(
        db.String(36), db.ForeignKey("project_checklist_modules.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    priority = db.Column(db.String(10), nullable=False, default="Medium")
    order_index = db.Column(db.Integer, nullable=False, default=0)

    results = db.relationship(
        "ChecklistTestResult",
        backref="custom_testcase",
        cascade="all, delete",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "checklist_module_id": self.checklist_module_id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "order_index": self.order_index,
            "created_at": self._iso(self.created_at),
        }


class ChecklistTestResult(UUIDModel):
    """Outcome of one testcase, for one tester, inside one module instance."""

    __tablename__ = "checklist_test_results"
    __table_args__ = (
        db.UniqueConstraint(
            "checklist_module_id", "testcase_id", "tester_id",
            name="uq_ctr_instance_testcase_tester",
        ),
        db.UniqueConstraint(
            "checklist_module_id", "custom_testcase_id", "tester_id",
            name="uq_ctr_instance_custom_tester",
        ),
    )

    checklist_module_id = db.Column(
        db.String(36), db.ForeignKey("project_checklist_modules.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    testcase_id = db.Column(
        db.String(36), db.ForeignKey("testcases.id", ondelete="CASCADE"),
        nullable=True, index=True,
    )
    custom_testcase_id = db.Column(
        db.String(36), db.ForeignKey("checklist_custom_testcases.id", ondelete="CASCADE"),
        nullable=True, index=True,
    )
    tester_id = db.Column(
        db.String(36), db.ForeignKey("testers.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    status = db.Column(
        db.String(10), nullable=False, default="Pending",
        comment="Pending | Pass | Fail",
    )
    notes = db.Column(db.Text, nullable=True)
    tested_by = db.Column(db.String(255), nullable=True)
    tested_at = db.Column(db.DateTime(timezone=True), nullable=True)
    display_order = db.Column(db.Integer, nullable=False, default=0)

    attachments = db.relationship(
        "TestCaseAttachment",
        backref="test_result",
        cascade="all, delete",
        order_by="TestCaseAttachment.uploaded_at",
    )

    @property
    def item_id(self):
        """The testcase this row tracks, library or custom."""
        return self.testcase_id or self.custom_testcase_id

    def _item(self):
        return self.testcase if self.testcase_id else self.custom_testcase

    def to_dict(self, include_attachments=True) -> dict:
        item = self._item()
        d = {
            "id": self.id,
            "checklist_module_id": self.checklist_module_id,
            "testcase_id": self.testcase_id,
            "custom_testcase_id": self.custom_testcase_id,
            "is_custom": self.custom_testcase_id is not None,
            "testcase": {
                "id": item.id,
                "title": item.title,
                "description": item.description,
                "priority": item.priority,
                "image_url": getattr(item, "image_url", None),
            } if item else None,
            "tester_id": self.tester_id,
            "tester": self.tester.to_dict() if self.tester else None,
            "status": self.status,
            "notes": self.notes,
            "tested_by": self.tested_by,
            "tested_at": self._iso(self.tested_at),
            "display_order": self.display_order,
            "updated_at": self._iso(self.updated_at),
        }
        if include_attachments:
            d["attachments"] = [a.to_dict() for a in self.attachments]
        return d

    def __repr__(self) -> str:
        return f"<ChecklistTestResult {self.id}: {self.status}>"
