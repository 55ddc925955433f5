"""Project payload parsers."""

from qa_checklist.models.project import PRIORITIES, PROJECT_STATUSES
from qa_checklist.validation.fields import FieldReader


def parse_project(data, partial=False):
    """Validate a project create (or, with ``partial``, update) payload."""
    r = FieldReader(data, partial=partial)
    r.string("name", label="Project name", required=True, max_len=255)
    r.string("description", label="Description", max_len=1000)
    r.string("version", label="Version", max_len=50)
    r.string("platform", label="Platform", max_len=100)
    r.choice("status", PROJECT_STATUSES, label="Status", default="Draft")
    r.choice("priority", PRIORITIES, label="Priority", default="Medium")
    r.date("due_date", label="Due date")
    if not partial:
        r.string("created_by", label="Created by", max_len=255)
    return r.result()


def parse_archive(data):
    """Optional ``deleted_by`` for archive requests."""
    r = FieldReader(data)
    r.string("deleted_by", label="Deleted by", max_len=255)
    return r.result()
