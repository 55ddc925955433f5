"""Project lifecycle service: CRUD, archive, restore, permanent delete.

Lifecycle:
    active --archive--> archived --restore--> active
    archived --permanent_delete--> gone

All public functions return ``(data, None)`` or ``(None, ServiceError)``.
"""

from __future__ import annotations

import logging

from qa_checklist.core.exceptions import ConflictError, InvalidStateError
from qa_checklist.models import db
from qa_checklist.models.project import Project
from qa_checklist.services import attachment_service
from qa_checklist.services.helpers.boundary import commit, service_boundary
from qa_checklist.services.helpers.lookups import get_or_raise
from qa_checklist.services.helpers.progress import project_stats, project_status_for
from qa_checklist.validation.project import parse_archive, parse_project

logger = logging.getLogger(__name__)


def _ensure_unique_name(name: str, exclude_id: str | None = None) -> None:
    query = Project.query.filter(Project.name == name)
    if exclude_id:
        query = query.filter(Project.id != exclude_id)
    if query.first():
        raise ConflictError("A project with this name already exists", details={"name": name})


@service_boundary
def list_projects() -> list[Project]:
    """Active (non-archived) projects, newest first."""
    return Project.query_active().order_by(Project.created_at.desc()).all()


@service_boundary
def list_archived_projects() -> list[Project]:
    """Archived projects, most recently archived first."""
    return Project.query_archived().order_by(Project.deleted_at.desc()).all()


@service_boundary
def get_project(project_id: str) -> Project:
    return get_or_raise(Project, project_id, "Project")


@service_boundary
def create_project(data: dict, created_by: str | None = None) -> Project:
    clean = parse_project(data)
    _ensure_unique_name(clean["name"])
    if created_by and not clean.get("created_by"):
        clean["created_by"] = created_by

    project = Project(**clean)
    db.session.add(project)
    commit()
    logger.info("Project created: %s", project.name, extra={"project_id": project.id})
    return project


@service_boundary
def update_project(project_id: str, data: dict) -> Project:
    project = get_or_raise(Project, project_id, "Project")
    clean = parse_project(data, partial=True)
    if "name" in clean and clean["name"] != project.name:
        _ensure_unique_name(clean["name"], exclude_id=project.id)

    for attr, value in clean.items():
        setattr(project, attr, value)
    commit()
    logger.info("Project updated: %s fields=%s", project.id, sorted(clean),
                extra={"project_id": project.id})
    return project


@service_boundary
def archive_project(project_id: str, data: dict | None = None) -> Project:
    """Soft delete: hide from the active list, keep everything restorable."""
    project = get_or_raise(Project, project_id, "Project")
    if project.is_archived:
        raise InvalidStateError("Project is already archived")
    clean = parse_archive(data or {})
    project.archive(deleted_by=clean.get("deleted_by"))
    commit()
    logger.info("Project archived: %s", project.id, extra={"project_id": project.id})
    return project


@service_boundary
def restore_project(project_id: str) -> Project:
    project = get_or_raise(Project, project_id, "Project")
    if not project.is_archived:
        raise InvalidStateError("Project is not archived")
    project.restore()
    commit()
    logger.info("Project restored: %s", project.id, extra={"project_id": project.id})
    return project


@service_boundary
def permanent_delete_project(project_id: str) -> dict:
    """Hard delete an archived project with its checklist, results and files."""
    project = get_or_raise(Project, project_id, "Project")
    if not project.is_archived:
        raise InvalidStateError("Project must be archived before permanent deletion")

    result_ids = [r.id for inst in project.checklist_modules for r in inst.results]
    purged, err = attachment_service.purge_for_results(result_ids)
    if err:
        raise err

    name = project.name
    db.session.delete(project)
    commit()
    logger.info("Project permanently deleted: %s (%d attachment files purged)", name, purged,
                extra={"project_id": project_id})
    return {"id": project_id, "name": name}


@service_boundary
def refresh_project_status(project_id: str) -> Project:
    """Recompute Draft / In Progress / Completed from checklist results."""
    project = get_or_raise(Project, project_id, "Project")
    overall, _ = project_stats(project)
    new_status = project_status_for(overall)
    if project.status != new_status:
        logger.info("Project %s status %s -> %s", project.id, project.status, new_status,
                    extra={"project_id": project.id})
        project.status = new_status
        commit()
    return project
