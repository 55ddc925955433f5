"""Tester registry and project assignment service."""

from __future__ import annotations

import logging

from qa_checklist.core.exceptions import ConflictError
from qa_checklist.models import db
from qa_checklist.models.project import Project
from qa_checklist.models.tester import ProjectTester, Tester
from qa_checklist.services import attachment_service
from qa_checklist.services.helpers.boundary import commit, service_boundary
from qa_checklist.services.helpers.lookups import get_or_raise
from qa_checklist.services.helpers.materialize import materialize
from qa_checklist.validation.tester import parse_tester

logger = logging.getLogger(__name__)


def _ensure_unique_email(email: str | None, exclude_id: str | None = None) -> None:
    if not email:
        return
    query = Tester.query.filter(Tester.email == email)
    if exclude_id:
        query = query.filter(Tester.id != exclude_id)
    if query.first():
        raise ConflictError("Email already exists", details={"email": email})


@service_boundary
def list_testers() -> list[Tester]:
    return Tester.query.order_by(Tester.name, Tester.created_at).all()


@service_boundary
def get_tester(tester_id: str) -> Tester:
    return get_or_raise(Tester, tester_id, "Tester")


@service_boundary
def create_tester(data: dict) -> Tester:
    clean = parse_tester(data)
    _ensure_unique_email(clean.get("email"))
    tester = Tester(**clean)
    db.session.add(tester)
    commit()
    logger.info("Tester created: %s", tester.id)
    return tester


@service_boundary
def update_tester(tester_id: str, data: dict) -> Tester:
    tester = get_or_raise(Tester, tester_id, "Tester")
    clean = parse_tester(data, partial=True)
    if clean.get("email") and clean["email"] != tester.email:
        _ensure_unique_email(clean["email"], exclude_id=tester.id)
    for attr, value in clean.items():
        setattr(tester, attr, value)
    commit()
    return tester


@service_boundary
def delete_tester(tester_id: str) -> dict:
    """Delete a tester with their assignments and results."""
    tester = get_or_raise(Tester, tester_id, "Tester")
    _, err = attachment_service.purge_for_results([r.id for r in tester.results])
    if err:
        raise err
    db.session.delete(tester)
    commit()
    logger.info("Tester deleted: %s", tester_id, extra={"event_type": "tester_deleted"})
    return {"id": tester_id}


# ── Project assignment ───────────────────────────────────────────────────────


def _project_links(project_id: str) -> list[ProjectTester]:
    get_or_raise(Project, project_id, "Project")
    return (
        ProjectTester.query
        .filter(ProjectTester.project_id == project_id)
        .order_by(ProjectTester.assigned_at)
        .all()
    )


@service_boundary
def list_project_testers(project_id: str) -> list[ProjectTester]:
    """Assignments of a project, earliest first. Each link carries ``.tester``."""
    return _project_links(project_id)


@service_boundary
def assigned_tester_ids(project_id: str) -> list[str]:
    return [link.tester_id for link in _project_links(project_id)]


@service_boundary
def assign_tester(project_id: str, tester_id: str) -> ProjectTester:
    """Assign a tester and backfill Pending rows for the existing checklist."""
    project = get_or_raise(Project, project_id, "Project")
    tester = get_or_raise(Tester, tester_id, "Tester")
    already = ProjectTester.query.filter_by(project_id=project.id, tester_id=tester.id).first()
    if already:
        raise ConflictError("Tester already assigned to this project")

    link = ProjectTester(project_id=project.id, tester_id=tester.id)
    db.session.add(link)
    backfilled = sum(materialize(inst, [tester.id]) for inst in project.checklist_modules)
    commit()
    logger.info("Tester %s assigned to project %s (%d results backfilled)",
                tester.id, project.id, backfilled, extra={"project_id": project.id})
    return link


@service_boundary
def unassign_tester(project_id: str, tester_id: str) -> dict:
    """Remove the assignment only. Recorded results stay for a re-assignment;
    progress ignores them while the tester is unassigned."""
    link = ProjectTester.query.filter_by(project_id=project_id, tester_id=tester_id).first()
    if link is not None:
        db.session.delete(link)
        commit()
        logger.info("Tester %s unassigned from project %s", tester_id, project_id,
                    extra={"project_id": project_id})
    return {"project_id": project_id, "tester_id": tester_id, "removed": link is not None}
