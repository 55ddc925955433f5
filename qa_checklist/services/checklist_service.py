"""Project checklist service.

Composes the tester service (who gets result rows) and the attachment
service (files to purge when an instance goes away); both are constructor
dependencies so tests can swap them.

    checklist = ChecklistService()                  # module services
    payload, err = checklist.get_project_checklist(project_id)
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from qa_checklist.core.exceptions import InvalidStateError, NotFoundError
from qa_checklist.models import db
from qa_checklist.models.checklist import (
    ChecklistCustomTestcase,
    ChecklistTestResult,
    ProjectChecklistModule,
)
from qa_checklist.models.module import Module
from qa_checklist.models.project import Project
from qa_checklist.models.tester import Tester
from qa_checklist.services import attachment_service, project_service, tester_service
from qa_checklist.services.helpers.boundary import commit, service_boundary
from qa_checklist.services.helpers.lookups import get_or_raise
from qa_checklist.services.helpers.materialize import item_order, materialize
from qa_checklist.services.helpers.ordering import (
    apply_positions,
    compact,
    find_unknown,
    insert_at,
    plan_positions,
)
from qa_checklist.services.helpers.progress import (
    assigned_tester_ids,
    instance_stats,
    project_stats,
)
from qa_checklist.validation.checklist import (
    parse_attach_module,
    parse_bulk_result_update,
    parse_custom_testcase,
    parse_result_update,
)
from qa_checklist.validation.module import parse_reorder

logger = logging.getLogger(__name__)


def _unwrap(result):
    """Raise the error of a nested tagged result, else return its data."""
    data, err = result
    if err:
        raise err
    return data


def _apply_result_fields(result: ChecklistTestResult, clean: dict) -> None:
    if "status" in clean:
        result.status = clean["status"]
        result.tested_at = (
            datetime.now(timezone.utc) if clean["status"] in ("Pass", "Fail") else None
        )
    if "notes" in clean:
        result.notes = clean["notes"]
    if "tested_by" in clean:
        result.tested_by = clean["tested_by"]


def _refresh_status(project_ids) -> None:
    """Status refresh is best effort; the result update is already committed."""
    for project_id in set(project_ids):
        _, err = project_service.refresh_project_status(project_id)
        if err:
            logger.warning("Project status refresh failed for %s: %s", project_id, err.message,
                           extra={"project_id": project_id})


class ChecklistService:
    """Checklist operations for one project at a time."""

    def __init__(self, testers=tester_service, attachments=attachment_service):
        self.testers = testers
        self.attachments = attachments

    # ── Serialization ────────────────────────────────────────────────────

    @staticmethod
    def _instance_payload(instance, tester_ids) -> dict:
        results = sorted(
            (r for r in instance.results if r.tester_id in tester_ids),
            key=lambda r: (r.display_order, r.tester.name if r.tester else ""),
        )
        return {
            **instance.to_dict(),
            "custom_testcases": [ct.to_dict() for ct in instance.custom_testcases],
            "results": [r.to_dict() for r in results],
            "stats": instance_stats(instance, tester_ids),
        }

    # ── Reads ────────────────────────────────────────────────────────────

    @service_boundary
    def get_project_checklist(self, project_id: str) -> dict:
        """Modules in checklist order with their results and stats."""
        project = get_or_raise(Project, project_id, "Project")
        tester_ids = assigned_tester_ids(project)
        overall, _ = project_stats(project)
        return {
            "project": project.to_dict(),
            "testers": [link.tester.to_dict() for link in
                        sorted(project.tester_links, key=lambda link: link.assigned_at)],
            "modules": [self._instance_payload(inst, tester_ids) for inst in project.checklist_modules],
            "stats": overall,
        }

    @service_boundary
    def get_progress(self, project_id: str) -> dict:
        project = get_or_raise(Project, project_id, "Project")
        overall, per_instance = project_stats(project)
        return {
            "project_id": project.id,
            **overall,
            "modules": [
                {
                    "checklist_module_id": inst.id,
                    "module_name": inst.module_name,
                    "instance_label": inst.instance_label,
                    "instance_number": inst.instance_number,
                    **stats,
                }
                for inst, stats in per_instance
            ],
        }

    # ── Module instances ─────────────────────────────────────────────────

    @service_boundary
    def attach_module(self, data: dict) -> dict:
        """Attach a library (or custom) module and fan out Pending results."""
        clean = parse_attach_module(data)
        project = get_or_raise(Project, clean["project_id"], "Project")
        module = None
        if clean.get("module_id"):
            module = get_or_raise(Module, clean["module_id"], "Module")

        name = module.name if module else clean["module_name"]
        same = [
            inst for inst in project.checklist_modules
            if (module and inst.module_id == module.id)
            or (not module and inst.is_custom and inst.module_name == name)
        ]
        instance = ProjectChecklistModule(
            module=module,
            module_name=name,
            module_description=module.description if module else clean.get("module_description"),
            is_custom=module is None,
            instance_label=clean.get("instance_label"),
            instance_number=max((i.instance_number for i in same), default=0) + 1,
        )
        insert_at(list(project.checklist_modules), instance, clean.get("position"))
        project.checklist_modules.append(instance)

        tester_ids = _unwrap(self.testers.assigned_tester_ids(project.id))
        created = materialize(instance, tester_ids)
        commit()
        logger.info(
            "Module %s attached to project %s as instance #%d (%d results)",
            name, project.id, instance.instance_number, created,
            extra={"project_id": project.id},
        )
        return self._instance_payload(instance, set(tester_ids))

    @service_boundary
    def remove_module(self, checklist_module_id: str, project_id: str | None = None) -> dict:
        """Detach an instance with its results, attachments and custom testcases."""
        scope = {"project_id": project_id} if project_id else {}
        instance = get_or_raise(ProjectChecklistModule, checklist_module_id, "Checklist module", **scope)
        project = instance.project

        _unwrap(self.attachments.purge_for_results([r.id for r in instance.results]))
        db.session.delete(instance)
        db.session.flush()
        db.session.expire(project, ["checklist_modules"])
        compact(project.checklist_modules)
        commit()
        logger.info("Checklist module %s removed from project %s", checklist_module_id, project.id,
                    extra={"project_id": project.id})
        return {"id": checklist_module_id}

    @service_boundary
    def reorder_modules(self, project_id: str, payload) -> list[dict]:
        ordered_ids = parse_reorder(payload)
        project = get_or_raise(Project, project_id, "Project")
        siblings = [inst.id for inst in project.checklist_modules]
        if ordered_ids:
            positions = plan_positions(ordered_ids, siblings)
            unknown = find_unknown(ordered_ids, siblings)
            if unknown:
                raise InvalidStateError(
                    "Some modules do not belong to this project",
                    details={"ids": unknown},
                )
            apply_positions(project.checklist_modules, positions)
            commit()
            logger.info("Checklist reordered for project %s", project.id,
                        extra={"project_id": project.id})
        return [inst.to_dict() for inst in sorted(project.checklist_modules, key=lambda i: i.order_index)]

    # ── Checklist items ──────────────────────────────────────────────────

    @service_boundary
    def add_custom_testcase(self, checklist_module_id: str, data: dict) -> dict:
        instance = get_or_raise(ProjectChecklistModule, checklist_module_id, "Checklist module")
        clean = parse_custom_testcase(data)
        tester_ids = clean.pop("tester_ids", None)
        assigned = _unwrap(self.testers.assigned_tester_ids(instance.project_id))
        if tester_ids:
            for tester_id in tester_ids:
                get_or_raise(Tester, tester_id, "Tester")
            unassigned = [t for t in tester_ids if t not in assigned]
            if unassigned:
                raise InvalidStateError(
                    "Testers are not assigned to this project",
                    details={"tester_ids": unassigned},
                )
        else:
            tester_ids = assigned

        custom = ChecklistCustomTestcase(order_index=len(instance.custom_testcases), **clean)
        instance.custom_testcases.append(custom)
        db.session.flush()
        created = materialize(instance, tester_ids, items=[("custom", custom.id)])
        commit()
        logger.info("Custom testcase %s added to %s (%d results)", custom.id, instance.id, created,
                    extra={"project_id": instance.project_id})
        return {
            "testcase": custom.to_dict(),
            "results": [r.to_dict() for r in instance.results if r.custom_testcase_id == custom.id],
        }

    @service_boundary
    def reorder_items(self, project_id: str, checklist_module_id: str, payload) -> list[dict]:
        """Reorder an instance's items; every tester's row for an item moves together."""
        ordered_ids = parse_reorder(payload)
        instance = get_or_raise(ProjectChecklistModule, checklist_module_id, "Checklist module",
                                project_id=project_id)
        current = item_order(instance)

        if not ordered_ids:
            return [{"id": item_id, "display_order": pos} for pos, item_id in enumerate(current)]

        positions = plan_positions(ordered_ids, current)
        unknown = find_unknown(ordered_ids, current)
        if unknown:
            raise InvalidStateError(
                "Some test cases do not belong to this checklist module",
                details={"ids": unknown},
            )
        for r in instance.results:
            r.display_order = positions[r.item_id]
        for ct in instance.custom_testcases:
            ct.order_index = positions[ct.id]
        compact(instance.custom_testcases)
        commit()
        logger.info("Checklist items reordered in %s", instance.id,
                    extra={"project_id": project_id})
        return [
            {"id": item_id, "display_order": pos}
            for item_id, pos in sorted(positions.items(), key=lambda kv: kv[1])
        ]

    # ── Results ──────────────────────────────────────────────────────────

    @service_boundary
    def update_result(self, result_id: str, data: dict, project_id: str | None = None) -> dict:
        clean = parse_result_update(data)
        result = get_or_raise(ChecklistTestResult, result_id, "Test result")
        if project_id and result.checklist_module.project_id != project_id:
            raise NotFoundError("Test result", result_id)
        if clean.get("tester_id") and clean["tester_id"] != result.tester_id:
            raise InvalidStateError("Test result belongs to a different tester")

        _apply_result_fields(result, clean)
        owner = result.checklist_module.project_id
        commit()
        _refresh_status([owner])
        return result.to_dict()

    @service_boundary
    def bulk_update_results(self, data: dict) -> dict:
        clean = parse_bulk_result_update(data)
        result_ids = list(dict.fromkeys(clean.pop("result_ids")))
        rows = ChecklistTestResult.query.filter(ChecklistTestResult.id.in_(result_ids)).all()
        unknown = find_unknown(result_ids, [r.id for r in rows])
        if unknown:
            raise NotFoundError("Test result", unknown[0])

        owners = []
        for row in rows:
            _apply_result_fields(row, clean)
            owners.append(row.checklist_module.project_id)
        commit()
        _refresh_status(owners)
        logger.info("Bulk updated %d results", len(rows))
        return {"updated": len(rows), "results": [r.to_dict() for r in rows]}

    @service_boundary
    def backfill_tester(self, project_id: str, tester_id: str) -> dict:
        """Create missing Pending rows for a tester across the whole checklist."""
        project = get_or_raise(Project, project_id, "Project")
        get_or_raise(Tester, tester_id, "Tester")
        created = sum(materialize(inst, [tester_id]) for inst in project.checklist_modules)
        commit()
        return {"project_id": project.id, "tester_id": tester_id, "created": created}


checklist_service = ChecklistService()
