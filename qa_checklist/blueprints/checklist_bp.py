"""Checklist blueprint: module instances, checklist items and results.

Two URL families reach the same service:

    GET    /api/checklists/<project_id>                      full checklist
    POST   /api/checklists/modules                           attach module (body: project_id, module_id)
    DELETE /api/checklists/modules/<cm_id>                   detach instance
    POST   /api/checklists/modules/<cm_id>/testcases         add custom testcase
    PUT    /api/checklists/test-results/bulk                 bulk status update
    PUT    /api/checklists/test-results/<result_id>          update one result

    GET    /api/projects/<id>/checklist                      full checklist
    POST   /api/projects/<id>/checklist                      attach module (project from the path)
    GET    /api/projects/<id>/checklist/progress             progress summary
    DELETE /api/projects/<id>/checklist/<cm_id>              detach instance (scoped)
    POST   /api/projects/<id>/checklist/reorder              reorder instances
    POST   /api/projects/<id>/checklist/modules/<cm_id>/testcases/reorder
    PUT    /api/projects/<id>/checklist/results/<result_id>  update one result (scoped)
"""

from __future__ import annotations

import logging

from flask import Blueprint, request

from qa_checklist.blueprints import install_error_handlers
from qa_checklist.services.checklist_service import checklist_service
from qa_checklist.utils.errors import invalid_ids, respond
from qa_checklist.utils.helpers import json_body

logger = logging.getLogger(__name__)

checklist_bp = install_error_handlers(Blueprint("checklists", __name__, url_prefix="/api"))


# ── /api/checklists/* ─────────────────────────────────────────────────────


@checklist_bp.route("/checklists/<project_id>", methods=["GET"])
def get_checklist(project_id):
    err = invalid_ids(project_id=project_id)
    if err:
        return err
    return respond(checklist_service.get_project_checklist(project_id))


@checklist_bp.route("/checklists/modules", methods=["POST"])
def attach_module():
    return respond(checklist_service.attach_module(json_body()), status=201,
                   message="Module added to checklist")


@checklist_bp.route("/checklists/modules/<cm_id>", methods=["DELETE"])
def remove_module(cm_id):
    err = invalid_ids(checklist_module_id=cm_id)
    if err:
        return err
    return respond(checklist_service.remove_module(cm_id), message="Module removed from checklist")


@checklist_bp.route("/checklists/modules/<cm_id>/testcases", methods=["POST"])
def add_custom_testcase(cm_id):
    err = invalid_ids(checklist_module_id=cm_id)
    if err:
        return err
    return respond(checklist_service.add_custom_testcase(cm_id, json_body()), status=201)


@checklist_bp.route("/checklists/test-results/bulk", methods=["PUT"])
def bulk_update_results():
    return respond(checklist_service.bulk_update_results(json_body()))


@checklist_bp.route("/checklists/test-results/<result_id>", methods=["PUT"])
def update_result(result_id):
    err = invalid_ids(result_id=result_id)
    if err:
        return err
    return respond(checklist_service.update_result(result_id, json_body()))


# ── /api/projects/<id>/checklist* ─────────────────────────────────────────


@checklist_bp.route("/projects/<project_id>/checklist", methods=["GET"])
def get_project_checklist(project_id):
    err = invalid_ids(project_id=project_id)
    if err:
        return err
    return respond(checklist_service.get_project_checklist(project_id))


@checklist_bp.route("/projects/<project_id>/checklist", methods=["POST"])
def attach_project_module(project_id):
    err = invalid_ids(project_id=project_id)
    if err:
        return err
    data = {k: v for k, v in json_body().items() if k not in ("project_id", "projectId")}
    return respond(checklist_service.attach_module({**data, "project_id": project_id}),
                   status=201, message="Module added to checklist")


@checklist_bp.route("/projects/<project_id>/checklist/progress", methods=["GET"])
def get_progress(project_id):
    err = invalid_ids(project_id=project_id)
    if err:
        return err
    return respond(checklist_service.get_progress(project_id))


@checklist_bp.route("/projects/<project_id>/checklist/<cm_id>", methods=["DELETE"])
def remove_project_module(project_id, cm_id):
    err = invalid_ids(project_id=project_id, checklist_module_id=cm_id)
    if err:
        return err
    return respond(checklist_service.remove_module(cm_id, project_id=project_id),
                   message="Module removed from checklist")


@checklist_bp.route("/projects/<project_id>/checklist/reorder", methods=["POST"])
def reorder_modules(project_id):
    err = invalid_ids(project_id=project_id)
    if err:
        return err
    return respond(
        checklist_service.reorder_modules(project_id, request.get_json(silent=True)),
        message="Checklist reordered",
    )


@checklist_bp.route(
    "/projects/<project_id>/checklist/modules/<cm_id>/testcases/reorder", methods=["POST"]
)
def reorder_items(project_id, cm_id):
    err = invalid_ids(project_id=project_id, checklist_module_id=cm_id)
    if err:
        return err
    return respond(
        checklist_service.reorder_items(project_id, cm_id, request.get_json(silent=True)),
        message="Test cases reordered",
    )


@checklist_bp.route("/projects/<project_id>/checklist/results/<result_id>", methods=["PUT"])
def update_project_result(project_id, result_id):
    err = invalid_ids(project_id=project_id, result_id=result_id)
    if err:
        return err
    return respond(checklist_service.update_result(result_id, json_body(), project_id=project_id))
