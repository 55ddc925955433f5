"""Project blueprint.

Endpoints:
    GET    /api/projects                              active projects
    POST   /api/projects                              create (409 duplicate name)
    GET    /api/projects/archive                      archived projects
    GET    /api/projects/<id>                         one project
    PUT    /api/projects/<id>                         update
    DELETE /api/projects/<id>                         archive (soft delete)
    POST   /api/projects/<id>/restore                 un-archive (400 when active)
    DELETE /api/projects/<id>/permanent-delete        hard delete (400 unless archived)
"""

from __future__ import annotations

import logging

from flask import Blueprint, session

from qa_checklist.blueprints import install_error_handlers
from qa_checklist.services import project_service
from qa_checklist.utils.errors import invalid_ids, respond
from qa_checklist.utils.helpers import json_body

logger = logging.getLogger(__name__)

project_bp = install_error_handlers(Blueprint("projects", __name__, url_prefix="/api/projects"))


def _to_dict(project):
    return project.to_dict()


def _to_list(projects):
    return [p.to_dict() for p in projects]


@project_bp.route("", methods=["GET"])
def list_projects():
    return respond(project_service.list_projects(), _to_list)


@project_bp.route("", methods=["POST"])
def create_project():
    user = session.get("user") or {}
    return respond(
        project_service.create_project(json_body(), created_by=user.get("email")),
        _to_dict, status=201,
    )


@project_bp.route("/archive", methods=["GET"])
def list_archived():
    return respond(project_service.list_archived_projects(), _to_list)


@project_bp.route("/<project_id>", methods=["GET"])
def get_project(project_id):
    err = invalid_ids(project_id=project_id)
    if err:
        return err
    return respond(project_service.get_project(project_id), _to_dict)


@project_bp.route("/<project_id>", methods=["PUT"])
def update_project(project_id):
    err = invalid_ids(project_id=project_id)
    if err:
        return err
    return respond(project_service.update_project(project_id, json_body()), _to_dict)


@project_bp.route("/<project_id>", methods=["DELETE"])
def archive_project(project_id):
    err = invalid_ids(project_id=project_id)
    if err:
        return err
    data = json_body()
    if "deleted_by" not in data and "deletedBy" not in data:
        data["deleted_by"] = (session.get("user") or {}).get("email")
    return respond(project_service.archive_project(project_id, data), _to_dict,
                   message="Project archived")


@project_bp.route("/<project_id>/restore", methods=["POST"])
def restore_project(project_id):
    err = invalid_ids(project_id=project_id)
    if err:
        return err
    return respond(project_service.restore_project(project_id), _to_dict,
                   message="Project restored")


@project_bp.route("/<project_id>/permanent-delete", methods=["DELETE"])
def permanent_delete(project_id):
    err = invalid_ids(project_id=project_id)
    if err:
        return err
    return respond(project_service.permanent_delete_project(project_id),
                   message="Project permanently deleted")
