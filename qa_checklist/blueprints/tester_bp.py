"""Tester blueprint: the tester directory and project assignments.

    GET/POST        /api/testers
    GET/PUT/DELETE  /api/testers/<id>
    GET/POST        /api/projects/<pid>/testers          POST body: {"tester_id": ...}
    DELETE          /api/projects/<pid>/testers/<tid>    idempotent
"""

import logging

from flask import Blueprint

from qa_checklist.blueprints import install_error_handlers
from qa_checklist.services import tester_service
from qa_checklist.utils.errors import invalid_ids, respond
from qa_checklist.utils.helpers import json_body
from qa_checklist.validation.tester import parse_assign

logger = logging.getLogger(__name__)

tester_bp = install_error_handlers(Blueprint("testers", __name__, url_prefix="/api"))


def _assignment(link):
    return {**link.to_dict(), "tester": link.tester.to_dict()}


@tester_bp.route("/testers", methods=["GET"])
def list_testers():
    return respond(tester_service.list_testers(), lambda ts: [t.to_dict() for t in ts])


@tester_bp.route("/testers", methods=["POST"])
def create_tester():
    return respond(tester_service.create_tester(json_body()), lambda t: t.to_dict(), status=201)


@tester_bp.route("/testers/<tester_id>", methods=["GET"])
def get_tester(tester_id):
    err = invalid_ids(tester_id=tester_id)
    if err:
        return err
    return respond(tester_service.get_tester(tester_id), lambda t: t.to_dict())


@tester_bp.route("/testers/<tester_id>", methods=["PUT"])
def update_tester(tester_id):
    err = invalid_ids(tester_id=tester_id)
    if err:
        return err
    return respond(tester_service.update_tester(tester_id, json_body()), lambda t: t.to_dict())


@tester_bp.route("/testers/<tester_id>", methods=["DELETE"])
def delete_tester(tester_id):
    err = invalid_ids(tester_id=tester_id)
    if err:
        return err
    return respond(tester_service.delete_tester(tester_id), message="Tester deleted")


@tester_bp.route("/projects/<project_id>/testers", methods=["GET"])
def list_project_testers(project_id):
    err = invalid_ids(project_id=project_id)
    if err:
        return err
    return respond(tester_service.list_project_testers(project_id),
                   lambda links: [_assignment(link) for link in links])


@tester_bp.route("/projects/<project_id>/testers", methods=["POST"])
def assign_tester(project_id):
    err = invalid_ids(project_id=project_id)
    if err:
        return err
    clean = parse_assign(json_body())
    return respond(tester_service.assign_tester(project_id, clean["tester_id"]),
                   _assignment, status=201, message="Tester assigned")


@tester_bp.route("/projects/<project_id>/testers/<tester_id>", methods=["DELETE"])
def unassign_tester(project_id, tester_id):
    err = invalid_ids(project_id=project_id, tester_id=tester_id)
    if err:
        return err
    return respond(tester_service.unassign_tester(project_id, tester_id),
                   message="Tester unassigned")
