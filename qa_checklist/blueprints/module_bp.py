"""Module library blueprint: modules, test cases, reorder and image uploads.

Endpoints:
    GET/POST        /api/modules
    PUT             /api/modules/reorder
    GET/PUT/DELETE  /api/modules/<id>
    POST            /api/modules/<id>/thumbnail          multipart "file", 2 MB
    DELETE          /api/modules/thumbnail?filePath=...  remove a stored thumbnail
    GET/POST        /api/modules/<id>/testcases
    PUT             /api/testcases/reorder
    GET/PUT/DELETE  /api/testcases/<id>
    POST            /api/testcases/<id>/image            multipart "file", 5 MB
    DELETE          /api/testcases/<id>/image
"""

from __future__ import annotations

import logging

from flask import Blueprint, request

from qa_checklist.blueprints import install_error_handlers, uploaded_file
from qa_checklist.services import module_service
from qa_checklist.utils.errors import E, api_error, invalid_ids, respond
from qa_checklist.utils.helpers import json_body

logger = logging.getLogger(__name__)

module_bp = install_error_handlers(Blueprint("modules", __name__, url_prefix="/api"))


def _module(module):
    return module.to_dict(include_testcases=True)


def _testcase(testcase):
    return testcase.to_dict()


def _no_file():
    return api_error(E.VALIDATION_REQUIRED, "No file provided", details={"file": "File is required"})


# ═════════════════════════════════════════════════════════════════════════
# Modules
# ═════════════════════════════════════════════════════════════════════════


@module_bp.route("/modules", methods=["GET"])
def list_modules():
    include = request.args.get("include_testcases", "true").lower() != "false"
    return respond(
        module_service.list_modules(),
        lambda modules: [m.to_dict(include_testcases=include) for m in modules],
    )


@module_bp.route("/modules", methods=["POST"])
def create_module():
    return respond(module_service.create_module(json_body()), _module, status=201)


@module_bp.route("/modules/reorder", methods=["PUT"])
def reorder_modules():
    payload = request.get_json(silent=True)
    return respond(
        module_service.reorder_modules(payload),
        lambda modules: [m.to_dict() for m in modules],
        message="Modules reordered",
    )


@module_bp.route("/modules/<module_id>", methods=["GET"])
def get_module(module_id):
    err = invalid_ids(module_id=module_id)
    if err:
        return err
    return respond(module_service.get_module(module_id), _module)


@module_bp.route("/modules/<module_id>", methods=["PUT"])
def update_module(module_id):
    err = invalid_ids(module_id=module_id)
    if err:
        return err
    return respond(module_service.update_module(module_id, json_body()), _module)


@module_bp.route("/modules/<module_id>", methods=["DELETE"])
def delete_module(module_id):
    err = invalid_ids(module_id=module_id)
    if err:
        return err
    return respond(module_service.delete_module(module_id), message="Module deleted")


@module_bp.route("/modules/<module_id>/thumbnail", methods=["POST"])
def upload_thumbnail(module_id):
    err = invalid_ids(module_id=module_id)
    if err:
        return err
    upload = uploaded_file()
    if upload is None:
        return _no_file()
    return respond(module_service.upload_module_thumbnail(module_id, *upload), _module, status=201)


@module_bp.route("/modules/thumbnail", methods=["DELETE"])
def delete_thumbnail():
    file_path = request.args.get("filePath") or request.args.get("file_path")
    return respond(module_service.remove_module_thumbnail(file_path), message="Thumbnail deleted")


# ═════════════════════════════════════════════════════════════════════════
# Test cases
# ═════════════════════════════════════════════════════════════════════════


@module_bp.route("/modules/<module_id>/testcases", methods=["GET"])
def list_testcases(module_id):
    err = invalid_ids(module_id=module_id)
    if err:
        return err
    return respond(module_service.list_testcases(module_id),
                   lambda items: [tc.to_dict() for tc in items])


@module_bp.route("/modules/<module_id>/testcases", methods=["POST"])
def create_testcase(module_id):
    err = invalid_ids(module_id=module_id)
    if err:
        return err
    return respond(module_service.create_testcase(module_id, json_body()), _testcase, status=201)


@module_bp.route("/testcases/reorder", methods=["PUT"])
def reorder_testcases():
    payload = request.get_json(silent=True)
    return respond(
        module_service.reorder_testcases(payload),
        lambda items: [tc.to_dict() for tc in items],
        message="Test cases reordered",
    )


@module_bp.route("/testcases/<testcase_id>", methods=["GET"])
def get_testcase(testcase_id):
    err = invalid_ids(testcase_id=testcase_id)
    if err:
        return err
    return respond(module_service.get_testcase(testcase_id), _testcase)


@module_bp.route("/testcases/<testcase_id>", methods=["PUT"])
def update_testcase(testcase_id):
    err = invalid_ids(testcase_id=testcase_id)
    if err:
        return err
    return respond(module_service.update_testcase(testcase_id, json_body()), _testcase)


@module_bp.route("/testcases/<testcase_id>", methods=["DELETE"])
def delete_testcase(testcase_id):
    err = invalid_ids(testcase_id=testcase_id)
    if err:
        return err
    return respond(module_service.delete_testcase(testcase_id), message="Test case deleted")


@module_bp.route("/testcases/<testcase_id>/image", methods=["POST"])
def upload_testcase_image(testcase_id):
    err = invalid_ids(testcase_id=testcase_id)
    if err:
        return err
    upload = uploaded_file()
    if upload is None:
        return _no_file()
    return respond(module_service.upload_testcase_image(testcase_id, *upload), _testcase, status=201)


@module_bp.route("/testcases/<testcase_id>/image", methods=["DELETE"])
def delete_testcase_image(testcase_id):
    err = invalid_ids(testcase_id=testcase_id)
    if err:
        return err
    return respond(module_service.remove_testcase_image(testcase_id), _testcase, message="Image deleted")
