"""Attachment blueprint: image evidence on test results.

    GET    /api/test-results/<rid>/attachments
    POST   /api/test-results/<rid>/attachments          multipart "file", images only, 5 MB
    DELETE /api/test-results/<rid>/attachments/<aid>
    DELETE /api/attachments/<aid>
"""

import logging

from flask import Blueprint

from qa_checklist.blueprints import install_error_handlers, uploaded_file
from qa_checklist.services import attachment_service
from qa_checklist.utils.errors import E, api_error, invalid_ids, respond

logger = logging.getLogger(__name__)

attachment_bp = install_error_handlers(Blueprint("attachments", __name__, url_prefix="/api"))


@attachment_bp.route("/test-results/<result_id>/attachments", methods=["GET"])
def list_attachments(result_id):
    err = invalid_ids(result_id=result_id)
    if err:
        return err
    return respond(attachment_service.list_attachments(result_id),
                   lambda items: [a.to_dict() for a in items])


@attachment_bp.route("/test-results/<result_id>/attachments", methods=["POST"])
def upload_attachment(result_id):
    err = invalid_ids(result_id=result_id)
    if err:
        return err
    upload = uploaded_file()
    if upload is None:
        return api_error(E.VALIDATION_REQUIRED, "No file provided",
                         details={"file": "File is required"})
    return respond(attachment_service.upload_attachment(result_id, *upload),
                   lambda a: a.to_dict(), status=201)


@attachment_bp.route("/test-results/<result_id>/attachments/<attachment_id>", methods=["DELETE"])
def delete_result_attachment(result_id, attachment_id):
    err = invalid_ids(result_id=result_id, attachment_id=attachment_id)
    if err:
        return err
    return respond(attachment_service.delete_attachment(attachment_id, test_result_id=result_id),
                   message="Attachment deleted")


@attachment_bp.route("/attachments/<attachment_id>", methods=["DELETE"])
def delete_attachment(attachment_id):
    err = invalid_ids(attachment_id=attachment_id)
    if err:
        return err
    return respond(attachment_service.delete_attachment(attachment_id), message="Attachment deleted")
