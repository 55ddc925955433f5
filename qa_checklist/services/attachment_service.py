"""Attachment service: image evidence on checklist test results.

Objects live in the object store (``ATTACHMENT_BUCKET``); this service owns
the metadata rows and keeps the two in step:
  - upload: store object, then insert row; a failed insert removes the object
  - delete: remove object (failure only logged), then delete row
  - purge:  remove the objects of results about to be cascaded away
"""

from __future__ import annotations

import logging
import time

from flask import current_app
from werkzeug.utils import secure_filename

from qa_checklist.core.exceptions import InternalError, ServiceError, ValidationError
from qa_checklist.models import db
from qa_checklist.models.attachment import TestCaseAttachment
from qa_checklist.models.checklist import ChecklistTestResult
from qa_checklist.integrations.storage_gateway import get_storage_gateway
from qa_checklist.services.helpers.boundary import commit, service_boundary
from qa_checklist.services.helpers.lookups import get_or_raise
from qa_checklist.validation.attachment import ALLOWED_IMAGE_TYPES, validate_attachment

logger = logging.getLogger(__name__)


def _object_name(file_name: str) -> str:
    """``{epoch_ms}_{sanitised name}`` so repeated uploads never collide."""
    safe = secure_filename(file_name) or "upload"
    return f"{int(time.time() * 1000)}_{safe}"


def store_image(bucket: str, folder: str, file_name: str, mime_type: str,
                content: bytes, max_bytes: int) -> tuple[str, str]:
    """Validate and store one image; return ``(storage_path, public_url)``.

    Raises:
        ValidationError: the file is not an accepted image or is too large.
        InternalError: the object store rejected the upload.
    """
    ok, message = validate_attachment(file_name, mime_type, len(content), max_bytes)
    if not ok:
        raise ValidationError(message, details={"file": message})

    gateway = get_storage_gateway()
    path = f"{folder}/{_object_name(file_name)}"
    stored = gateway.upload(bucket, path, content, mime_type.lower())
    if not stored.ok:
        raise InternalError("Failed to upload file", details={"storage": stored.error})
    return path, gateway.public_url(bucket, path)


def remove_objects(bucket: str, paths: list[str]) -> bool:
    """Best-effort object removal. Failures are logged, never raised."""
    if not paths:
        return True
    result = get_storage_gateway().remove(bucket, paths)
    if not result.ok:
        logger.warning("Orphaned %d object(s) in %s: %s", len(paths), bucket, result.error)
    return result.ok


@service_boundary
def upload_attachment(test_result_id: str, file_name: str, mime_type: str,
                      content: bytes) -> TestCaseAttachment:
    max_bytes = current_app.config["ATTACHMENT_MAX_BYTES"]
    ok, message = validate_attachment(file_name, mime_type, len(content), max_bytes)
    if not ok:
        raise ValidationError(message, details={"file": message})

    result = get_or_raise(ChecklistTestResult, test_result_id, "Test result")
    bucket = current_app.config["ATTACHMENT_BUCKET"]
    folder = f"{result.checklist_module.project_id}/{result.id}"
    path, url = store_image(bucket, folder, file_name, mime_type, content, max_bytes)

    attachment = TestCaseAttachment(
        test_result_id=result.id,
        file_name=file_name,
        file_type=mime_type.lower(),
        file_size=len(content),
        file_url=url,
        storage_path=path,
    )
    db.session.add(attachment)
    try:
        commit()
    except ServiceError:
        remove_objects(bucket, [path])
        raise

    logger.info("Attachment uploaded: %s (%d bytes) result=%s",
                file_name, len(content), result.id)
    return attachment


@service_boundary
def list_attachments(test_result_id: str) -> list[TestCaseAttachment]:
    result = get_or_raise(ChecklistTestResult, test_result_id, "Test result")
    return list(result.attachments)


@service_boundary
def delete_attachment(attachment_id: str, test_result_id: str | None = None) -> dict:
    scope = {"test_result_id": test_result_id} if test_result_id else {}
    attachment = get_or_raise(TestCaseAttachment, attachment_id, "Attachment", **scope)
    remove_objects(current_app.config["ATTACHMENT_BUCKET"], [attachment.storage_path])

    db.session.delete(attachment)
    commit()
    logger.info("Attachment deleted: %s", attachment_id)
    return {"id": attachment_id}


@service_boundary
def purge_for_results(result_ids: list[str]) -> int:
    """Remove stored objects for the given results. Rows are left to cascades.

    Returns the number of objects targeted.
    """
    if not result_ids:
        return 0
    paths = [
        a.storage_path
        for a in TestCaseAttachment.query.filter(
            TestCaseAttachment.test_result_id.in_(result_ids)
        ).all()
    ]
    remove_objects(current_app.config["ATTACHMENT_BUCKET"], paths)
    return len(paths)


@service_boundary
def initialize_storage() -> dict:
    """Make sure every bucket the app writes to exists."""
    cfg = current_app.config
    gateway = get_storage_gateway()
    buckets = {
        cfg["ATTACHMENT_BUCKET"]: cfg["ATTACHMENT_MAX_BYTES"],
        cfg["THUMBNAIL_BUCKET"]: cfg["THUMBNAIL_MAX_BYTES"],
        cfg["TESTCASE_IMAGE_BUCKET"]: cfg["TESTCASE_IMAGE_MAX_BYTES"],
    }
    status = {}
    for bucket, limit in buckets.items():
        result = gateway.ensure_bucket(
            bucket, public=True, file_size_limit=limit,
            allowed_mime_types=sorted(ALLOWED_IMAGE_TYPES),
        )
        status[bucket] = "ok" if result.ok else result.error
    failed = [b for b, s in status.items() if s != "ok"]
    if failed:
        raise InternalError("Storage initialization failed", details=status)
    return status
