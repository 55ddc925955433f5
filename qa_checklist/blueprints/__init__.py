"""HTTP blueprints. Handlers validate ids, call one service, shape JSON."""

import logging

from flask import request
from werkzeug.exceptions import HTTPException

from qa_checklist.core.exceptions import ServiceError
from qa_checklist.utils.errors import E, api_error, error_response

logger = logging.getLogger(__name__)


def install_error_handlers(bp):
    """Shared blueprint error handlers.

    ServiceError raised in a handler (e.g. a malformed JSON body) gets the
    same status mapping as a tagged service result; anything else is a 500.
    """

    @bp.errorhandler(ServiceError)
    def _handle_service_error(error: ServiceError):
        return error_response(error)

    @bp.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        if isinstance(error, HTTPException):
            return api_error(E.VALIDATION_INVALID, error.description or error.name,
                             status=error.code or 400)
        logger.exception("Unexpected error in %s endpoint=%s", bp.name, request.endpoint)
        return api_error(E.INTERNAL, "Internal server error", status=500)

    return bp


def uploaded_file():
    """Return ``(file_name, mime_type, content)`` from the multipart ``file`` field,
    or None when no file was sent."""
    storage = request.files.get("file")
    if storage is None or not storage.filename:
        return None
    return storage.filename, storage.mimetype or "", storage.read()
