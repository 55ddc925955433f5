"""Upload checks. Pure predicates: they report, they never raise."""

ALLOWED_IMAGE_TYPES = frozenset({
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/gif",
    "image/webp",
})
MAX_ATTACHMENT_BYTES = 5 * 1024 * 1024


def validate_attachment(file_name, mime_type, size, max_bytes=MAX_ATTACHMENT_BYTES):
    """Check an upload's name, type and size.

    Returns:
        ``(True, None)`` when acceptable, ``(False, message)`` otherwise.
    """
    if not file_name or not str(file_name).strip():
        return False, "File name is required"
    if not mime_type:
        return False, "File type is required"
    if mime_type.lower() not in ALLOWED_IMAGE_TYPES:
        return False, "Only image files are allowed (PNG, JPEG, GIF, WEBP)"
    if size is None or size < 0:
        return False, "File size is unknown"
    if size > max_bytes:
        return False, f"File size must be less than {max_bytes // (1024 * 1024)}MB"
    return True, None
