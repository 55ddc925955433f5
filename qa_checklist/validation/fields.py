"""
Field-level readers used by the payload parsers.

``FieldReader`` walks one payload, collects every problem into ``errors``
(field name -> message) and the accepted values into ``clean``. Calling
``result()`` returns ``clean`` or raises one ValidationError carrying all
field errors at once.

Payload keys are accepted in snake_case and, where the web client sends
them that way, camelCase (``due_date`` / ``dueDate``).
"""

import re
import uuid

from qa_checklist.core.exceptions import ValidationError
from qa_checklist.utils.helpers import parse_date

_MISSING = object()
_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


def is_uuid(value) -> bool:
    if not isinstance(value, str):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def _camel(name):
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class FieldReader:
    """Accumulating reader over one payload dict.

    Args:
        data: Decoded JSON object.
        partial: Update mode. Absent fields are skipped and ``required``
                 only means "may not be blank when present".
    """

    def __init__(self, data, partial=False):
        self.data = data if isinstance(data, dict) else {}
        self.partial = partial
        self.errors = {}
        self.clean = {}

    def _raw(self, field):
        for key in (field, _camel(field)):
            if key in self.data:
                return self.data[key]
        return _MISSING

    def _skip(self, raw, field, required, label):
        """True when there is nothing to read; records 'required' errors."""
        if raw is _MISSING or raw is None or (isinstance(raw, str) and not raw.strip()):
            if required and (not self.partial or raw is not _MISSING):
                self.errors[field] = f"{label} is required"
            return True
        return False

    def string(self, field, *, label, required=False, max_len=None, default=_MISSING):
        raw = self._raw(field)
        if self._skip(raw, field, required, label):
            if raw is not _MISSING and not required:
                self.clean[field] = None
            elif default is not _MISSING and not self.partial:
                self.clean[field] = default
            return
        if not isinstance(raw, str):
            self.errors[field] = f"{label} must be a string"
            return
        value = raw.strip()
        if max_len is not None and len(value) > max_len:
            self.errors[field] = f"{label} must be at most {max_len} characters"
            return
        self.clean[field] = value

    def choice(self, field, choices, *, label, default=_MISSING):
        raw = self._raw(field)
        if self._skip(raw, field, False, label):
            if default is not _MISSING and not self.partial:
                self.clean[field] = default
            return
        if raw not in choices:
            self.errors[field] = f"{label} must be one of: {', '.join(choices)}"
            return
        self.clean[field] = raw

    def date(self, field, *, label):
        raw = self._raw(field)
        if self._skip(raw, field, False, label):
            if raw is not _MISSING:
                self.clean[field] = None
            return
        try:
            self.clean[field] = parse_date(raw)
        except ValueError:
            self.errors[field] = f"{label} must be a date in YYYY-MM-DD format"

    def uuid(self, field, *, label, required=False):
        raw = self._raw(field)
        if self._skip(raw, field, required, label):
            return
        if not is_uuid(raw):
            self.errors[field] = f"{label} must be a valid UUID"
            return
        self.clean[field] = raw

    def uuid_list(self, field, *, label, required=False, min_items=0):
        raw = self._raw(field)
        if raw is _MISSING or raw is None:
            if required and not self.partial:
                self.errors[field] = f"{label} is required"
            return
        if not isinstance(raw, list):
            self.errors[field] = f"{label} must be a list"
            return
        if len(raw) < min_items:
            self.errors[field] = f"{label} must contain at least {min_items} item(s)"
            return
        bad = [v for v in raw if not is_uuid(v)]
        if bad:
            self.errors[field] = f"{label} must contain valid UUIDs"
            return
        self.clean[field] = list(raw)

    def integer(self, field, *, label, minimum=None):
        raw = self._raw(field)
        if raw is _MISSING or raw is None:
            return
        if isinstance(raw, bool) or not isinstance(raw, int):
            self.errors[field] = f"{label} must be an integer"
            return
        if minimum is not None and raw < minimum:
            self.errors[field] = f"{label} must be at least {minimum}"
            return
        self.clean[field] = raw

    def color(self, field, *, label, default=_MISSING):
        raw = self._raw(field)
        if self._skip(raw, field, False, label):
            if default is not _MISSING and not self.partial:
                self.clean[field] = default
            return
        if not isinstance(raw, str) or not _HEX_COLOR.match(raw):
            self.errors[field] = f"{label} must be a hex color like #FF6B35"
            return
        self.clean[field] = raw.upper()

    def result(self, message="Invalid input"):
        if self.errors:
            raise ValidationError(message, details=dict(self.errors))
        return self.clean
