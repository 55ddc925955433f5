"""Tester payload parsers."""

from email_validator import EmailNotValidError, validate_email

from qa_checklist.models.tester import DEFAULT_TESTER_COLOR
from qa_checklist.validation.fields import _MISSING, FieldReader


def _email(reader):
    raw = reader._raw("email")
    if raw is _MISSING:
        return
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        reader.clean["email"] = None
        return
    if not isinstance(raw, str):
        reader.errors["email"] = "Email must be a string"
        return
    try:
        info = validate_email(raw.strip(), check_deliverability=False)
    except EmailNotValidError:
        reader.errors["email"] = "Invalid email address"
        return
    reader.clean["email"] = info.normalized.lower()


def parse_tester(data, partial=False):
    r = FieldReader(data, partial=partial)
    r.string("name", label="Tester name", required=True, max_len=100)
    _email(r)
    r.color("color", label="Color", default=DEFAULT_TESTER_COLOR)
    return r.result()


def parse_assign(data):
    r = FieldReader(data)
    r.uuid("tester_id", label="Tester id", required=True)
    return r.result()
