"""Checklist payload parsers: attaching modules, custom testcases, results."""

from qa_checklist.models.checklist import RESULT_STATUSES
from qa_checklist.models.project import PRIORITIES
from qa_checklist.validation.fields import FieldReader


def parse_attach_module(data):
    """Attach a library module (``module_id``) or a custom one (``module_name``)."""
    r = FieldReader(data)
    r.uuid("project_id", label="Project id", required=True)
    r.uuid("module_id", label="Module id")
    r.string("module_name", label="Module name", max_len=255)
    r.string("module_description", label="Module description", max_len=1000)
    r.string("instance_label", label="Instance label", max_len=100)
    r.integer("position", label="Position", minimum=0)
    if "module_id" not in r.clean and not r.clean.get("module_name") and "module_id" not in r.errors:
        r.errors["module_id"] = "Either moduleId or moduleName is required"
    return r.result()


def parse_custom_testcase(data):
    r = FieldReader(data)
    r.string("title", label="Test case title", required=True, max_len=200)
    r.string("description", label="Description", max_len=1000)
    r.choice("priority", PRIORITIES, label="Priority", default="Medium")
    r.uuid_list("tester_ids", label="Tester ids")
    return r.result()


def _result_fields(r):
    r.choice("status", RESULT_STATUSES, label="Status")
    r.string("notes", label="Notes", max_len=2000)
    r.string("tested_by", label="Tested by", max_len=255)


def parse_result_update(data):
    """Status and/or notes and/or tested_by for one result."""
    r = FieldReader(data, partial=True)
    _result_fields(r)
    r.uuid("tester_id", label="Tester id")
    clean = r.result()
    if not ({"status", "notes", "tested_by"} & clean.keys()):
        r.errors["status"] = "Provide at least one of status, notes or testedBy"
    return r.result()


def parse_bulk_result_update(data):
    r = FieldReader(data, partial=True)
    r.uuid_list("result_ids", label="Result ids", min_items=1)
    if "result_ids" not in r.clean and "result_ids" not in r.errors:
        r.errors["result_ids"] = "Result ids is required"
    _result_fields(r)
    clean = r.result()
    if not ({"status", "notes", "tested_by"} & clean.keys()):
        r.errors["status"] = "Provide at least one of status, notes or testedBy"
    return r.result()
