"""Module library service: modules, their test cases, ordering and images."""

from __future__ import annotations

import logging

from flask import current_app

from qa_checklist.core.exceptions import ConflictError, InternalError, NotFoundError, ValidationError
from qa_checklist.integrations.storage_gateway import get_storage_gateway
from qa_checklist.models import db
from qa_checklist.models.module import Module, TestCase
from qa_checklist.services.attachment_service import purge_for_results, remove_objects, store_image
from qa_checklist.services.helpers.boundary import commit, service_boundary
from qa_checklist.services.helpers.lookups import get_or_raise
from qa_checklist.services.helpers.materialize import compact_items
from qa_checklist.services.helpers.ordering import (
    apply_positions,
    compact,
    find_unknown,
    insert_at,
    plan_positions,
)
from qa_checklist.validation.module import parse_module, parse_reorder, parse_testcase

logger = logging.getLogger(__name__)


def _ensure_unique_name(name: str, exclude_id: str | None = None) -> None:
    query = Module.query.filter(Module.name == name)
    if exclude_id:
        query = query.filter(Module.id != exclude_id)
    if query.first():
        raise ConflictError("A module with this name already exists", details={"name": name})


def _library() -> list[Module]:
    return Module.query.order_by(Module.order_index, Module.created_at).all()


def _purge_results(result_ids: list[str]) -> None:
    """Drop stored evidence of results that are about to cascade away."""
    _, err = purge_for_results(result_ids)
    if err:
        raise err


# ═════════════════════════════════════════════════════════════════════════
# Modules
# ═════════════════════════════════════════════════════════════════════════


@service_boundary
def list_modules() -> list[Module]:
    """All modules in library order; test cases come ordered via the relationship."""
    return _library()


@service_boundary
def get_module(module_id: str) -> Module:
    return get_or_raise(Module, module_id, "Module")


@service_boundary
def create_module(data: dict) -> Module:
    clean = parse_module(data)
    _ensure_unique_name(clean["name"])
    position = clean.pop("order_index", None)

    module = Module(**clean)
    insert_at(_library(), module, position)
    db.session.add(module)
    commit()
    logger.info("Module created: %s at position %d", module.name, module.order_index)
    return module


@service_boundary
def update_module(module_id: str, data: dict) -> Module:
    module = get_or_raise(Module, module_id, "Module")
    clean = parse_module(data, partial=True)
    clean.pop("order_index", None)  # position changes go through reorder
    if "name" in clean and clean["name"] != module.name:
        _ensure_unique_name(clean["name"], exclude_id=module.id)

    for attr, value in clean.items():
        setattr(module, attr, value)
    commit()
    logger.info("Module updated: %s fields=%s", module.id, sorted(clean))
    return module


@service_boundary
def delete_module(module_id: str) -> dict:
    """Delete a module with its test cases. Attached checklist instances keep
    their name snapshot and lose the library link."""
    module = get_or_raise(Module, module_id, "Module")
    thumbnail = module.thumbnail_file_name
    _purge_results([r.id for tc in module.testcases for r in tc.results])
    db.session.delete(module)
    db.session.flush()
    compact(_library())
    commit()

    if thumbnail:
        remove_objects(current_app.config["THUMBNAIL_BUCKET"], [thumbnail])
    logger.info("Module deleted: %s", module_id)
    return {"id": module_id}


@service_boundary
def reorder_modules(payload) -> list[Module]:
    ordered_ids = parse_reorder(payload)
    modules = _library()
    if not ordered_ids:
        return modules

    positions = plan_positions(ordered_ids, [m.id for m in modules])
    unknown = find_unknown(ordered_ids, [m.id for m in modules])
    if unknown:
        raise NotFoundError("Module", unknown[0])

    changed = apply_positions(modules, positions)
    commit()
    logger.info("Modules reordered: %d moved", changed)
    return _library()


@service_boundary
def upload_module_thumbnail(module_id: str, file_name: str, mime_type: str,
                            content: bytes) -> Module:
    module = get_or_raise(Module, module_id, "Module")
    bucket = current_app.config["THUMBNAIL_BUCKET"]
    path, url = store_image(
        bucket, module.id, file_name, mime_type, content,
        current_app.config["THUMBNAIL_MAX_BYTES"],
    )
    previous = module.thumbnail_file_name
    module.thumbnail_url = url
    module.thumbnail_file_name = path
    commit()

    if previous and previous != path:
        remove_objects(bucket, [previous])
    logger.info("Module thumbnail stored: %s -> %s", module.id, path)
    return module


# ═════════════════════════════════════════════════════════════════════════
# Test cases
# ═════════════════════════════════════════════════════════════════════════


@service_boundary
def list_testcases(module_id: str) -> list[TestCase]:
    module = get_or_raise(Module, module_id, "Module")
    return list(module.testcases)


@service_boundary
def get_testcase(testcase_id: str) -> TestCase:
    return get_or_raise(TestCase, testcase_id, "Test case")


@service_boundary
def create_testcase(module_id: str, data: dict) -> TestCase:
    module = get_or_raise(Module, module_id, "Module")
    clean = parse_testcase(data)
    testcase = TestCase(module_id=module.id, **clean)
    testcase.order_index = len(module.testcases)
    db.session.add(testcase)
    commit()
    logger.info("Test case created: %s in module %s", testcase.id, module.id)
    return testcase


@service_boundary
def update_testcase(testcase_id: str, data: dict) -> TestCase:
    testcase = get_or_raise(TestCase, testcase_id, "Test case")
    clean = parse_testcase(data, partial=True)
    for attr, value in clean.items():
        setattr(testcase, attr, value)
    commit()
    return testcase


@service_boundary
def delete_testcase(testcase_id: str) -> dict:
    """Delete a test case; attached checklist instances close the gap it leaves."""
    testcase = get_or_raise(TestCase, testcase_id, "Test case")
    module = testcase.module
    instances = list(module.checklist_instances)
    image = testcase.image_file_name
    _purge_results([r.id for r in testcase.results])
    db.session.delete(testcase)
    db.session.flush()
    db.session.refresh(module)
    compact(module.testcases)
    for instance in instances:
        db.session.expire(instance, ["results"])
        compact_items(instance)
    commit()

    if image:
        remove_objects(current_app.config["TESTCASE_IMAGE_BUCKET"], [image])
    logger.info("Test case deleted: %s (%d checklist instances renumbered)",
                testcase_id, len(instances))
    return {"id": testcase_id}


@service_boundary
def reorder_testcases(payload) -> list[TestCase]:
    """Reorder test cases of one module; every id must belong to that module."""
    ordered_ids = parse_reorder(payload)
    if not ordered_ids:
        return []
    plan_positions(ordered_ids, [])  # duplicate check before touching the db

    found = TestCase.query.filter(TestCase.id.in_(ordered_ids)).all()
    unknown = find_unknown(ordered_ids, [tc.id for tc in found])
    if unknown:
        raise NotFoundError("Test case", unknown[0])
    module_ids = {tc.module_id for tc in found}
    if len(module_ids) > 1:
        raise ValidationError(
            "All test cases must belong to the same module",
            details={"ids": "Test cases span more than one module"},
        )

    module = db.session.get(Module, module_ids.pop())
    positions = plan_positions(ordered_ids, [tc.id for tc in module.testcases])
    apply_positions(module.testcases, positions)
    commit()
    db.session.refresh(module)
    return list(module.testcases)


@service_boundary
def upload_testcase_image(testcase_id: str, file_name: str, mime_type: str,
                          content: bytes) -> TestCase:
    testcase = get_or_raise(TestCase, testcase_id, "Test case")
    bucket = current_app.config["TESTCASE_IMAGE_BUCKET"]
    path, url = store_image(
        bucket, testcase.module_id, file_name, mime_type, content,
        current_app.config["TESTCASE_IMAGE_MAX_BYTES"],
    )
    previous = testcase.image_file_name
    testcase.image_url = url
    testcase.image_file_name = path
    commit()

    if previous and previous != path:
        remove_objects(bucket, [previous])
    logger.info("Test case image stored: %s -> %s", testcase.id, path)
    return testcase


@service_boundary
def remove_testcase_image(testcase_id: str) -> TestCase:
    """Drop a test case's image. The URL is cleared even if the object store
    refuses the removal."""
    testcase = get_or_raise(TestCase, testcase_id, "Test case")
    if testcase.image_file_name:
        remove_objects(current_app.config["TESTCASE_IMAGE_BUCKET"], [testcase.image_file_name])
    testcase.image_url = None
    testcase.image_file_name = None
    commit()
    logger.info("Test case image removed: %s", testcase.id)
    return testcase


@service_boundary
def remove_module_thumbnail(file_path: str | None) -> dict:
    """Delete a stored thumbnail by object path.

    Modules still pointing at the object lose their thumbnail. Unlike the
    best-effort cleanup elsewhere, a storage failure here is reported.
    """
    if not file_path or not file_path.strip():
        raise ValidationError("No file path provided", details={"file_path": "File path is required"})
    file_path = file_path.strip()

    removed = get_storage_gateway().remove(current_app.config["THUMBNAIL_BUCKET"], [file_path])
    if not removed.ok:
        raise InternalError("Failed to delete thumbnail", details={"storage": removed.error})

    modules = Module.query.filter_by(thumbnail_file_name=file_path).all()
    for module in modules:
        module.thumbnail_url = None
        module.thumbnail_file_name = None
    commit()
    logger.info("Module thumbnail removed: %s (%d modules cleared)", file_path, len(modules))
    return {"file_path": file_path, "modules_cleared": len(modules)}
