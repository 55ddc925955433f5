"""Module library: CRUD, ordering, test cases and images."""

import uuid

from conftest import FakeResponse

from qa_checklist.core.exceptions import ErrorKind
from qa_checklist.models import db as _db
from qa_checklist.models.checklist import ProjectChecklistModule
from qa_checklist.models.module import Module, TestCase
from qa_checklist.services import module_service
from qa_checklist.services.checklist_service import checklist_service

PNG = b"\x89PNG\r\n\x1a\n" + b"0" * 64


def _order():
    modules, _ = module_service.list_modules()
    return [m.name for m in modules]


def test_create_module_appends_to_library(make_module):
    make_module("Login", n_cases=0)
    make_module("Cart", n_cases=0)
    assert _order() == ["Login", "Cart"]


def test_create_module_at_position_shifts_others(make_module):
    make_module("Login", n_cases=0)
    make_module("Cart", n_cases=0)
    module, err = module_service.create_module({"name": "Search", "order_index": 0})
    assert err is None
    assert module.order_index == 0
    assert _order() == ["Search", "Login", "Cart"]


def test_duplicate_module_name_conflicts(make_module):
    make_module("Login", n_cases=0)
    _, err = module_service.create_module({"name": "Login"})
    assert err.kind is ErrorKind.CONFLICT
    assert err.message == "A module with this name already exists"


def test_update_module_tags(make_module):
    module = make_module(n_cases=0)
    updated, err = module_service.update_module(module.id, {"tags": ["smoke", "ui"]})
    assert err is None
    assert updated.tags == ["smoke", "ui"]


def test_reorder_modules(make_module):
    a = make_module("A", n_cases=0)
    b = make_module("B", n_cases=0)
    c = make_module("C", n_cases=0)
    modules, err = module_service.reorder_modules([c.id, a.id, b.id])
    assert err is None
    assert [m.id for m in modules] == [c.id, a.id, b.id]
    assert [m.order_index for m in modules] == [0, 1, 2]


def test_reorder_modules_unknown_id_not_found(make_module):
    a = make_module("A", n_cases=0)
    b = make_module("B", n_cases=0)
    _, err = module_service.reorder_modules([b.id, str(uuid.uuid4()), a.id])
    assert err.kind is ErrorKind.NOT_FOUND
    _db.session.expire_all()
    assert _order() == ["A", "B"]


def test_reorder_modules_is_idempotent(make_module):
    a = make_module("A", n_cases=0)
    b = make_module("B", n_cases=0)
    c = make_module("C", n_cases=0)
    first, err = module_service.reorder_modules([b.id, c.id, a.id])
    assert err is None
    first = [(m.id, m.order_index) for m in first]
    second, err = module_service.reorder_modules([b.id, c.id, a.id])
    assert err is None
    assert [(m.id, m.order_index) for m in second] == first


def test_reorder_modules_duplicate_ids_rejected(make_module):
    a = make_module("A", n_cases=0)
    _, err = module_service.reorder_modules([a.id, a.id])
    assert err.kind is ErrorKind.VALIDATION_FAILED


def test_reorder_modules_empty_is_noop(make_module):
    make_module("A", n_cases=0)
    modules, err = module_service.reorder_modules([])
    assert err is None
    assert [m.name for m in modules] == ["A"]


def test_delete_module_compacts_library_and_keeps_instances(make_project, make_module):
    project = make_project()
    make_module("A", n_cases=0)
    b = make_module("B", n_cases=2)
    make_module("C", n_cases=0)
    _, err = checklist_service.attach_module({"project_id": project.id, "module_id": b.id})
    assert err is None

    _, err = module_service.delete_module(b.id)
    assert err is None
    modules, _ = module_service.list_modules()
    assert [(m.name, m.order_index) for m in modules] == [("A", 0), ("C", 1)]
    assert TestCase.query.count() == 0

    instance = ProjectChecklistModule.query.one()
    assert instance.module_id is None
    assert instance.module_name == "B"


# ── Test cases ───────────────────────────────────────────────────────────


def test_testcases_are_appended_in_order(make_module):
    module = make_module(n_cases=3)
    cases, err = module_service.list_testcases(module.id)
    assert err is None
    assert [(tc.title, tc.order_index) for tc in cases] == [("TC1", 0), ("TC2", 1), ("TC3", 2)]


def test_reorder_testcases(make_module):
    module = make_module(n_cases=3)
    tc1, tc2, tc3 = module.testcases
    cases, err = module_service.reorder_testcases([tc3.id, tc1.id, tc2.id])
    assert err is None
    assert [tc.id for tc in cases] == [tc3.id, tc1.id, tc2.id]
    assert [tc.order_index for tc in cases] == [0, 1, 2]


def test_reorder_testcases_across_modules_rejected(make_module):
    a = make_module("A", n_cases=1)
    b = make_module("B", n_cases=1)
    _, err = module_service.reorder_testcases([a.testcases[0].id, b.testcases[0].id])
    assert err.kind is ErrorKind.VALIDATION_FAILED


def test_reorder_testcases_unknown_id(make_module):
    module = make_module(n_cases=1)
    _, err = module_service.reorder_testcases([module.testcases[0].id, str(uuid.uuid4())])
    assert err.kind is ErrorKind.NOT_FOUND


def test_rejected_testcase_reorder_changes_nothing(make_module):
    a = make_module("A", n_cases=2)
    b = make_module("B", n_cases=1)
    a2 = a.testcases[1].id
    _, err = module_service.reorder_testcases([a2, b.testcases[0].id])
    assert err.kind is ErrorKind.VALIDATION_FAILED
    _db.session.expire_all()
    cases, _ = module_service.list_testcases(a.id)
    assert [(tc.title, tc.order_index) for tc in cases] == [("TC1", 0), ("TC2", 1)]


def test_reorder_testcases_is_idempotent(make_module):
    module = make_module(n_cases=3)
    tc1, tc2, tc3 = [tc.id for tc in module.testcases]
    first, err = module_service.reorder_testcases([tc2, tc3, tc1])
    assert err is None
    first = [(tc.id, tc.order_index) for tc in first]
    second, err = module_service.reorder_testcases([tc2, tc3, tc1])
    assert err is None
    assert [(tc.id, tc.order_index) for tc in second] == first
    assert first == [(tc2, 0), (tc3, 1), (tc1, 2)]


def test_delete_testcase_compacts_siblings(make_module):
    module = make_module(n_cases=3)
    middle = module.testcases[1]
    _, err = module_service.delete_testcase(middle.id)
    assert err is None
    cases, _ = module_service.list_testcases(module.id)
    assert [(tc.title, tc.order_index) for tc in cases] == [("TC1", 0), ("TC3", 1)]


def test_create_testcase_for_missing_module():
    _, err = module_service.create_testcase(str(uuid.uuid4()), {"title": "Orphan"})
    assert err.kind is ErrorKind.NOT_FOUND


# ── Images ───────────────────────────────────────────────────────────────


def test_thumbnail_upload_stores_object(make_module, storage):
    module = make_module(n_cases=0)
    updated, err = module_service.upload_module_thumbnail(module.id, "logo.png", "image/png", PNG)
    assert err is None
    assert updated.thumbnail_file_name.startswith(f"{module.id}/")
    assert "/object/public/module-thumbnails/" in updated.thumbnail_url
    assert storage.calls_to("POST")[0]["url"].startswith("http://storage.test/storage/v1/object/module-thumbnails/")


def test_thumbnail_over_two_megabytes_rejected(make_module, storage):
    module = make_module(n_cases=0)
    _, err = module_service.upload_module_thumbnail(
        module.id, "logo.png", "image/png", b"0" * (2 * 1024 * 1024 + 1),
    )
    assert err.kind is ErrorKind.VALIDATION_FAILED
    assert storage.calls == []


def test_replacing_thumbnail_removes_previous_object(make_module, storage):
    module = make_module(n_cases=0)
    first, _ = module_service.upload_module_thumbnail(module.id, "a.png", "image/png", PNG)
    old_path = first.thumbnail_file_name
    module_service.upload_module_thumbnail(module.id, "b.png", "image/png", PNG)
    removed = storage.calls_to("DELETE")
    assert removed and removed[0]["json"] == {"prefixes": [old_path]}


def test_testcase_image_upload(make_module):
    module = make_module(n_cases=1)
    tc, err = module_service.upload_testcase_image(module.testcases[0].id, "step.jpg", "image/jpeg", PNG)
    assert err is None
    assert "/testcase-images/" in tc.image_url
    assert _db.session.get(Module, module.id).testcases[0].image_url == tc.image_url


def test_replacing_testcase_image_removes_previous_object(make_module, storage):
    tc_id = make_module(n_cases=1).testcases[0].id
    first, _ = module_service.upload_testcase_image(tc_id, "a.png", "image/png", PNG)
    old_path = first.image_file_name
    assert old_path.startswith(f"{first.module_id}/")

    second, err = module_service.upload_testcase_image(tc_id, "b.png", "image/png", PNG)
    assert err is None
    assert second.image_file_name != old_path
    removed = storage.calls_to("DELETE")
    assert [c["json"] for c in removed] == [{"prefixes": [old_path]}]
    assert removed[0]["url"].endswith("/object/testcase-images")


def test_remove_testcase_image_clears_url(make_module, storage):
    tc_id = make_module(n_cases=1).testcases[0].id
    stored, _ = module_service.upload_testcase_image(tc_id, "a.png", "image/png", PNG)
    path = stored.image_file_name

    tc, err = module_service.remove_testcase_image(tc_id)
    assert err is None
    assert (tc.image_url, tc.image_file_name) == (None, None)
    assert storage.calls_to("DELETE")[0]["json"] == {"prefixes": [path]}


def test_remove_testcase_image_clears_url_when_storage_fails(make_module, storage):
    tc_id = make_module(n_cases=1).testcases[0].id
    module_service.upload_testcase_image(tc_id, "a.png", "image/png", PNG)
    storage.queue.append(FakeResponse(400, {"error": "denied"}))

    tc, err = module_service.remove_testcase_image(tc_id)
    assert err is None
    assert tc.image_url is None


def test_remove_testcase_image_missing_testcase():
    _, err = module_service.remove_testcase_image(str(uuid.uuid4()))
    assert err.kind is ErrorKind.NOT_FOUND


def test_deleting_testcase_removes_its_image(make_module, storage):
    tc_id = make_module(n_cases=1).testcases[0].id
    stored, _ = module_service.upload_testcase_image(tc_id, "a.png", "image/png", PNG)
    path = stored.image_file_name

    _, err = module_service.delete_testcase(tc_id)
    assert err is None
    assert {"prefixes": [path]} in [c["json"] for c in storage.calls_to("DELETE")]


def test_remove_module_thumbnail_clears_modules(make_module, storage):
    module = make_module(n_cases=0)
    stored, _ = module_service.upload_module_thumbnail(module.id, "logo.png", "image/png", PNG)
    path = stored.thumbnail_file_name

    data, err = module_service.remove_module_thumbnail(path)
    assert err is None
    assert data == {"file_path": path, "modules_cleared": 1}
    refreshed = _db.session.get(Module, module.id)
    assert (refreshed.thumbnail_url, refreshed.thumbnail_file_name) == (None, None)
    assert storage.calls_to("DELETE")[0]["url"].endswith("/object/module-thumbnails")


def test_remove_module_thumbnail_requires_path(storage):
    _, err = module_service.remove_module_thumbnail("  ")
    assert err.kind is ErrorKind.VALIDATION_FAILED
    assert storage.calls == []


def test_remove_module_thumbnail_storage_failure(make_module, storage):
    module = make_module(n_cases=0)
    stored, _ = module_service.upload_module_thumbnail(module.id, "logo.png", "image/png", PNG)
    storage.queue.append(FakeResponse(400, {"error": "denied"}))

    _, err = module_service.remove_module_thumbnail(stored.thumbnail_file_name)
    assert err.kind is ErrorKind.INTERNAL
    assert _db.session.get(Module, module.id).thumbnail_file_name == stored.thumbnail_file_name
