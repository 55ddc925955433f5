"""Tester directory and project assignment."""

from qa_checklist.core.exceptions import ErrorKind
from qa_checklist.models.checklist import ChecklistTestResult
from qa_checklist.models.tester import ProjectTester
from qa_checklist.services import tester_service
from qa_checklist.services.checklist_service import checklist_service


def test_create_tester_defaults_color():
    tester, err = tester_service.create_tester({"name": "Alice"})
    assert err is None
    assert tester.color == "#FF6B35"
    assert tester.email is None


def test_duplicate_email_conflicts(make_tester):
    make_tester("Alice", email="alice@example.com")
    _, err = tester_service.create_tester({"name": "Alice 2", "email": "ALICE@example.com"})
    assert err.kind is ErrorKind.CONFLICT
    assert err.message == "Email already exists"


def test_several_testers_without_email(make_tester):
    make_tester("A")
    make_tester("B")
    testers, err = tester_service.list_testers()
    assert err is None
    assert len(testers) == 2


def test_update_tester(make_tester):
    tester = make_tester("Alice")
    updated, err = tester_service.update_tester(tester.id, {"color": "#00aa00"})
    assert err is None
    assert updated.color == "#00AA00"
    assert updated.name == "Alice"


def test_assign_twice_conflicts(make_project, make_tester):
    project = make_project()
    tester = make_tester(project=project)
    _, err = tester_service.assign_tester(project.id, tester.id)
    assert err.kind is ErrorKind.CONFLICT
    assert err.message == "Tester already assigned to this project"


def test_unassign_is_idempotent(make_project, make_tester):
    project = make_project()
    tester = make_tester(project=project)
    first, err = tester_service.unassign_tester(project.id, tester.id)
    assert err is None and first["removed"] is True
    second, err = tester_service.unassign_tester(project.id, tester.id)
    assert err is None and second["removed"] is False
    assert ProjectTester.query.count() == 0


def test_unassign_keeps_recorded_results(make_project, make_module, make_tester):
    project = make_project()
    tester = make_tester(project=project)
    checklist_service.attach_module({"project_id": project.id, "module_id": make_module(n_cases=2).id})
    tester_service.unassign_tester(project.id, tester.id)
    assert ChecklistTestResult.query.filter_by(tester_id=tester.id).count() == 2


def test_reassign_does_not_duplicate_rows(make_project, make_module, make_tester):
    project = make_project()
    tester = make_tester(project=project)
    checklist_service.attach_module({"project_id": project.id, "module_id": make_module(n_cases=2).id})
    tester_service.unassign_tester(project.id, tester.id)
    _, err = tester_service.assign_tester(project.id, tester.id)
    assert err is None
    assert ChecklistTestResult.query.filter_by(tester_id=tester.id).count() == 2


def test_delete_tester_removes_results(make_project, make_module, make_tester):
    project = make_project()
    tester = make_tester(project=project)
    checklist_service.attach_module({"project_id": project.id, "module_id": make_module(n_cases=2).id})
    _, err = tester_service.delete_tester(tester.id)
    assert err is None
    assert ChecklistTestResult.query.count() == 0
    assert ProjectTester.query.count() == 0


def test_list_project_testers_in_assignment_order(make_project, make_tester):
    project = make_project()
    a = make_tester("A", project=project)
    b = make_tester("B", project=project)
    links, err = tester_service.list_project_testers(project.id)
    assert err is None
    assert [link.tester_id for link in links] == [a.id, b.id]
