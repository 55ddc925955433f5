"""
Shared pytest fixtures for the QA Checklist Tracker test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - storage: Fake object store installed on the app (autouse)
    - identity: Fake identity provider token endpoint
    - client: Flask test client (function-scoped)
    - make_project / make_module / make_tester: service-backed factories
"""

import json

import pytest

from qa_checklist import create_app
from qa_checklist.integrations.identity_gateway import IdentityGateway, set_identity_gateway
from qa_checklist.integrations.storage_gateway import StorageGateway, set_storage_gateway
from qa_checklist.models import db as _db
from qa_checklist.services import module_service, project_service, tester_service


# ── Fake HTTP transport ──────────────────────────────────────────────────


class FakeResponse:
    """The slice of ``requests.Response`` the gateways read."""

    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.content = json.dumps(self._payload).encode()
        self.text = self.content.decode()

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return self._payload


class FakeSession:
    """Records every call; answers from ``queue`` first, then ``default``."""

    def __init__(self, default=None):
        self.calls = []
        self.queue = []
        self.default = default or FakeResponse(200, {"Key": "ok"})

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.queue:
            item = self.queue.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return self.default

    def calls_to(self, method):
        return [c for c in self.calls if c["method"] == method]


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture(autouse=True)
def storage(app):
    """No test talks to a real object store."""
    fake = FakeSession()
    set_storage_gateway(
        app, StorageGateway(app.config["STORAGE_URL"], "test-key", session=fake, backoff=()),
    )
    return fake


@pytest.fixture()
def identity(app):
    fake = FakeSession(default=FakeResponse(200, {
        "access_token": "access-123",
        "refresh_token": "refresh-456",
        "user": {"id": "u-1", "email": "qa@example.com"},
    }))
    set_identity_gateway(app, IdentityGateway(app.config["IDP_TOKEN_URL"], "client", "secret",
                                              session=fake))
    yield fake
    app.extensions.pop("identity_gateway", None)


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Convenience factories ────────────────────────────────────────────────


@pytest.fixture()
def make_project():
    def _make(name="Release 1.0", **fields):
        project, err = project_service.create_project({"name": name, **fields})
        assert err is None, err
        return project
    return _make


@pytest.fixture()
def make_module():
    """Module with ``n_cases`` test cases titled TC1..TCn."""
    def _make(name="Login", n_cases=3, **fields):
        module, err = module_service.create_module({"name": name, **fields})
        assert err is None, err
        for i in range(n_cases):
            _, err = module_service.create_testcase(module.id, {"title": f"TC{i + 1}"})
            assert err is None, err
        return module
    return _make


@pytest.fixture()
def make_tester():
    def _make(name="Alice", email=None, project=None):
        tester, err = tester_service.create_tester({"name": name, "email": email})
        assert err is None, err
        if project is not None:
            _, err = tester_service.assign_tester(project.id, tester.id)
            assert err is None, err
        return tester
    return _make
