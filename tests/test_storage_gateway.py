"""Object storage and identity gateways over a fake transport."""

import requests

from conftest import FakeResponse, FakeSession
from qa_checklist.integrations.storage_gateway import StorageGateway, send_with_retry


def _gateway(session):
    return StorageGateway("http://storage.test/storage/v1/", "key", session=session, backoff=(0, 0))


def test_upload_posts_to_bucket_path():
    session = FakeSession()
    result = _gateway(session).upload("test-attachments", "p/r/1_a.png", b"abc", "image/png")
    assert result.ok
    call = session.calls[0]
    assert call["url"] == "http://storage.test/storage/v1/object/test-attachments/p/r/1_a.png"
    assert call["headers"]["Content-Type"] == "image/png"
    assert call["headers"]["Authorization"] == "Bearer key"


def test_public_url():
    gw = _gateway(FakeSession())
    assert gw.public_url("b", "x y.png") == "http://storage.test/storage/v1/object/public/b/x%20y.png"


def test_retries_server_errors_then_succeeds():
    session = FakeSession()
    session.queue += [FakeResponse(503), FakeResponse(502)]
    result = _gateway(session).upload("b", "p.png", b"x", "image/png")
    assert result.ok
    assert len(session.calls) == 3


def test_client_errors_are_not_retried():
    session = FakeSession()
    session.queue.append(FakeResponse(409, {"error": "Duplicate"}))
    result = _gateway(session).upload("b", "p.png", b"x", "image/png")
    assert not result.ok
    assert result.status_code == 409
    assert len(session.calls) == 1


def test_network_errors_never_raise():
    session = FakeSession()
    session.queue += [requests.ConnectionError("down")] * 3
    result = send_with_retry(session, "GET", "http://x", label="Storage", timeout=1, backoff=(0, 0))
    assert not result.ok
    assert "down" in result.error
    assert len(session.calls) == 3


def test_remove_nothing_skips_http():
    session = FakeSession()
    assert _gateway(session).remove("b", []).ok
    assert session.calls == []


def test_ensure_bucket_creates_missing_bucket():
    session = FakeSession()
    session.queue.append(FakeResponse(404, {"error": "not found"}))
    result = _gateway(session).ensure_bucket("test-attachments", file_size_limit=10)
    assert result.ok
    create = session.calls[1]
    assert create["method"] == "POST"
    assert create["json"]["id"] == "test-attachments"
    assert create["json"]["file_size_limit"] == 10


def test_ensure_bucket_existing_is_noop():
    session = FakeSession()
    assert _gateway(session).ensure_bucket("b").ok
    assert [c["method"] for c in session.calls] == ["GET"]


def test_init_storage_cli_creates_all_buckets(app, storage):
    storage.queue += [FakeResponse(404), FakeResponse(200), FakeResponse(404), FakeResponse(200),
                      FakeResponse(404), FakeResponse(200)]
    result = app.test_cli_runner().invoke(args=["init-storage"])
    assert result.exit_code == 0
    created = [c["json"]["id"] for c in storage.calls_to("POST")]
    assert created == ["test-attachments", "module-thumbnails", "testcase-images"]
