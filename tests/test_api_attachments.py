"""HTTP contract for result attachments."""

import io
import uuid

import pytest

from conftest import FakeResponse

MB = 1024 * 1024


@pytest.fixture()
def result_id(client):
    project = client.post("/api/projects", json={"name": "Evidence"}).get_json()["data"]
    module = client.post("/api/modules", json={"name": "Upload"}).get_json()["data"]
    client.post(f"/api/modules/{module['id']}/testcases", json={"title": "Attach"})
    tester = client.post("/api/testers", json={"name": "Alice"}).get_json()["data"]
    client.post(f"/api/projects/{project['id']}/testers", json={"testerId": tester["id"]})
    inst = client.post("/api/checklists/modules",
                       json={"projectId": project["id"], "moduleId": module["id"]}).get_json()["data"]
    return inst["results"][0]["id"]


def _upload(client, rid, content, name="shot.png", mime="image/png"):
    return client.post(
        f"/api/test-results/{rid}/attachments",
        data={"file": (io.BytesIO(content), name, mime)},
        content_type="multipart/form-data",
    )


def test_upload_list_delete(client, result_id, storage):
    res = _upload(client, result_id, b"x" * 1024)
    assert res.status_code == 201
    attachment = res.get_json()["data"]
    assert attachment["file_type"] == "image/png"
    assert attachment["file_size"] == 1024
    assert attachment["storage_path"].split("/")[1] == result_id

    listed = client.get(f"/api/test-results/{result_id}/attachments").get_json()["data"]
    assert [a["id"] for a in listed] == [attachment["id"]]

    res = client.delete(f"/api/test-results/{result_id}/attachments/{attachment['id']}")
    assert res.status_code == 200
    assert storage.calls_to("DELETE")[0]["json"] == {"prefixes": [attachment["storage_path"]]}
    assert client.get(f"/api/test-results/{result_id}/attachments").get_json()["data"] == []


def test_four_megabyte_image_accepted(client, result_id):
    assert _upload(client, result_id, b"x" * (4 * MB)).status_code == 201


def test_six_megabyte_image_rejected(client, result_id, storage):
    res = _upload(client, result_id, b"x" * (6 * MB))
    assert res.status_code in (400, 413)
    assert storage.calls_to("POST") == []


def test_just_over_five_megabytes_rejected(client, result_id, storage):
    res = _upload(client, result_id, b"x" * (5 * MB + 1))
    assert res.status_code == 400
    assert res.get_json()["error"] == "File size must be less than 5MB"
    assert storage.calls_to("POST") == []


def test_pdf_rejected(client, result_id, storage):
    res = _upload(client, result_id, b"%PDF-1.7", name="report.pdf", mime="application/pdf")
    assert res.status_code == 400
    assert storage.calls == []


def test_upload_to_unknown_result_returns_404(client):
    assert _upload(client, str(uuid.uuid4()), b"x").status_code == 404


def test_storage_failure_returns_500_and_no_row(client, result_id, storage):
    storage.queue.append(FakeResponse(400, {"error": "bucket not found"}))
    res = _upload(client, result_id, b"x" * 10)
    assert res.status_code == 500
    assert res.get_json()["error"] == "Internal server error"
    assert client.get(f"/api/test-results/{result_id}/attachments").get_json()["data"] == []


def test_delete_by_attachment_id(client, result_id):
    attachment = _upload(client, result_id, b"x").get_json()["data"]
    assert client.delete(f"/api/attachments/{attachment['id']}").status_code == 200
    assert client.delete(f"/api/attachments/{attachment['id']}").status_code == 404


def test_delete_with_wrong_result_returns_404(client, result_id):
    attachment = _upload(client, result_id, b"x").get_json()["data"]
    res = client.delete(f"/api/test-results/{uuid.uuid4()}/attachments/{attachment['id']}")
    assert res.status_code == 404


def test_attachments_purged_with_project(client, result_id, storage):
    attachment = _upload(client, result_id, b"x").get_json()["data"]
    pid = client.get("/api/projects").get_json()["data"][0]["id"]
    client.delete(f"/api/projects/{pid}")
    assert client.delete(f"/api/projects/{pid}/permanent-delete").status_code == 200
    removed = [c["json"]["prefixes"] for c in storage.calls_to("DELETE")]
    assert [attachment["storage_path"]] in removed
