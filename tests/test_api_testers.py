"""HTTP contract for testers and project assignment."""

import uuid


def _project(client, name="P"):
    return client.post("/api/projects", json={"name": name}).get_json()["data"]


def _tester(client, name="Alice", **fields):
    res = client.post("/api/testers", json={"name": name, **fields})
    assert res.status_code == 201, res.get_json()
    return res.get_json()["data"]


def test_tester_crud(client):
    tester = _tester(client, email="alice@example.com", color="#123abc")
    assert tester["color"] == "#123ABC"

    res = client.put(f"/api/testers/{tester['id']}", json={"name": "Alice B"})
    assert res.get_json()["data"]["name"] == "Alice B"

    assert [t["id"] for t in client.get("/api/testers").get_json()["data"]] == [tester["id"]]
    assert client.delete(f"/api/testers/{tester['id']}").status_code == 200
    assert client.get(f"/api/testers/{tester['id']}").status_code == 404


def test_duplicate_email_returns_409(client):
    _tester(client, email="a@example.com")
    res = client.post("/api/testers", json={"name": "Other", "email": "a@example.com"})
    assert res.status_code == 409
    assert res.get_json()["error"] == "Email already exists"


def test_invalid_email_returns_400(client):
    res = client.post("/api/testers", json={"name": "X", "email": "nope"})
    assert res.status_code == 400


def test_assign_list_unassign(client):
    project = _project(client)
    tester = _tester(client)
    url = f"/api/projects/{project['id']}/testers"

    res = client.post(url, json={"tester_id": tester["id"]})
    assert res.status_code == 201
    assert res.get_json()["data"]["tester"]["name"] == "Alice"

    assert client.post(url, json={"tester_id": tester["id"]}).status_code == 409

    listed = client.get(url).get_json()["data"]
    assert [a["tester_id"] for a in listed] == [tester["id"]]

    assert client.delete(f"{url}/{tester['id']}").status_code == 200
    assert client.delete(f"{url}/{tester['id']}").status_code == 200
    assert client.get(url).get_json()["data"] == []


def test_assign_requires_tester_id(client):
    project = _project(client)
    res = client.post(f"/api/projects/{project['id']}/testers", json={})
    assert res.status_code == 400
    assert "tester_id" in res.get_json()["details"]


def test_assign_unknown_tester_returns_404(client):
    project = _project(client)
    res = client.post(f"/api/projects/{project['id']}/testers", json={"testerId": str(uuid.uuid4())})
    assert res.status_code == 404
