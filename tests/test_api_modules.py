"""HTTP contract for the module library and test cases."""

import io
import uuid


def _module(client, name, cases=()):
    res = client.post("/api/modules", json={"name": name, "tags": ["smoke"]})
    assert res.status_code == 201, res.get_json()
    module = res.get_json()["data"]
    for title in cases:
        r = client.post(f"/api/modules/{module['id']}/testcases", json={"title": title})
        assert r.status_code == 201
    return module


def test_list_modules_with_testcases(client):
    _module(client, "Login", cases=("Valid login", "Wrong password"))
    res = client.get("/api/modules")
    assert res.status_code == 200
    data = res.get_json()["data"]
    assert [tc["title"] for tc in data[0]["testcases"]] == ["Valid login", "Wrong password"]


def test_list_modules_without_testcases(client):
    _module(client, "Login", cases=("Valid login",))
    data = client.get("/api/modules?include_testcases=false").get_json()["data"]
    assert "testcases" not in data[0]


def test_duplicate_module_returns_409(client):
    _module(client, "Login")
    res = client.post("/api/modules", json={"name": "Login"})
    assert res.status_code == 409


def test_reorder_modules_endpoint(client):
    a = _module(client, "A")
    b = _module(client, "B")
    c = _module(client, "C")
    res = client.put("/api/modules/reorder", json={"ids": [c["id"], a["id"], b["id"]]})
    assert res.status_code == 200
    assert [m["name"] for m in res.get_json()["data"]] == ["C", "A", "B"]


def test_reorder_modules_unknown_returns_404(client):
    a = _module(client, "A")
    res = client.put("/api/modules/reorder", json=[a["id"], str(uuid.uuid4())])
    assert res.status_code == 404


def test_reorder_testcases_endpoint(client):
    module = _module(client, "Login", cases=("one", "two", "three"))
    cases = client.get(f"/api/modules/{module['id']}/testcases").get_json()["data"]
    id1, id2, id3 = [tc["id"] for tc in cases]

    res = client.put("/api/testcases/reorder", json={"testCases": [id3, id1, id2]})
    assert res.status_code == 200
    assert [tc["title"] for tc in res.get_json()["data"]] == ["three", "one", "two"]


def test_reorder_testcases_duplicates_return_400(client):
    module = _module(client, "Login", cases=("one",))
    tc = client.get(f"/api/modules/{module['id']}/testcases").get_json()["data"][0]
    res = client.put("/api/testcases/reorder", json=[tc["id"], tc["id"]])
    assert res.status_code == 400


def test_testcase_update_and_delete(client):
    module = _module(client, "Login", cases=("one",))
    tc = client.get(f"/api/modules/{module['id']}/testcases").get_json()["data"][0]

    res = client.put(f"/api/testcases/{tc['id']}", json={"priority": "High"})
    assert res.status_code == 200
    assert res.get_json()["data"]["priority"] == "High"

    assert client.delete(f"/api/testcases/{tc['id']}").status_code == 200
    assert client.get(f"/api/testcases/{tc['id']}").status_code == 404


def test_delete_module(client):
    module = _module(client, "Login", cases=("one",))
    assert client.delete(f"/api/modules/{module['id']}").status_code == 200
    assert client.get(f"/api/modules/{module['id']}").status_code == 404


def test_thumbnail_upload(client, storage):
    module = _module(client, "Login")
    res = client.post(
        f"/api/modules/{module['id']}/thumbnail",
        data={"file": (io.BytesIO(b"png-bytes"), "logo.png", "image/png")},
        content_type="multipart/form-data",
    )
    assert res.status_code == 201
    assert res.get_json()["data"]["thumbnail_url"].startswith("http://storage.test/")
    assert len(storage.calls_to("POST")) == 1


def test_thumbnail_without_file_returns_400(client):
    module = _module(client, "Login")
    res = client.post(f"/api/modules/{module['id']}/thumbnail", data={"note": "no file"},
                      content_type="multipart/form-data")
    assert res.status_code == 400


def test_testcase_image_rejects_non_image(client, storage):
    module = _module(client, "Login", cases=("one",))
    tc = client.get(f"/api/modules/{module['id']}/testcases").get_json()["data"][0]
    res = client.post(
        f"/api/testcases/{tc['id']}/image",
        data={"file": (io.BytesIO(b"%PDF"), "manual.pdf", "application/pdf")},
        content_type="multipart/form-data",
    )
    assert res.status_code == 400
    assert storage.calls == []


def test_delete_thumbnail_endpoint(client, storage):
    module = _module(client, "Login")
    res = client.post(
        f"/api/modules/{module['id']}/thumbnail",
        data={"file": (io.BytesIO(b"png-bytes"), "logo.png", "image/png")},
        content_type="multipart/form-data",
    )
    path = res.get_json()["data"]["thumbnail_file_name"]

    res = client.delete("/api/modules/thumbnail", query_string={"filePath": path})
    assert res.status_code == 200
    assert res.get_json()["success"] is True
    assert storage.calls_to("DELETE")[0]["json"] == {"prefixes": [path]}
    assert client.get(f"/api/modules/{module['id']}").get_json()["data"]["thumbnail_url"] is None


def test_delete_thumbnail_without_path_returns_400(client, storage):
    res = client.delete("/api/modules/thumbnail")
    assert res.status_code == 400
    assert storage.calls == []


def test_delete_testcase_image_endpoint(client, storage):
    module = _module(client, "Login", cases=("one",))
    tc = client.get(f"/api/modules/{module['id']}/testcases").get_json()["data"][0]
    res = client.post(
        f"/api/testcases/{tc['id']}/image",
        data={"file": (io.BytesIO(b"jpg-bytes"), "step.jpg", "image/jpeg")},
        content_type="multipart/form-data",
    )
    assert res.status_code == 201
    path = res.get_json()["data"]["image_file_name"]

    res = client.delete(f"/api/testcases/{tc['id']}/image")
    assert res.status_code == 200
    assert res.get_json()["data"]["image_url"] is None
    assert storage.calls_to("DELETE")[0]["json"] == {"prefixes": [path]}


def test_delete_testcase_image_bad_id_returns_400(client):
    assert client.delete("/api/testcases/not-a-uuid/image").status_code == 400


def test_delete_testcase_image_unknown_returns_404(client):
    assert client.delete(f"/api/testcases/{uuid.uuid4()}/image").status_code == 404
