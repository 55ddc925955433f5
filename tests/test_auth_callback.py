"""Identity provider callback and sign-out."""

from conftest import FakeResponse


def test_callback_exchanges_code_and_redirects(client, identity):
    res = client.get("/auth/callback?code=abc&next=/projects/42")
    assert res.status_code == 302
    assert res.headers["Location"].endswith("/projects/42")

    call = identity.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "http://idp.test/auth/v1/token"
    assert call["data"]["code"] == "abc"
    assert call["data"]["grant_type"] == "authorization_code"

    with client.session_transaction() as sess:
        assert sess["access_token"] == "access-123"
        assert sess["user"]["email"] == "qa@example.com"


def test_callback_defaults_to_projects(client, identity):
    res = client.get("/auth/callback?code=abc")
    assert res.headers["Location"].endswith("/projects")


def test_callback_ignores_offsite_next(client, identity):
    res = client.get("/auth/callback?code=abc&next=//evil.example.com/x")
    assert res.headers["Location"].endswith("/projects")
    res = client.get("/auth/callback?code=abc&next=https://evil.example.com")
    assert "evil" not in res.headers["Location"]


def test_callback_without_code_goes_to_login(client, identity):
    res = client.get("/auth/callback")
    assert res.status_code == 302
    assert res.headers["Location"].endswith("/login")
    assert identity.calls == []


def test_failed_exchange_redirects_with_error(client, identity):
    identity.queue.append(FakeResponse(400, {"error": "invalid_grant"}))
    res = client.get("/auth/callback?code=bad")
    assert res.status_code == 302
    assert "/login?error=" in res.headers["Location"]
    with client.session_transaction() as sess:
        assert "access_token" not in sess


def test_token_response_without_access_token_fails(client, identity):
    identity.queue.append(FakeResponse(200, {"token_type": "bearer"}))
    res = client.get("/auth/callback?code=abc")
    assert "/login?error=" in res.headers["Location"]


def test_created_project_records_signed_in_user(client, identity):
    client.get("/auth/callback?code=abc")
    res = client.post("/api/projects", json={"name": "Owned"})
    assert res.get_json()["data"]["created_by"] == "qa@example.com"


def test_signout_clears_session(client, identity):
    client.get("/auth/callback?code=abc")
    res = client.post("/auth/signout")
    assert res.status_code == 200
    with client.session_transaction() as sess:
        assert "access_token" not in sess
