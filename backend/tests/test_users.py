"""Test Users 동작과 회귀 시나리오를 검증하는 자동화 테스트입니다."""

from tests.conftest import auth_headers


def test_list_users_any_authenticated_user(client, seed_users):
    headers = auth_headers(client, "user1@test.com")
    resp = client.get("/api/users", headers=headers)
    assert resp.status_code == 200
    emails = {u["email"] for u in resp.json()}
    assert emails == {"admin@test.com", "user1@test.com", "user2@test.com"}
    assert all("password" not in u for u in resp.json())


def test_list_users_requires_auth(client, seed_users):
    resp = client.get("/api/users")
    assert resp.status_code in (401, 403)


def test_get_my_profile(client, seed_users):
    headers = auth_headers(client, "user2@test.com")
    resp = client.get("/api/users/me", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["name"] == "Bob"
    assert resp.json()["user_id"] == seed_users["user2"].user_id


def test_update_my_name(client, db, seed_users):
    headers = auth_headers(client, "user2@test.com")
    resp = client.put("/api/users/me", headers=headers, json={"name": "  Bobby  "})
    assert resp.status_code == 200
    assert resp.json()["name"] == "Bobby"

    db.expire_all()
    assert seed_users["user2"].name == "Bobby"


def test_update_my_name_rejects_blank(client, seed_users):
    headers = auth_headers(client, "user2@test.com")
    assert client.put("/api/users/me", headers=headers, json={"name": ""}).status_code == 422
    assert client.put("/api/users/me", headers=headers, json={"name": "   "}).status_code == 400
