import uuid

import pytest


pytestmark = pytest.mark.asyncio


async def register_user(client, username: str, email: str | None, password: str):
    resp = await client.post(
        "/api/v1/auth/register",
        json={"username": username, "email": email, "password": password},
    )
    return resp


async def login_user(client, username: str, password: str):
    return await client.post(
        "/api/v1/auth/login",
        json={"username": username, "password": password},
    )


async def test_register_and_login_flow(client):
    username = f"user_{uuid.uuid4().hex[:6]}"
    email = f"{username}@example.com"
    password = "StrongPass!23"

    resp = await register_user(client, username, email, password)
    body = resp.json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["data"]["username"] == username
    assert body["data"]["role"] == "user"

    # Duplicate username should fail
    dup_resp = await register_user(client, username, "other@example.com", password)
    assert dup_resp.status_code == 409
    assert dup_resp.json()["detail"]["code"] == "USERNAME_EXISTS"

    # Duplicate email should fail
    dup_email = await register_user(client, "someone_else", email, password)
    assert dup_email.status_code == 409
    assert dup_email.json()["detail"]["code"] == "EMAIL_EXISTS"

    # Successful login
    login_resp = await login_user(client, username, password)
    login_body = login_resp.json()
    assert login_resp.status_code == 200
    assert login_body["success"] is True
    assert login_body["data"]["user"]["username"] == username
    assert "accessToken" in login_body["data"]
    assert "accessToken" in login_resp.cookies

    # Invalid password
    bad_login = await login_user(client, username, "wrong")
    assert bad_login.status_code == 401
    assert bad_login.json()["detail"]["code"] == "AUTH_INVALID_CREDENTIALS"


async def test_register_requires_username_and_password(client):
    resp = await register_user(client, "   ", None, "x")
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "BAD_REQUEST"


async def test_me_and_logout(client):
    username = f"user_{uuid.uuid4().hex[:6]}"
    password = "UserInit#123"
    await register_user(client, username, f"{username}@example.com", password)

    login_resp = await login_user(client, username, password)
    token = login_resp.json()["data"]["accessToken"]
    headers = {"Authorization": f"Bearer {token}"}

    me_resp = await client.get("/api/v1/auth/me", headers=headers)
    me_body = me_resp.json()
    assert me_resp.status_code == 200
    assert me_body["data"]["username"] == username

    # The cookie set at login works on its own
    cookie_me = await client.get("/api/v1/auth/me")
    assert cookie_me.status_code == 200

    logout_resp = await client.post("/api/v1/auth/logout", headers=headers)
    assert logout_resp.status_code == 200
    assert logout_resp.json()["success"] is True
    client.cookies.clear()

    after_logout = await client.get("/api/v1/auth/me")
    assert after_logout.status_code == 401


async def test_auth_requires_token(client):
    unauth_me = await client.get("/api/v1/auth/me")
    assert unauth_me.status_code == 401
    assert unauth_me.json()["detail"] == "AUTH_REQUIRED"

    bad_token = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert bad_token.status_code == 401
    assert bad_token.json()["detail"] == "AUTH_INVALID_TOKEN"

    unauth_meetings = await client.get("/api/v1/meetings")
    assert unauth_meetings.status_code == 401


async def test_login_is_rate_limited_per_ip(client, create_user):
    user, password = await create_user()

    for _ in range(5):
        resp = await login_user(client, user.username, "wrong")
        assert resp.status_code == 401

    blocked = await login_user(client, user.username, password)
    assert blocked.status_code == 429
    assert "Too many login attempts" in blocked.json()["detail"]
    assert int(blocked.headers["Retry-After"]) > 0

    # Another client address has its own window
    other_ip = await client.post(
        "/api/v1/auth/login",
        json={"username": user.username, "password": password},
        headers={"X-Forwarded-For": "203.0.113.9"},
    )
    assert other_ip.status_code == 200


async def test_successful_login_resets_counter(client, create_user):
    user, password = await create_user()

    for _ in range(4):
        await login_user(client, user.username, "wrong")
    assert (await login_user(client, user.username, password)).status_code == 200

    for _ in range(4):
        resp = await login_user(client, user.username, "wrong")
        assert resp.status_code == 401
    assert (await login_user(client, user.username, password)).status_code == 200
