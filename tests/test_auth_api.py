"""Auth API tests.

Learn: Tests cover:
1. Registration + duplicate prevention (exact, case-sensitive email match)
2. Login → token; wrong password and unknown email look identical
3. Bearer token handling on protected routes (/me, /projects)
"""

import pytest

from conftest import register_and_login


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_user(client):
    r = await client.post(
        "/api/auth/register",
        json={"name": "Alice", "email": "alice@x.com", "password": "pw123456"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "User registered successfully"
    assert isinstance(body["userId"], int)


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    """Second registration with the same email fails, whatever name/password."""
    await client.post(
        "/api/auth/register",
        json={"name": "Alice", "email": "alice@x.com", "password": "pw123456"},
    )
    r = await client.post(
        "/api/auth/register",
        json={"name": "Someone Else", "email": "alice@x.com", "password": "different1"},
    )
    assert r.status_code == 409
    assert r.json()["message"] == "Email already exists"


@pytest.mark.asyncio
async def test_email_is_case_sensitive(client):
    await client.post(
        "/api/auth/register",
        json={"name": "Alice", "email": "alice@x.com", "password": "pw123456"},
    )
    r = await client.post(
        "/api/auth/register",
        json={"name": "Alice 2", "email": "Alice@x.com", "password": "pw123456"},
    )
    assert r.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"name": "", "email": "a@x.com", "password": "pw123456"},
        {"name": "A", "email": "no-at-sign", "password": "pw123456"},
        {"name": "A", "email": "a@x.com", "password": "abc"},
        {"email": "a@x.com", "password": "pw123456"},
    ],
)
async def test_register_validation(client, body):
    r = await client.post("/api/auth/register", json=body)
    assert r.status_code == 400
    assert r.json()["message"] == "Validation failed"


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_success(client):
    r = await client.post(
        "/api/auth/register",
        json={"name": "Alice", "email": "alice@x.com", "password": "pw123456"},
    )
    user_id = r.json()["userId"]

    r = await client.post(
        "/api/auth/login", json={"email": "alice@x.com", "password": "pw123456"}
    )
    assert r.status_code == 200
    body = r.json()
    assert body["userId"] == user_id
    assert body["name"] == "Alice"
    assert body["email"] == "alice@x.com"
    assert body["token"].count(".") == 2
    assert r.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
async def test_login_wrong_password_and_unknown_email_look_the_same(client):
    await client.post(
        "/api/auth/register",
        json={"name": "Alice", "email": "alice@x.com", "password": "pw123456"},
    )

    wrong = await client.post(
        "/api/auth/login", json={"email": "alice@x.com", "password": "nope-nope"}
    )
    unknown = await client.post(
        "/api/auth/login", json={"email": "nobody@x.com", "password": "nope-nope"}
    )
    assert wrong.status_code == 401
    assert unknown.status_code == 401
    assert wrong.json() == unknown.json()


# ═══════════════════════════════════════════════════════════
# Bearer tokens
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me_with_token(client):
    alice = await register_and_login(client, "Alice", "alice@x.com")
    r = await client.get("/api/auth/me", headers=alice["headers"])
    assert r.status_code == 200
    assert r.json() == {"id": alice["id"], "name": "Alice", "email": "alice@x.com"}


@pytest.mark.asyncio
async def test_me_without_token(client):
    r = await client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "header",
    ["Bearer invalid_token_here", "Basic dXNlcjpwYXNz", "Bearer", "token-without-scheme"],
)
async def test_protected_route_rejects_bad_credentials(client, header):
    r = await client.get("/api/projects", headers={"Authorization": header})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_token_from_other_secret_rejected(client):
    from devtasks.auth.jwt import TokenService
    from devtasks.db.models import User

    forged = TokenService(secret="attacker-secret-0123456789abcdef").issue(
        User(id=1, name="Mallory", email="m@x.com", password_hash="x")
    )
    r = await client.get("/api/projects", headers={"Authorization": f"Bearer {forged}"})
    assert r.status_code == 401
