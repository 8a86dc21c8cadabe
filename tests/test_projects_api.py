"""Project API tests — ownership scoping, 404-before-403, cascade delete."""

import pytest

from devtasks.db.models import User


@pytest.fixture
async def website(client, alice):
    r = await client.post("/api/projects", json={"name": "Website"}, headers=alice["headers"])
    assert r.status_code == 201
    return r.json()


# ═══════════════════════════════════════════════════════════
# Create / list
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_project_sets_owner(client, alice):
    r = await client.post("/api/projects", json={"name": "Website"}, headers=alice["headers"])
    assert r.status_code == 201
    project = r.json()
    assert project["name"] == "Website"
    assert project["ownerId"] == alice["id"]
    assert r.headers["Location"] == f"/api/projects/{project['id']}"


@pytest.mark.asyncio
async def test_create_project_ignores_owner_in_body(client, alice, bob):
    r = await client.post(
        "/api/projects",
        json={"name": "Sneaky", "ownerId": bob["id"]},
        headers=alice["headers"],
    )
    assert r.json()["ownerId"] == alice["id"]


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["", "x" * 201])
async def test_create_project_name_bounds(client, alice, name):
    r = await client.post("/api/projects", json={"name": name}, headers=alice["headers"])
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_create_project_requires_auth(client):
    r = await client.post("/api/projects", json={"name": "Website"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_list_is_scoped_to_caller(client, alice, bob):
    await client.post("/api/projects", json={"name": "A1"}, headers=alice["headers"])
    await client.post("/api/projects", json={"name": "A2"}, headers=alice["headers"])
    await client.post("/api/projects", json={"name": "B1"}, headers=bob["headers"])

    r = await client.get("/api/projects", headers=alice["headers"])
    assert r.status_code == 200
    assert [p["name"] for p in r.json()] == ["A1", "A2"]

    r = await client.get("/api/projects", headers=bob["headers"])
    assert [p["name"] for p in r.json()] == ["B1"]


# ═══════════════════════════════════════════════════════════
# Read / update / delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_owner_can_read_rename_delete(client, alice, website):
    pid = website["id"]
    h = alice["headers"]

    r = await client.get(f"/api/projects/{pid}", headers=h)
    assert r.status_code == 200
    assert r.json() == {"id": pid, "name": "Website", "ownerId": alice["id"]}

    r = await client.put(f"/api/projects/{pid}", json={"name": "Web v2"}, headers=h)
    assert r.status_code == 200
    assert r.json()["name"] == "Web v2"

    r = await client.delete(f"/api/projects/{pid}", headers=h)
    assert r.status_code == 204
    assert r.content == b""

    r = await client.get(f"/api/projects/{pid}", headers=h)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_other_user_is_forbidden(client, bob, website):
    pid = website["id"]
    h = bob["headers"]
    assert (await client.get(f"/api/projects/{pid}", headers=h)).status_code == 403
    assert (await client.put(f"/api/projects/{pid}", json={"name": "Mine"}, headers=h)).status_code == 403
    assert (await client.delete(f"/api/projects/{pid}", headers=h)).status_code == 403
    assert (await client.get(f"/api/projects/{pid}/tasks", headers=h)).status_code == 403


@pytest.mark.asyncio
async def test_forbidden_rename_leaves_project_untouched(client, alice, bob, website):
    pid = website["id"]
    await client.put(f"/api/projects/{pid}", json={"name": "Hijacked"}, headers=bob["headers"])
    r = await client.get(f"/api/projects/{pid}", headers=alice["headers"])
    assert r.json()["name"] == "Website"


@pytest.mark.asyncio
async def test_missing_project_is_404_not_403(client, bob, website):
    h = bob["headers"]
    assert (await client.get("/api/projects/999", headers=h)).status_code == 404
    assert (await client.put("/api/projects/999", json={"name": "x"}, headers=h)).status_code == 404
    assert (await client.delete("/api/projects/999", headers=h)).status_code == 404
    assert (await client.get("/api/projects/999/tasks", headers=h)).status_code == 404


# ═══════════════════════════════════════════════════════════
# Cascade delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_delete_project_removes_its_tasks(client, alice, website):
    h = alice["headers"]
    pid = website["id"]
    task_ids = []
    for title in ("Design", "Build", "Ship"):
        r = await client.post("/api/tasks", json={"title": title, "projectId": pid}, headers=h)
        task_ids.append(r.json()["id"])

    other = await client.post("/api/projects", json={"name": "Other"}, headers=h)
    r = await client.post(
        "/api/tasks", json={"title": "Keep me", "projectId": other.json()["id"]}, headers=h
    )
    kept_id = r.json()["id"]

    r = await client.delete(f"/api/projects/{pid}", headers=h)
    assert r.status_code == 204

    for tid in task_ids:
        assert (await client.get(f"/api/tasks/{tid}", headers=h)).status_code == 404
    assert (await client.get(f"/api/tasks/{kept_id}", headers=h)).status_code == 200


# ═══════════════════════════════════════════════════════════
# Stale tokens and out-of-range ids
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_project_with_token_for_missing_user(app, client):
    """A validly signed token whose user row is gone gets 401, not a 500."""
    ghost = User(id=4242, name="Ghost", email="ghost@x.com", password_hash="x")
    token = app.state.token_service.issue(ghost)

    r = await client.post(
        "/api/projects",
        json={"name": "Orphan"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert r.status_code == 401
    assert r.json()["message"] == "User no longer exists"


@pytest.mark.asyncio
@pytest.mark.parametrize("pid", ["0", "-1", str(2**31), "99999999999999999999"])
async def test_out_of_range_project_id_is_rejected(client, alice, pid):
    h = alice["headers"]
    assert (await client.get(f"/api/projects/{pid}", headers=h)).status_code == 400
    assert (await client.put(f"/api/projects/{pid}", json={"name": "x"}, headers=h)).status_code == 400
    assert (await client.delete(f"/api/projects/{pid}", headers=h)).status_code == 400
    assert (await client.get(f"/api/projects/{pid}/tasks", headers=h)).status_code == 400


@pytest.mark.asyncio
async def test_largest_project_id_is_a_plain_404(client, alice):
    r = await client.get(f"/api/projects/{2**31 - 1}", headers=alice["headers"])
    assert r.status_code == 404
