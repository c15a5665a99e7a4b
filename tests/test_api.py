"""
HTTP layer: routing, status codes and error mapping
"""
import pytest

ALICE = {"X-User-Id": "1"}
BOB = {"X-User-Id": "2"}


async def create_task(client, **body):
    payload = {"title": "T1"}
    payload.update(body)
    response = await client.post("/api/v1/tasks", json=payload, headers=ALICE)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_requires_actor_header(client, users):
    response = await client.post("/api/v1/tasks", json={"title": "T1"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_and_get_task(client, users):
    created = await create_task(client, description="details")

    assert created["status"] == 0
    assert created["status_label"] == "pending"
    assert created["completed_at"] is None
    assert created["user"] == {"id": 1, "name": "Alice", "email": "alice@example.com"}
    assert created["tags"] == []

    response = await client.get(f"/api/v1/tasks/{created['id']}")
    assert response.status_code == 200
    assert response.json()["description"] == "details"


@pytest.mark.asyncio
async def test_request_validation_is_422(client, users):
    response = await client.post("/api/v1/tasks", json={"title": ""}, headers=ALICE)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_invalid_status_is_400(client, users):
    response = await client.post("/api/v1/tasks", json={"title": "T", "status": 5}, headers=ALICE)
    assert response.status_code == 400
    assert "status" in response.json()["detail"]


@pytest.mark.asyncio
async def test_unknown_task_is_404(client, users):
    response = await client.get("/api/v1/tasks/999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_complete_then_conflicts(client, users):
    task = await create_task(client)

    response = await client.post(f"/api/v1/tasks/{task['id']}/complete", headers=BOB)
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == 2
    assert body["completed_at"] is not None
    assert body["updater"]["id"] == 2

    again = await client.post(f"/api/v1/tasks/{task['id']}/complete", headers=BOB)
    assert again.status_code == 409
    assert again.json()["detail"] == "task is already completed"

    edit = await client.patch(f"/api/v1/tasks/{task['id']}", json={"title": "x"}, headers=BOB)
    assert edit.status_code == 409


@pytest.mark.asyncio
async def test_put_and_patch_update(client, users):
    task = await create_task(client)

    put = await client.put(f"/api/v1/tasks/{task['id']}", json={"status": 1}, headers=BOB)
    assert put.status_code == 200
    assert put.json()["status_label"] == "in_progress"

    patch = await client.patch(f"/api/v1/tasks/{task['id']}", json={"title": "renamed"}, headers=BOB)
    assert patch.status_code == 200
    assert patch.json()["title"] == "renamed"
    assert patch.json()["status"] == 1


@pytest.mark.asyncio
async def test_delete_restore_flow(client, users):
    task = await create_task(client)
    url = f"/api/v1/tasks/{task['id']}"

    deleted = await client.delete(url)
    assert deleted.status_code == 200
    assert deleted.json()["deleted_at"] is not None

    assert (await client.delete(url)).status_code == 409

    listing = await client.get("/api/v1/tasks")
    assert listing.json()["total"] == 0

    restored = await client.post(f"{url}/restore")
    assert restored.status_code == 200
    assert restored.json()["deleted_at"] is None

    assert (await client.post(f"{url}/restore")).status_code == 404


@pytest.mark.asyncio
async def test_list_is_lenient_about_paging(client, users):
    for i in range(3):
        await create_task(client, title=f"task {i}", status=2)
    await create_task(client, title="open")

    response = await client.get(
        "/api/v1/tasks",
        params={"status": 2, "per_page": "abc", "page": "0", "sort_by": "nope", "sort_direction": "up"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    assert body["per_page"] == 15
    assert body["current_page"] == 1
    assert body["from"] == 1
    assert body["to"] == 3


@pytest.mark.asyncio
async def test_list_only_deleted(client, users):
    keep = await create_task(client, title="keep")
    gone = await create_task(client, title="gone")
    await client.delete(f"/api/v1/tasks/{gone['id']}")

    response = await client.get("/api/v1/tasks", params={"only_deleted": "yes", "with_deleted": "yes"})

    assert [item["id"] for item in response.json()["items"]] == [gone["id"]]
    assert keep["id"] != gone["id"]


@pytest.mark.asyncio
async def test_tag_attach_detach(client, users):
    task = await create_task(client)
    tag = (await client.post("/api/v1/tags", json={"name": "home"}, headers=ALICE)).json()
    url = f"/api/v1/tasks/{task['id']}/tags"

    attached = await client.post(url, json={"tag_ids": [tag["id"], tag["id"]]})
    assert attached.status_code == 200
    assert attached.json()["tags"] == [{"id": tag["id"], "name": "home"}]

    assert (await client.post(url, json={"tag_ids": []})).status_code == 400
    assert (await client.post(url, json={"tag_ids": [999]})).status_code == 404

    detached = await client.request("DELETE", url, json={"tag_ids": [tag["id"]]})
    assert detached.status_code == 200
    assert detached.json()["tags"] == []


@pytest.mark.asyncio
async def test_tag_endpoints(client, users):
    assert (await client.post("/api/v1/tags", json={"name": "x"})).status_code == 401

    created = await client.post("/api/v1/tags", json={"name": "work"}, headers=ALICE)
    assert created.status_code == 201
    tag_id = created.json()["id"]

    updated = await client.patch(f"/api/v1/tags/{tag_id}", json={"name": "office"}, headers=BOB)
    assert updated.status_code == 200
    assert updated.json()["updated_by"] == 2

    listing = await client.get("/api/v1/tags", params={"keyword": "off"})
    assert [t["id"] for t in listing.json()] == [tag_id]

    assert (await client.delete(f"/api/v1/tags/{tag_id}")).status_code == 200
    assert (await client.get(f"/api/v1/tags/{tag_id}")).status_code == 404


@pytest.mark.asyncio
async def test_statistics_route(client, users):
    await create_task(client)
    await create_task(client)

    response = await client.get("/api/v1/tasks/statistics/by-user", params={"limit": "abc"})

    assert response.status_code == 200
    body = response.json()
    assert body[0]["user"]["id"] == 1
    assert body[0]["task_count"] == 2
    assert len(body[0]["recent_tasks"]) == 2


@pytest.mark.asyncio
async def test_health(client, users):
    assert (await client.get("/api/v1/health")).json()["status"] == "healthy"

    ready = await client.get("/api/v1/health/ready")
    assert ready.status_code == 200
    assert ready.json()["checks"]["database"] == "ok"


@pytest.mark.asyncio
async def test_user_profiles(client, users):
    listing = await client.get("/api/v1/users")
    assert listing.status_code == 200
    assert listing.json() == [
        {"id": 1, "name": "Alice", "email": "alice@example.com"},
        {"id": 2, "name": "Bob", "email": "bob@example.com"},
        {"id": 3, "name": "Carol", "email": "carol@example.com"},
    ]
    assert "password_hash" not in listing.json()[0]

    assert (await client.get("/api/v1/users", params={"keyword": "car"})).json()[0]["id"] == 3
    assert (await client.get("/api/v1/users/2")).json()["name"] == "Bob"
    assert (await client.get("/api/v1/users/99")).status_code == 404


@pytest.mark.asyncio
async def test_create_then_statistics_read_is_fresh(client, users):
    await create_task(client)
    first = await client.get("/api/v1/tasks/statistics/by-user")
    assert first.json()[0]["task_count"] == 1

    await create_task(client)
    second = await client.get("/api/v1/tasks/statistics/by-user")
    assert second.json()[0]["task_count"] == 2
