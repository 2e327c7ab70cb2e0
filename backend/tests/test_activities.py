"""
Tests for activity catalog endpoints.
"""

import pytest
from httpx import AsyncClient

from tour_booking.db.seed import DEFAULT_ACTIVITIES, seed_initial_data
from tour_booking.core.config import Settings

NEW_ACTIVITY = {
    "title": "Ourika Valley Day Trip",
    "description": "Streams, Berber villages and the Atlas foothills.",
    "price": 150,
    "image": "/attached_assets/ourika.jpg",
    "maxGroupSize": 24,
    "durationHours": 8,
    "includesFood": True,
}


@pytest.mark.asyncio
async def test_list_activities_is_public(client: AsyncClient, make_activity):
    await make_activity(title="Agafay Combo")
    await make_activity(title="Essaouira Day Trip", max_group_size=None)

    response = await client.get("/api/activities")

    assert response.status_code == 200
    data = response.json()
    assert [a["title"] for a in data] == ["Agafay Combo", "Essaouira Day Trip"]
    assert data[0]["maxGroupSize"] == 10
    assert data[1]["maxGroupSize"] is None
    assert data[0]["priceType"] == "per_person"


@pytest.mark.asyncio
async def test_get_missing_activity(client: AsyncClient):
    response = await client.get("/api/activities/42")
    assert response.status_code == 404
    assert response.json() == {"message": "Activity not found"}


@pytest.mark.asyncio
async def test_create_activity_requires_auth(client: AsyncClient):
    response = await client.post("/api/activities", json=NEW_ACTIVITY)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_activity(client: AsyncClient, staff_headers):
    response = await client.post("/api/activities", json=NEW_ACTIVITY, headers=staff_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["title"] == NEW_ACTIVITY["title"]
    assert data["maxGroupSize"] == 24
    assert data["includesFood"] is True
    assert data["includesTransportation"] is False
    assert data["featured"] is True
    assert data["createdBy"] == "staff"


@pytest.mark.asyncio
async def test_create_activity_validation(client: AsyncClient, staff_headers):
    response = await client.post(
        "/api/activities",
        json={**NEW_ACTIVITY, "price": 0, "priceType": "per_hour"},
        headers=staff_headers,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Validation error"


@pytest.mark.asyncio
async def test_update_activity_partial(client: AsyncClient, make_activity, staff_headers):
    activity = await make_activity(max_group_size=10)

    response = await client.patch(
        f"/api/activities/{activity.id}",
        json={"price": 500, "available": False},
        headers=staff_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["price"] == 500
    assert data["available"] is False
    assert data["maxGroupSize"] == 10
    assert data["title"] == activity.title


@pytest.mark.asyncio
async def test_update_can_remove_capacity_limit(client: AsyncClient, make_activity, staff_headers):
    activity = await make_activity(max_group_size=10)

    response = await client.patch(
        f"/api/activities/{activity.id}",
        json={"maxGroupSize": None},
        headers=staff_headers,
    )

    assert response.status_code == 200
    assert response.json()["maxGroupSize"] is None


@pytest.mark.asyncio
async def test_delete_activity(client: AsyncClient, make_activity, staff_headers):
    activity = await make_activity()

    response = await client.delete(f"/api/activities/{activity.id}", headers=staff_headers)

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert (await client.get(f"/api/activities/{activity.id}")).status_code == 404


@pytest.mark.asyncio
async def test_activity_writes_are_audited(client: AsyncClient, staff_headers, auth_headers):
    created = await client.post("/api/activities", json=NEW_ACTIVITY, headers=staff_headers)
    activity_id = created.json()["id"]
    await client.patch(f"/api/activities/{activity_id}", json={"price": 180}, headers=staff_headers)

    logs = (await client.get("/api/admin/audit-logs", headers=auth_headers)).json()

    actions = [(entry["action"], entry["entityType"], entry["entityId"]) for entry in logs]
    assert actions == [("UPDATE", "activity", activity_id), ("CREATE", "activity", activity_id)]
    assert logs[0]["details"] == {"changes": {"price": 180}}


@pytest.mark.asyncio
async def test_seed_defaults_into_empty_catalog(memory_provider):
    settings = Settings(
        SEED_DEFAULT_ACTIVITIES=True,
        ADMIN_BOOTSTRAP_USERNAME="owner",
        ADMIN_BOOTSTRAP_PASSWORD="changeme123",
    )

    await seed_initial_data(memory_provider, settings)
    await seed_initial_data(memory_provider, settings)

    async with memory_provider.unit_of_work() as repos:
        activities = await repos.activities.list_all()
        users = await repos.users.list_all()

    assert len(activities) == len(DEFAULT_ACTIVITIES)
    balloon = activities[0]
    assert balloon.max_group_size == 8
    assert balloon.available is False
    assert [u.username for u in users] == ["owner"]
    assert users[0].role == "superadmin"


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/api/activities", headers={"X-Request-ID": "trace-42"})

    assert response.headers["X-Request-ID"] == "trace-42"
    assert response.headers["X-Response-Time"].endswith("ms")
