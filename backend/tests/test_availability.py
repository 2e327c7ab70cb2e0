"""
Tests for capacity lookups and availability views.
"""

import pytest
from httpx import AsyncClient

from tour_booking.models import Activity
from tour_booking.schemas.capacity import AvailabilityStatus
from tour_booking.services.availability_service import classify


def _booking(activity_id, day="2025-06-10", people=1):
    return {
        "name": "Youssef Amrani",
        "phone": "+212611111111",
        "activityId": activity_id,
        "date": day,
        "people": people,
    }


@pytest.mark.parametrize(
    "max_group_size, booked, available, expected",
    [
        (None, 500, True, (AvailabilityStatus.AVAILABLE, None)),
        (20, 0, True, (AvailabilityStatus.AVAILABLE, 20)),
        (20, 14, True, (AvailabilityStatus.AVAILABLE, 6)),
        (20, 15, True, (AvailabilityStatus.LIMITED, 5)),
        (20, 20, True, (AvailabilityStatus.UNAVAILABLE, 0)),
        (20, 25, True, (AvailabilityStatus.UNAVAILABLE, 0)),
        (20, 0, False, (AvailabilityStatus.UNAVAILABLE, 20)),
    ],
)
def test_classify(max_group_size, booked, available, expected):
    activity = Activity(max_group_size=max_group_size, available=available)
    assert classify(activity, booked, 0.25) == expected


@pytest.mark.asyncio
async def test_activity_capacity_endpoint(client: AsyncClient, make_activity):
    activity = await make_activity(max_group_size=8)
    await client.post("/api/bookings", json=_booking(activity.id, people=5))

    response = await client.get(f"/api/capacity/activity/{activity.id}/2025-06-10")

    assert response.status_code == 200
    assert response.json() == {
        "activityId": str(activity.id),
        "date": "2025-06-10",
        "hasCapacity": True,
        "remainingSpots": 3,
        "maxGroupSize": 8,
    }


@pytest.mark.asyncio
async def test_capacity_for_unknown_activity(client: AsyncClient):
    response = await client.get("/api/capacity/activity/abc/2025-06-10")

    assert response.status_code == 200
    assert response.json()["hasCapacity"] is False
    assert response.json()["remainingSpots"] is None


@pytest.mark.asyncio
async def test_capacity_invalid_date(client: AsyncClient, make_activity):
    activity = await make_activity()

    response = await client.get(f"/api/capacity/activity/{activity.id}/june-tenth")

    assert response.status_code == 400
    assert response.json() == {"message": "Invalid date format"}


@pytest.mark.asyncio
async def test_date_capacity_for_listed_activities(client: AsyncClient, make_activity):
    limited = await make_activity(max_group_size=4)
    unlimited = await make_activity(title="Essaouira Day Trip", max_group_size=None)
    await client.post("/api/bookings", json=_booking(limited.id, people=4))

    response = await client.get(
        "/api/capacity/date/2025-06-10",
        params={"activityIds": f"{limited.id},{unlimited.id},999"},
    )

    assert response.status_code == 200
    data = response.json()
    assert [entry["hasCapacity"] for entry in data] == [False, True, False]
    assert data[0]["remainingSpots"] == 0
    assert data[1]["maxGroupSize"] == 0
    assert data[2]["maxGroupSize"] is None


@pytest.mark.asyncio
async def test_date_capacity_without_ids_is_empty(client: AsyncClient, make_activity):
    await make_activity()
    response = await client.get("/api/capacity/date/2025-06-10")
    assert response.json() == []


@pytest.mark.asyncio
async def test_availability_for_date(client: AsyncClient, make_activity):
    busy = await make_activity(max_group_size=8)
    closed = await make_activity(title="Montgolfière", max_group_size=8, available=False)
    open_ended = await make_activity(title="City Walk", max_group_size=None)
    await client.post("/api/bookings", json=_booking(busy.id, people=7))

    response = await client.get("/api/availability/date/2025-06-10")

    assert response.status_code == 200
    by_id = {entry["activityId"]: entry for entry in response.json()}
    assert by_id[busy.id]["status"] == "limited"
    assert by_id[busy.id]["spotsRemaining"] == 1
    assert by_id[closed.id]["status"] == "unavailable"
    assert by_id[open_ended.id]["status"] == "available"
    assert by_id[open_ended.id]["spotsRemaining"] is None


@pytest.mark.asyncio
async def test_availability_for_month(client: AsyncClient, make_activity):
    activity = await make_activity(max_group_size=4)
    await client.post("/api/bookings", json=_booking(activity.id, day="2025-02-14", people=4))
    await client.post("/api/bookings", json=_booking(activity.id, day="2025-02-15", people=3))

    response = await client.get(f"/api/availability/activity/{activity.id}/2025-02")

    assert response.status_code == 200
    days = response.json()
    assert len(days) == 28
    assert days[0]["date"] == "2025-02-01"
    by_day = {entry["date"]: entry for entry in days}
    assert by_day["2025-02-14"]["status"] == "unavailable"
    assert by_day["2025-02-15"]["status"] == "limited"
    assert by_day["2025-02-16"]["status"] == "available"
    assert by_day["2025-02-16"]["spotsRemaining"] == 4


@pytest.mark.asyncio
async def test_availability_for_month_errors(client: AsyncClient, make_activity):
    activity = await make_activity()

    bad_month = await client.get(f"/api/availability/activity/{activity.id}/2025-13")
    missing = await client.get("/api/availability/activity/999/2025-02")

    assert bad_month.status_code == 400
    assert bad_month.json() == {"message": "Invalid month format"}
    assert missing.status_code == 404
