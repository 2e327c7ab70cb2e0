"""
Activity catalog CRUD with a cached public listing.
"""

from typing import Any

from fastapi import HTTPException, status

from tour_booking.core.logging import get_logger
from tour_booking.core.security import CurrentAdmin
from tour_booking.models import Activity
from tour_booking.repositories.base import Repositories
from tour_booking.schemas.activity import ActivityCreate, ActivityResponse, ActivityUpdate
from tour_booking.services import audit_service
from tour_booking.services.cache_service import (
    get_cached_activities,
    invalidate_activity_cache,
    set_cached_activities,
)

logger = get_logger(__name__)

ENTITY = "activity"


async def list_activities(repos: Repositories) -> list[dict[str, Any]]:
    """Public listing as wire-ready dicts; served from Redis when warm."""
    cached = await get_cached_activities()
    if cached is not None:
        return cached

    activities = await repos.activities.list_all()
    payload = [
        ActivityResponse.model_validate(a).model_dump(mode="json", by_alias=True)
        for a in activities
    ]
    await set_cached_activities(payload)
    return payload


async def get_activity(repos: Repositories, activity_id: int) -> Activity:
    activity = await repos.activities.get(activity_id)
    if not activity:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Activity not found",
        )
    return activity


async def create_activity(
    repos: Repositories,
    activity_data: ActivityCreate,
    admin: CurrentAdmin,
) -> Activity:
    data = activity_data.model_dump()
    data["created_by"] = admin.username
    activity = await repos.activities.create(data)

    await audit_service.record(
        repos, admin.id, audit_service.CREATE, ENTITY, activity.id,
        {"title": activity.title},
    )
    await invalidate_activity_cache()
    logger.info(
        "activity_created",
        activity_id=activity.id,
        title=activity.title,
        max_group_size=activity.max_group_size,
    )
    return activity


async def update_activity(
    repos: Repositories,
    activity_id: int,
    activity_data: ActivityUpdate,
    admin: CurrentAdmin,
) -> Activity:
    activity = await get_activity(repos, activity_id)
    changes = activity_data.model_dump(exclude_unset=True)
    # Only max_group_size may be cleared; other nulls are ignored
    changes = {k: v for k, v in changes.items() if v is not None or k == "max_group_size"}

    activity = await repos.activities.update(activity, changes)
    await audit_service.record(
        repos, admin.id, audit_service.UPDATE, ENTITY, activity.id,
        {"changes": changes},
    )
    await invalidate_activity_cache()
    logger.info("activity_updated", activity_id=activity.id, fields=sorted(changes))
    return activity


async def delete_activity(repos: Repositories, activity_id: int, admin: CurrentAdmin) -> None:
    activity = await get_activity(repos, activity_id)
    title = activity.title
    await repos.activities.delete(activity)
    await audit_service.record(
        repos, admin.id, audit_service.DELETE, ENTITY, activity_id,
        {"title": title},
    )
    await invalidate_activity_cache()
    logger.info("activity_deleted", activity_id=activity_id)
