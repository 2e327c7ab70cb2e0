"""
Activity catalog endpoints. Listing is public and cached in Redis.
"""

from fastapi import APIRouter, Depends, status

from tour_booking.api.deps import get_repositories
from tour_booking.core.security import CurrentAdmin, get_current_admin
from tour_booking.repositories.base import Repositories
from tour_booking.schemas.activity import (
    ActivityCreate,
    ActivityDeleteResponse,
    ActivityResponse,
    ActivityUpdate,
)
from tour_booking.services import activity_service

router = APIRouter(prefix="/activities", tags=["Activities"])


@router.get("", response_model=list[ActivityResponse])
async def list_activities(repos: Repositories = Depends(get_repositories)):
    return await activity_service.list_activities(repos)


@router.get("/{activity_id}", response_model=ActivityResponse)
async def get_activity(activity_id: int, repos: Repositories = Depends(get_repositories)):
    return await activity_service.get_activity(repos, activity_id)


@router.post("", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
async def create_activity(
    activity_data: ActivityCreate,
    admin: CurrentAdmin = Depends(get_current_admin),
    repos: Repositories = Depends(get_repositories),
):
    return await activity_service.create_activity(repos, activity_data, admin)


@router.patch("/{activity_id}", response_model=ActivityResponse)
async def update_activity(
    activity_id: int,
    activity_data: ActivityUpdate,
    admin: CurrentAdmin = Depends(get_current_admin),
    repos: Repositories = Depends(get_repositories),
):
    return await activity_service.update_activity(repos, activity_id, activity_data, admin)


@router.delete("/{activity_id}", response_model=ActivityDeleteResponse)
async def delete_activity(
    activity_id: int,
    admin: CurrentAdmin = Depends(get_current_admin),
    repos: Repositories = Depends(get_repositories),
):
    await activity_service.delete_activity(repos, activity_id, admin)
    return ActivityDeleteResponse(success=True)
