"""
Photo and community endpoints.
"""

import uuid
from typing import List

from fastapi import APIRouter, Request, status

from roamlist.api.deps import CurrentPrincipal, DbSession, Guard, OptionalPrincipal, get_client_ip
from roamlist.engines.sharing import PhotoService
from roamlist.schemas.photo import (
    CommunitySummaryResponse,
    PhotoCaptionUpdate,
    PhotoCreate,
    PhotoResponse,
    PhotoVisibilityUpdate,
)

router = APIRouter()


@router.post("/photos", response_model=PhotoResponse, status_code=status.HTTP_201_CREATED)
async def create_photo(
    request: Request,
    data: PhotoCreate,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    """Register an uploaded photo; private unless a tier is given."""
    service = PhotoService(db, guard)
    return await service.create(
        user,
        place_id=data.place_id,
        storage_ref=data.storage_ref,
        trip_id=data.trip_id,
        caption=data.caption,
        visibility=data.visibility,
        width=data.width,
        height=data.height,
        taken_at=data.taken_at,
        ip_address=get_client_ip(request),
    )


@router.patch("/photos/{photo_id}/visibility", response_model=PhotoResponse)
async def set_photo_visibility(
    request: Request,
    photo_id: uuid.UUID,
    data: PhotoVisibilityUpdate,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    service = PhotoService(db, guard)
    return await service.set_visibility_tier(user, photo_id, data.visibility, ip_address=get_client_ip(request))


@router.patch("/photos/{photo_id}/caption", response_model=PhotoResponse)
async def update_photo_caption(
    request: Request,
    photo_id: uuid.UUID,
    data: PhotoCaptionUpdate,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    service = PhotoService(db, guard)
    return await service.update_caption(user, photo_id, data.caption, ip_address=get_client_ip(request))


@router.delete("/photos/{photo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_photo(
    request: Request,
    photo_id: uuid.UUID,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    service = PhotoService(db, guard)
    await service.remove(user, photo_id, ip_address=get_client_ip(request))


@router.get("/places/{place_id}/photos", response_model=List[PhotoResponse])
async def list_place_photos(
    place_id: uuid.UUID,
    viewer: OptionalPrincipal,
    db: DbSession,
    guard: Guard,
):
    """Photos of a place the caller may see, newest first."""
    service = PhotoService(db, guard)
    return await service.list_for_place(viewer, place_id)


@router.get("/places/{place_id}/community", response_model=CommunitySummaryResponse)
async def place_community_summary(
    place_id: uuid.UUID,
    viewer: OptionalPrincipal,
    db: DbSession,
    guard: Guard,
):
    service = PhotoService(db, guard)
    summary = await service.community_summary(viewer, place_id)
    return CommunitySummaryResponse.model_validate(summary.model_dump())


@router.get("/trips/{trip_id}/photos", response_model=List[PhotoResponse])
async def list_trip_photos(
    trip_id: uuid.UUID,
    viewer: OptionalPrincipal,
    db: DbSession,
    guard: Guard,
):
    service = PhotoService(db, guard)
    return await service.list_for_trip(viewer, trip_id)
