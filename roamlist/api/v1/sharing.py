"""
Trip share link endpoints.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Request, status

from roamlist.api.deps import CurrentPrincipal, DbSession, Guard, OptionalPrincipal, get_client_ip
from roamlist.engines.sharing import ShareLinkService
from roamlist.schemas.itinerary import ItineraryItemResponse
from roamlist.schemas.sharing import (
    ShareLinkResponse,
    ShareSettingsUpdate,
    SharedTripInfo,
    SharedTripOwner,
    SharedTripResponse,
)

router = APIRouter()


@router.post("/trips/{trip_id}/share", response_model=ShareLinkResponse, status_code=status.HTTP_201_CREATED)
async def share_trip(
    request: Request,
    trip_id: uuid.UUID,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    """Create the trip's share link, or return the one it already has."""
    service = ShareLinkService(db, guard)
    return await service.create(user, trip_id, ip_address=get_client_ip(request))


@router.get("/trips/{trip_id}/share", response_model=Optional[ShareLinkResponse])
async def get_share_settings(
    trip_id: uuid.UUID,
    viewer: OptionalPrincipal,
    db: DbSession,
    guard: Guard,
):
    service = ShareLinkService(db, guard)
    return await service.get_settings(viewer, trip_id)


@router.patch("/trips/{trip_id}/share", response_model=ShareLinkResponse)
async def update_share_settings(
    request: Request,
    trip_id: uuid.UUID,
    data: ShareSettingsUpdate,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    service = ShareLinkService(db, guard)
    return await service.update_settings(
        user,
        trip_id,
        data.model_dump(exclude_unset=True),
        ip_address=get_client_ip(request),
    )


@router.delete("/trips/{trip_id}/share", status_code=status.HTTP_204_NO_CONTENT)
async def unshare_trip(
    request: Request,
    trip_id: uuid.UUID,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    service = ShareLinkService(db, guard)
    await service.delete(user, trip_id, ip_address=get_client_ip(request))


@router.get("/shared/{code}", response_model=Optional[SharedTripResponse])
async def get_shared_trip(
    code: str,
    db: DbSession,
    guard: Guard,
):
    """The trip behind a share code or custom slug; null when private or unknown."""
    service = ShareLinkService(db, guard)
    view = await service.get_shared_trip(code)
    if view is None:
        return None
    return SharedTripResponse(
        trip=SharedTripInfo.model_validate(view.trip),
        owner=SharedTripOwner.model_validate(view.owner),
        itinerary=[ItineraryItemResponse.model_validate(item) for item in view.itinerary],
        view_count=view.view_count,
        show_branding=view.show_branding,
    )


@router.post("/shared/{code}/views", status_code=status.HTTP_204_NO_CONTENT)
async def record_shared_trip_view(
    code: str,
    db: DbSession,
    guard: Guard,
):
    service = ShareLinkService(db, guard)
    await service.record_view(code)
