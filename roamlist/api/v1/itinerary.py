"""
Itinerary endpoints.

Trip-scoped routes live under /trips/{trip_id}/itinerary; item routes under
/itinerary/{item_id}.
"""

import uuid
from typing import List

from fastapi import APIRouter, Request, status

from roamlist.api.deps import CurrentPrincipal, DbSession, Guard, OptionalPrincipal, get_client_ip
from roamlist.engines.itinerary import ItineraryService
from roamlist.schemas.common import ReorderRequest, ReorderResponse
from roamlist.schemas.itinerary import (
    ItineraryItemCreate,
    ItineraryItemResponse,
    ItineraryItemUpdate,
    ItineraryPositionUpdate,
)

router = APIRouter()


@router.get("/trips/{trip_id}/itinerary", response_model=List[ItineraryItemResponse])
async def list_trip_itinerary(
    trip_id: uuid.UUID,
    user: OptionalPrincipal,
    db: DbSession,
    guard: Guard,
):
    """All stops of a trip, by day then rank."""
    service = ItineraryService(db, guard)
    return await service.list_by_trip(user, trip_id)


@router.post(
    "/trips/{trip_id}/itinerary",
    response_model=ItineraryItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_itinerary_item(
    request: Request,
    trip_id: uuid.UUID,
    data: ItineraryItemCreate,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    service = ItineraryService(db, guard)
    return await service.add(
        user,
        trip_id,
        place_id=data.place_id,
        day_number=data.day_number,
        start_time=data.start_time,
        duration_minutes=data.duration_minutes,
        notes=data.notes,
        category=data.category,
        rank=data.rank,
        ip_address=get_client_ip(request),
    )


@router.get("/trips/{trip_id}/itinerary/days/{day_number}", response_model=List[ItineraryItemResponse])
async def list_itinerary_day(
    trip_id: uuid.UUID,
    day_number: int,
    user: OptionalPrincipal,
    db: DbSession,
    guard: Guard,
):
    service = ItineraryService(db, guard)
    return await service.list_by_day(user, trip_id, day_number)


@router.put("/trips/{trip_id}/itinerary/days/{day_number}/order", response_model=ReorderResponse)
async def reorder_itinerary_day(
    request: Request,
    trip_id: uuid.UUID,
    day_number: int,
    data: ReorderRequest,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    """Rank the given stops 1..N on this day, pulling them over from other days."""
    service = ItineraryService(db, guard)
    applied = await service.reorder(
        user,
        trip_id,
        day_number,
        data.item_ids,
        ip_address=get_client_ip(request),
    )
    return ReorderResponse(applied=applied, skipped=len(data.item_ids) - applied)


@router.patch("/itinerary/{item_id}", response_model=ItineraryItemResponse)
async def update_itinerary_item(
    request: Request,
    item_id: uuid.UUID,
    data: ItineraryItemUpdate,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    service = ItineraryService(db, guard)
    return await service.update(
        user,
        item_id,
        data.model_dump(exclude_unset=True),
        ip_address=get_client_ip(request),
    )


@router.patch("/itinerary/{item_id}/position", response_model=ItineraryItemResponse)
async def move_itinerary_item(
    request: Request,
    item_id: uuid.UUID,
    data: ItineraryPositionUpdate,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    service = ItineraryService(db, guard)
    return await service.move(
        user,
        item_id,
        day_number=data.day_number,
        rank=data.rank,
        ip_address=get_client_ip(request),
    )


@router.delete("/itinerary/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_itinerary_item(
    request: Request,
    item_id: uuid.UUID,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    service = ItineraryService(db, guard)
    await service.remove(user, item_id, ip_address=get_client_ip(request))
