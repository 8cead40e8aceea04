"""
Bucket list endpoints.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Query, Request, status

from roamlist.api.deps import CurrentPrincipal, DbSession, Guard, OptionalPrincipal, get_client_ip
from roamlist.engines.bucket_list import BucketListService
from roamlist.kernel.models.bucket_list import BucketListStatus
from roamlist.schemas.bucket_list import (
    BucketListAdd,
    BucketListItemResponse,
    BucketListNotesUpdate,
    BucketListRankUpdate,
    BucketListStatsResponse,
    BucketListStatusUpdate,
)
from roamlist.schemas.common import ReorderRequest, ReorderResponse

router = APIRouter()


@router.get("", response_model=List[BucketListItemResponse])
async def list_bucket_list(
    user: OptionalPrincipal,
    db: DbSession,
    guard: Guard,
    status_filter: Optional[BucketListStatus] = Query(None, alias="status"),
):
    """The caller's bucket list by rank. Empty for anonymous callers."""
    service = BucketListService(db, guard)
    return await service.list_items(user, status=status_filter)


@router.post("", response_model=BucketListItemResponse, status_code=status.HTTP_201_CREATED)
async def add_to_bucket_list(
    request: Request,
    data: BucketListAdd,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    """Add a place; 409 if it is already on the list."""
    service = BucketListService(db, guard)
    return await service.add(
        user,
        place_id=data.place_id,
        priority=data.priority,
        notes=data.notes,
        ip_address=get_client_ip(request),
    )


@router.get("/stats", response_model=BucketListStatsResponse)
async def bucket_list_stats(
    user: OptionalPrincipal,
    db: DbSession,
    guard: Guard,
):
    service = BucketListService(db, guard)
    stats = await service.stats(user)
    return BucketListStatsResponse(**stats.model_dump())


@router.get("/by-place/{place_id}", response_model=Optional[BucketListItemResponse])
async def get_bucket_list_item_by_place(
    place_id: uuid.UUID,
    user: OptionalPrincipal,
    db: DbSession,
    guard: Guard,
):
    """The caller's entry for a place, or null."""
    service = BucketListService(db, guard)
    return await service.get_by_place(user, place_id)


@router.put("/order", response_model=ReorderResponse)
async def reorder_bucket_list(
    request: Request,
    data: ReorderRequest,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    """
    Rank the given items 1..N in order. Items left out keep their rank;
    ids that are not the caller's are skipped.
    """
    service = BucketListService(db, guard)
    applied = await service.reorder(
        user,
        user.id,
        data.item_ids,
        ip_address=get_client_ip(request),
    )
    return ReorderResponse(applied=applied, skipped=len(data.item_ids) - applied)


@router.patch("/{item_id}/rank", response_model=BucketListItemResponse)
async def update_bucket_list_rank(
    request: Request,
    item_id: uuid.UUID,
    data: BucketListRankUpdate,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    service = BucketListService(db, guard)
    return await service.update_priority(user, item_id, data.rank, ip_address=get_client_ip(request))


@router.patch("/{item_id}/status", response_model=BucketListItemResponse)
async def update_bucket_list_status(
    request: Request,
    item_id: uuid.UUID,
    data: BucketListStatusUpdate,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    """Mark a place visited or skipped."""
    service = BucketListService(db, guard)
    return await service.update_status(
        user,
        item_id,
        data.status,
        visited_date=data.visited_date,
        rating=data.rating,
        weather=data.weather.model_dump() if data.weather else None,
        ip_address=get_client_ip(request),
    )


@router.patch("/{item_id}/notes", response_model=BucketListItemResponse)
async def update_bucket_list_notes(
    request: Request,
    item_id: uuid.UUID,
    data: BucketListNotesUpdate,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    service = BucketListService(db, guard)
    return await service.update_notes(user, item_id, data.notes, ip_address=get_client_ip(request))


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_from_bucket_list(
    request: Request,
    item_id: uuid.UUID,
    user: CurrentPrincipal,
    db: DbSession,
    guard: Guard,
):
    service = BucketListService(db, guard)
    await service.remove(user, item_id, ip_address=get_client_ip(request))
