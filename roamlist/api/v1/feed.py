"""
Activity feed endpoints.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Query

from roamlist.api.deps import DbSession, OptionalPrincipal
from roamlist.engines.social import FeedService
from roamlist.schemas.feed import ActivityResponse, FeedPageResponse

router = APIRouter()


@router.get("/feed", response_model=FeedPageResponse)
async def get_feed(
    viewer: OptionalPrincipal,
    db: DbSession,
    limit: Optional[int] = Query(None, ge=1, le=100),
    cursor: Optional[datetime] = Query(None, description="next_cursor from the previous page"),
):
    """Activities of the accounts the caller follows, newest first."""
    service = FeedService(db)
    page = await service.get_feed(viewer, limit=limit, cursor=cursor)
    return FeedPageResponse.model_validate(page.model_dump())


@router.get("/users/{user_id}/activities", response_model=List[ActivityResponse])
async def get_user_activities(
    user_id: uuid.UUID,
    db: DbSession,
    limit: Optional[int] = Query(None, ge=1, le=100),
):
    service = FeedService(db)
    activities = await service.get_user_activities(user_id, limit=limit)
    return [ActivityResponse.model_validate(a.model_dump()) for a in activities]
