"""
Follow graph endpoints.
"""

import uuid

from fastapi import APIRouter, Request, status

from roamlist.api.deps import CurrentPrincipal, DbSession, OptionalPrincipal, get_client_ip
from roamlist.engines.social import FollowService
from roamlist.schemas.social import FollowStatusResponse

router = APIRouter()


async def _follow_status(service: FollowService, viewer, user_id: uuid.UUID) -> FollowStatusResponse:
    counts = await service.counts(user_id)
    return FollowStatusResponse(
        user_id=user_id,
        is_following=await service.is_following(viewer, user_id),
        followers=counts.followers,
        following=counts.following,
    )


@router.get("/users/{user_id}/follow", response_model=FollowStatusResponse)
async def get_follow_status(
    user_id: uuid.UUID,
    viewer: OptionalPrincipal,
    db: DbSession,
):
    service = FollowService(db)
    return await _follow_status(service, viewer, user_id)


@router.post("/users/{user_id}/follow", response_model=FollowStatusResponse, status_code=status.HTTP_201_CREATED)
async def follow_user(
    request: Request,
    user_id: uuid.UUID,
    user: CurrentPrincipal,
    db: DbSession,
):
    """Follow a user; their followers-tier photos become visible to the caller."""
    service = FollowService(db)
    await service.follow(user, user_id, ip_address=get_client_ip(request))
    return await _follow_status(service, user, user_id)


@router.delete("/users/{user_id}/follow", response_model=FollowStatusResponse)
async def unfollow_user(
    request: Request,
    user_id: uuid.UUID,
    user: CurrentPrincipal,
    db: DbSession,
):
    service = FollowService(db)
    await service.unfollow(user, user_id, ip_address=get_client_ip(request))
    return await _follow_status(service, user, user_id)
