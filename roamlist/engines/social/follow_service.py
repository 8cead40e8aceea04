"""
Follow Service - maintains the directed follow graph.

The visibility engine only reads follow edges; this is where they are
created and removed.
"""

import uuid
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from roamlist.kernel.errors import DuplicateConstraintViolation, NotFound, ValidationError
from roamlist.kernel.events.event_store import EventStore
from roamlist.kernel.models.event_log import EventType
from roamlist.kernel.models.follow import Follow
from roamlist.kernel.models.user import User
from roamlist.kernel.permissions.permission_service import follow_limit
from roamlist.logging_config import get_logger

logger = get_logger(__name__)


class FollowCounts(BaseModel):
    """Edge counts for one user."""

    followers: int
    following: int


class FollowService:
    """Follow graph operations for one session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)

    async def _get_edge(self, follower_id: uuid.UUID, followee_id: uuid.UUID) -> Optional[Follow]:
        result = await self.session.execute(
            select(Follow).where(
                Follow.follower_id == follower_id,
                Follow.followee_id == followee_id,
            )
        )
        return result.scalar_one_or_none()

    async def _count_following(self, user_id: uuid.UUID) -> int:
        result = await self.session.execute(
            select(func.count(Follow.id)).where(Follow.follower_id == user_id)
        )
        return result.scalar_one()

    async def follow(
        self,
        principal: User,
        followee_id: uuid.UUID,
        ip_address: Optional[str] = None,
    ) -> Follow:
        """
        Make ``principal`` follow ``followee_id``.

        Raises:
            ValidationError: self-follow, or the role's follow limit is reached
            NotFound: no such user
            DuplicateConstraintViolation: already following
        """
        if followee_id == principal.id:
            raise ValidationError("Cannot follow yourself", field="user_id")

        if await self.session.get(User, followee_id) is None:
            raise NotFound("User not found")

        if await self._get_edge(principal.id, followee_id) is not None:
            raise DuplicateConstraintViolation("Already following this user")

        limit = follow_limit(principal)
        if limit is not None and await self._count_following(principal.id) >= limit:
            raise ValidationError(
                f"Free accounts can follow up to {limit} users",
                field="user_id",
            )

        edge = Follow(follower_id=principal.id, followee_id=followee_id)
        self.session.add(edge)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateConstraintViolation("Already following this user") from exc

        await self.event_store.log(
            event_type=EventType.USER_FOLLOWED,
            entity_type="user",
            entity_id=followee_id,
            user_id=principal.id,
            ip_address=ip_address,
        )
        logger.info("User followed", extra={"followee_id": str(followee_id)})
        return edge

    async def unfollow(
        self,
        principal: User,
        followee_id: uuid.UUID,
        ip_address: Optional[str] = None,
    ) -> None:
        """
        Remove the edge ``principal -> followee_id``.

        Raises:
            NotFound: not following
        """
        edge = await self._get_edge(principal.id, followee_id)
        if edge is None:
            raise NotFound("Not following this user")

        await self.session.delete(edge)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.USER_UNFOLLOWED,
            entity_type="user",
            entity_id=followee_id,
            user_id=principal.id,
            ip_address=ip_address,
        )

    async def is_following(self, principal: Optional[User], followee_id: uuid.UUID) -> bool:
        if principal is None:
            return False
        return await self._get_edge(principal.id, followee_id) is not None

    async def following_ids(self, user_id: uuid.UUID) -> set[uuid.UUID]:
        result = await self.session.execute(
            select(Follow.followee_id).where(Follow.follower_id == user_id)
        )
        return set(result.scalars().all())

    async def counts(self, user_id: uuid.UUID) -> FollowCounts:
        followers = await self.session.execute(
            select(func.count(Follow.id)).where(Follow.followee_id == user_id)
        )
        return FollowCounts(
            followers=followers.scalar_one(),
            following=await self._count_following(user_id),
        )
