"""
Feed Service - what the people you follow have been doing.

Activities are read straight from the event log: a place added to a bucket
list, or a place marked visited. Nothing is written here. Free accounts see
a limited window of history; roles with the full_feed capability see all
of it.
"""

import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Iterable, Optional

from pydantic import BaseModel
from sqlalchemy import and_, desc, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from roamlist.config import get_settings
from roamlist.kernel.errors import ValidationError
from roamlist.kernel.models.base import utcnow
from roamlist.kernel.models.bucket_list import BucketListItem
from roamlist.kernel.models.event_log import EventLog, EventType
from roamlist.kernel.models.user import User, UserRole
from roamlist.kernel.permissions.permission_service import Capability, check_permission, feed_history_days
from roamlist.kernel.visibility.policy_engine import VisibilityPolicyEngine
from roamlist.logging_config import get_logger

logger = get_logger(__name__)


class ActivityType(str, Enum):
    PLACE_ADDED = "place_added"
    PLACE_VISITED = "place_visited"


class ActivityActor(BaseModel):
    """Who did it."""

    user_id: uuid.UUID
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: UserRole
    pro_badge: bool = False


class Activity(BaseModel):
    id: uuid.UUID
    type: ActivityType
    place_id: uuid.UUID
    details: dict[str, Any] = {}
    created_at: datetime
    user: ActivityActor


class FeedPage(BaseModel):
    """One page of the feed, newest first; pass ``next_cursor`` back for the next."""

    activities: list[Activity] = []
    next_cursor: Optional[datetime] = None


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def activity_criteria():
    """Event log rows that count as feed activities."""
    return or_(
        EventLog.event_type == EventType.PLACE_VISITED.value,
        and_(
            EventLog.event_type == EventType.ITEM_ADDED.value,
            EventLog.entity_type == BucketListItem.entity_name,
        ),
    )


def to_activity(event: EventLog, actor: ActivityActor) -> Activity:
    payload = event.payload or {}
    if EventType(event.event_type) == EventType.PLACE_VISITED:
        return Activity(
            id=event.id,
            type=ActivityType.PLACE_VISITED,
            place_id=event.entity_id,
            details={"rating": payload.get("rating"), "visited_date": payload.get("visited_date")},
            created_at=_as_utc(event.created_at),
            user=actor,
        )
    return Activity(
        id=event.id,
        type=ActivityType.PLACE_ADDED,
        place_id=uuid.UUID(str(payload["place_id"])),
        created_at=_as_utc(event.created_at),
        user=actor,
    )


class FeedService:
    """Activity feed queries for one session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.visibility = VisibilityPolicyEngine(session)

    async def _actors(self, user_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, ActivityActor]:
        ids = set(user_ids)
        if not ids:
            return {}
        result = await self.session.execute(select(User).where(User.id.in_(ids)))
        return {
            user.id: ActivityActor(
                user_id=user.id,
                display_name=user.display_name,
                avatar_url=user.avatar_url,
                role=UserRole(user.role),
                pro_badge=check_permission(user.role, Capability.PRO_BADGE),
            )
            for user in result.scalars().all()
        }

    async def _to_activities(self, events: list[EventLog]) -> list[Activity]:
        actors = await self._actors(e.user_id for e in events if e.user_id is not None)
        return [to_activity(e, actors[e.user_id]) for e in events if e.user_id in actors]

    @staticmethod
    def _page_size(limit: Optional[int]) -> int:
        if limit is None:
            return get_settings().feed_page_size
        if limit < 1:
            raise ValidationError("limit must be at least 1", field="limit")
        return limit

    async def get_feed(
        self,
        viewer: Optional[User],
        limit: Optional[int] = None,
        cursor: Optional[datetime] = None,
    ) -> FeedPage:
        """
        Activities of the accounts ``viewer`` follows, newest first.

        Args:
            viewer: The caller; anonymous callers get an empty feed
            limit: Page size, defaults to ``feed_page_size``
            cursor: Only activities strictly older than this

        Returns:
            FeedPage; ``next_cursor`` is set when more activities remain
        """
        limit = self._page_size(limit)
        if viewer is None:
            return FeedPage()

        following = await self.visibility.load_following(viewer.id)
        if not following:
            return FeedPage()

        query = select(EventLog).where(EventLog.user_id.in_(following), activity_criteria())

        days = feed_history_days(viewer)
        if days is not None:
            query = query.where(EventLog.created_at >= utcnow() - timedelta(days=days))
        if cursor is not None:
            query = query.where(EventLog.created_at < _as_utc(cursor))

        result = await self.session.execute(
            query.order_by(desc(EventLog.created_at), desc(EventLog.id)).limit(limit + 1)
        )
        events = list(result.scalars().all())
        has_more = len(events) > limit
        activities = await self._to_activities(events[:limit])

        logger.debug(
            "Feed built",
            extra={"following": len(following), "activities": len(activities), "has_more": has_more},
        )
        return FeedPage(
            activities=activities,
            next_cursor=activities[-1].created_at if has_more and activities else None,
        )

    async def get_user_activities(
        self,
        user_id: uuid.UUID,
        limit: Optional[int] = None,
    ) -> list[Activity]:
        """One user's activities, newest first. Empty for unknown users."""
        limit = self._page_size(limit)
        if await self.session.get(User, user_id) is None:
            return []

        result = await self.session.execute(
            select(EventLog)
            .where(EventLog.user_id == user_id, activity_criteria())
            .order_by(desc(EventLog.created_at), desc(EventLog.id))
            .limit(limit)
        )
        return await self._to_activities(list(result.scalars().all()))
