"""
Bucket List Service - the owner's global ranked list of places.

Ranking goes through the OrderedCollectionManager; this service adds the
visit lifecycle on top:

    want_to_visit --> visited   (visited_at set, optional date/rating/weather)
    want_to_visit --> skipped

visited and skipped are terminal.
"""

import re
from datetime import date
import uuid
from typing import Any, Optional, Sequence

from pydantic import BaseModel
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from roamlist.kernel.errors import ValidationError
from roamlist.kernel.events.event_store import EventStore
from roamlist.kernel.identity.guard import AuthorizationGuard
from roamlist.kernel.models.bucket_list import BucketListItem, BucketListStatus, STATUS_TRANSITIONS
from roamlist.kernel.models.base import utcnow
from roamlist.kernel.models.event_log import EventType
from roamlist.kernel.models.user import User
from roamlist.kernel.ordering.collection_manager import CollectionScope, OrderedCollectionManager
from roamlist.logging_config import get_logger

logger = get_logger(__name__)

MIN_RATING = 1
MAX_RATING = 5
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _is_calendar_date(value: str) -> bool:
    if not _ISO_DATE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


class BucketListStats(BaseModel):
    """Per-status counts for one owner."""

    total: int = 0
    want_to_visit: int = 0
    visited: int = 0
    skipped: int = 0


class BucketListService:
    """
    Bucket list operations for one session.

    Every mutation takes the acting principal explicitly.
    """

    def __init__(self, session: AsyncSession, guard: Optional[AuthorizationGuard] = None):
        self.session = session
        self.guard = guard or AuthorizationGuard(session)
        self.collection = OrderedCollectionManager(session, BucketListItem, self.guard)
        self.event_store = EventStore(session)

    @staticmethod
    def scope_for(owner_id: uuid.UUID) -> CollectionScope:
        return CollectionScope(owner_id=owner_id)

    async def add(
        self,
        principal: User,
        place_id: uuid.UUID,
        priority: Optional[float] = None,
        notes: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> BucketListItem:
        """
        Add a place. Without ``priority`` it goes to the end of the list.

        Raises:
            DuplicateConstraintViolation: the place is already on the list
        """
        return await self.collection.add_item(
            principal,
            self.scope_for(principal.id),
            place_id=place_id,
            explicit_rank=priority,
            uniqueness_key=place_id,
            ip_address=ip_address,
            status=BucketListStatus.WANT_TO_VISIT,
            notes=notes,
        )

    async def update_status(
        self,
        principal: User,
        item_id: uuid.UUID,
        status: BucketListStatus,
        visited_date: Optional[str] = None,
        rating: Optional[int] = None,
        weather: Optional[dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> BucketListItem:
        """
        Move an item along its lifecycle.

        Visit details (date, rating, weather) are only accepted with the
        ``visited`` status. Marking a place visited also records a
        place-visited activity event.

        Raises:
            ValidationError: illegal transition or bad visit details
        """
        status = BucketListStatus(status)
        if status != BucketListStatus.VISITED and (
            visited_date is not None or rating is not None or weather is not None
        ):
            raise ValidationError("Visit details require the visited status", field="status")
        if rating is not None and not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}", field="rating")
        if visited_date is not None and not _is_calendar_date(visited_date):
            raise ValidationError("Visited date must be a valid YYYY-MM-DD date", field="visited_date")

        item = await self.collection.get_owned_item(principal, item_id)

        current = BucketListStatus(item.status)
        if status not in STATUS_TRANSITIONS[current]:
            raise ValidationError(
                f"Cannot change status from {current.value} to {status.value}",
                field="status",
            )

        item.status = status
        if status == BucketListStatus.VISITED:
            item.visited_at = utcnow()
            item.visited_date = visited_date
            item.rating = rating
            item.weather = weather
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.ITEM_UPDATED,
            entity_type=BucketListItem.entity_name,
            entity_id=item.id,
            user_id=principal.id,
            payload={"old_status": current, "new_status": status},
            ip_address=ip_address,
        )

        if status == BucketListStatus.VISITED:
            # Feed activity
            await self.event_store.log(
                event_type=EventType.PLACE_VISITED,
                entity_type="place",
                entity_id=item.place_id,
                user_id=principal.id,
                payload={"item_id": item.id, "rating": rating, "visited_date": visited_date},
                ip_address=ip_address,
            )
        elif status == BucketListStatus.SKIPPED:
            await self.event_store.log(
                event_type=EventType.PLACE_SKIPPED,
                entity_type="place",
                entity_id=item.place_id,
                user_id=principal.id,
                payload={"item_id": item.id},
                ip_address=ip_address,
            )

        logger.info(
            "Bucket list status changed",
            extra={"item_id": str(item.id), "status": status.value},
        )
        return item

    async def update_priority(
        self,
        principal: User,
        item_id: uuid.UUID,
        priority: float,
        ip_address: Optional[str] = None,
    ) -> BucketListItem:
        """Overwrite one item's rank."""
        return await self.collection.set_rank(principal, item_id, priority, ip_address=ip_address)

    async def update_notes(
        self,
        principal: User,
        item_id: uuid.UUID,
        notes: Optional[str],
        ip_address: Optional[str] = None,
    ) -> BucketListItem:
        """Replace the free-text notes (None clears them)."""
        item = await self.collection.get_owned_item(principal, item_id)
        item.notes = notes
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.ITEM_UPDATED,
            entity_type=BucketListItem.entity_name,
            entity_id=item.id,
            user_id=principal.id,
            payload={"fields": ["notes"]},
            ip_address=ip_address,
        )
        return item

    async def remove(
        self,
        principal: User,
        item_id: uuid.UUID,
        ip_address: Optional[str] = None,
    ) -> None:
        await self.collection.remove_item(principal, item_id, ip_address=ip_address)

    async def reorder(
        self,
        principal: User,
        owner_id: uuid.UUID,
        ordered_item_ids: Sequence[uuid.UUID],
        ip_address: Optional[str] = None,
    ) -> int:
        """Rank the given items ``1..N`` in order; see OrderedCollectionManager.reorder."""
        return await self.collection.reorder(
            principal,
            self.scope_for(owner_id),
            ordered_item_ids,
            ip_address=ip_address,
        )

    async def list_items(
        self,
        principal: Optional[User],
        status: Optional[BucketListStatus] = None,
    ) -> list[BucketListItem]:
        """The principal's list by rank, optionally one status only. Empty when anonymous."""
        if principal is None:
            return []
        criteria = []
        if status is not None:
            criteria.append(BucketListItem.status == BucketListStatus(status).value)
        return await self.collection.list_by_scope(principal, self.scope_for(principal.id), *criteria)

    async def get_by_place(
        self,
        principal: Optional[User],
        place_id: uuid.UUID,
    ) -> Optional[BucketListItem]:
        """The principal's entry for a place, if any."""
        if principal is None:
            return None
        result = await self.session.execute(
            select(BucketListItem).where(
                BucketListItem.owner_id == principal.id,
                BucketListItem.place_id == place_id,
            )
        )
        return result.scalar_one_or_none()

    async def stats(self, principal: Optional[User]) -> BucketListStats:
        """Counts per status. All zero when anonymous."""
        if principal is None:
            return BucketListStats()

        result = await self.session.execute(
            select(BucketListItem.status, func.count(BucketListItem.id))
            .where(BucketListItem.owner_id == principal.id)
            .group_by(BucketListItem.status)
        )
        counts = {BucketListStatus(status): count for status, count in result.all()}
        return BucketListStats(
            total=sum(counts.values()),
            want_to_visit=counts.get(BucketListStatus.WANT_TO_VISIT, 0),
            visited=counts.get(BucketListStatus.VISITED, 0),
            skipped=counts.get(BucketListStatus.SKIPPED, 0),
        )
