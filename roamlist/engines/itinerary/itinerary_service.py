"""
Itinerary Service - per-trip, per-day ranked stops.

Scope of an itinerary item: (trip owner, trip, day number). Items can be
moved between days and reordered within a day. Every mutation touches the
trip's ``updated_at``.
"""

import re
import uuid
from typing import Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from roamlist.kernel.errors import NotFound, ValidationError
from roamlist.kernel.events.event_store import EventStore
from roamlist.kernel.identity.guard import AuthorizationGuard
from roamlist.kernel.models.base import utcnow
from roamlist.kernel.models.event_log import EventType
from roamlist.kernel.models.itinerary import ItineraryCategory, ItineraryItem
from roamlist.kernel.models.trip import Trip
from roamlist.kernel.models.user import User
from roamlist.kernel.ordering.collection_manager import CollectionScope, OrderedCollectionManager
from roamlist.logging_config import get_logger

logger = get_logger(__name__)

_START_TIME = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

# Fields update() may change; day and rank go through move()
UPDATABLE_FIELDS = frozenset({"start_time", "duration_minutes", "notes", "category"})


def validate_item_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Check and normalize optional itinerary fields."""
    start_time = fields.get("start_time")
    if start_time is not None and not _START_TIME.match(start_time):
        raise ValidationError("Start time must be HH:MM", field="start_time")

    duration = fields.get("duration_minutes")
    if duration is not None and duration < 0:
        raise ValidationError("Duration cannot be negative", field="duration_minutes")

    if "category" in fields:
        if fields["category"] is None:
            raise ValidationError("Category cannot be empty", field="category")
        try:
            fields["category"] = ItineraryCategory(fields["category"])
        except ValueError:
            raise ValidationError(f"Unknown category: {fields['category']}", field="category")
    return fields


class ItineraryService:
    """Itinerary operations for one session."""

    def __init__(self, session: AsyncSession, guard: Optional[AuthorizationGuard] = None):
        self.session = session
        self.guard = guard or AuthorizationGuard(session)
        self.collection = OrderedCollectionManager(session, ItineraryItem, self.guard)
        self.event_store = EventStore(session)

    async def _get_trip(self, trip_id: uuid.UUID) -> Trip:
        trip = await self.session.get(Trip, trip_id)
        if trip is None:
            raise NotFound("Trip not found")
        return trip

    async def _get_owned_trip(self, principal: User, trip_id: uuid.UUID) -> Trip:
        trip = await self.session.get(Trip, trip_id)
        return self.guard.require_ownership(principal, trip, "Trip")

    async def _touch_trip(self, trip_id: uuid.UUID) -> None:
        trip = await self.session.get(Trip, trip_id)
        if trip is not None:
            trip.updated_at = utcnow()

    @staticmethod
    def scope_for(trip: Trip, day_number: Optional[int] = None) -> CollectionScope:
        return CollectionScope(owner_id=trip.owner_id, container_id=trip.id, group_key=day_number)

    async def add(
        self,
        principal: User,
        trip_id: uuid.UUID,
        place_id: uuid.UUID,
        day_number: int,
        start_time: Optional[str] = None,
        duration_minutes: Optional[int] = None,
        notes: Optional[str] = None,
        category: ItineraryCategory = ItineraryCategory.ACTIVITY,
        ai_generated: bool = False,
        rank: Optional[float] = None,
        ip_address: Optional[str] = None,
    ) -> ItineraryItem:
        """
        Append a stop to one day of an owned trip.

        Raises:
            NotFound: trip missing (or not the caller's)
            ValidationError: bad day, time, duration or category
        """
        trip = await self._get_owned_trip(principal, trip_id)
        fields = validate_item_fields({
            "start_time": start_time,
            "duration_minutes": duration_minutes,
            "notes": notes,
            "category": category,
        })

        item = await self.collection.add_item(
            principal,
            self.scope_for(trip, day_number),
            place_id=place_id,
            explicit_rank=rank,
            ip_address=ip_address,
            ai_generated=ai_generated,
            **fields,
        )
        trip.updated_at = utcnow()
        return item

    async def update(
        self,
        principal: User,
        item_id: uuid.UUID,
        changes: dict[str, Any],
        ip_address: Optional[str] = None,
    ) -> ItineraryItem:
        """
        Change start time, duration, notes or category. Keys absent from
        ``changes`` are left alone; a None value clears the field.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update: {', '.join(sorted(unknown))}")
        changes = validate_item_fields(dict(changes))

        item = await self.collection.get_owned_item(principal, item_id)
        for name, value in changes.items():
            setattr(item, name, value)
        await self._touch_trip(item.trip_id)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.ITEM_UPDATED,
            entity_type=ItineraryItem.entity_name,
            entity_id=item.id,
            user_id=principal.id,
            payload={"fields": sorted(changes)},
            ip_address=ip_address,
        )
        return item

    async def move(
        self,
        principal: User,
        item_id: uuid.UUID,
        day_number: int,
        rank: Optional[float] = None,
        ip_address: Optional[str] = None,
    ) -> ItineraryItem:
        """
        Move a stop to ``day_number`` (possibly the same day) at ``rank``.
        Without a rank it goes after the last stop of that day.
        """
        item = await self.collection.get_owned_item(principal, item_id)
        if rank is None:
            rank = await self.collection.next_rank(
                CollectionScope(owner_id=item.owner_id, container_id=item.trip_id, group_key=day_number)
            )

        item = await self.collection.set_group_and_rank(
            principal, item_id, day_number, rank, ip_address=ip_address
        )
        await self._touch_trip(item.trip_id)
        return item

    async def remove(
        self,
        principal: User,
        item_id: uuid.UUID,
        ip_address: Optional[str] = None,
    ) -> None:
        item = await self.collection.get_owned_item(principal, item_id)
        trip_id = item.trip_id
        await self.collection.remove_item(principal, item_id, ip_address=ip_address)
        await self._touch_trip(trip_id)

    async def reorder(
        self,
        principal: User,
        trip_id: uuid.UUID,
        day_number: int,
        ordered_item_ids: Sequence[uuid.UUID],
        ip_address: Optional[str] = None,
    ) -> int:
        """
        Rank the given stops ``1..N`` on ``day_number``, moving any that
        were on another day of the same trip. Stops of other trips are
        skipped.

        Raises:
            NotFound: trip missing
            AuthorizationDenied: trip belongs to someone else
        """
        trip = await self._get_trip(trip_id)
        applied = await self.collection.reorder(
            principal,
            self.scope_for(trip, day_number),
            ordered_item_ids,
            ip_address=ip_address,
        )
        trip.updated_at = utcnow()
        return applied

    async def list_by_trip(
        self,
        principal: Optional[User],
        trip_id: uuid.UUID,
    ) -> list[ItineraryItem]:
        """All stops of a trip by day, then rank. Empty unless the caller owns the trip."""
        trip = await self.session.get(Trip, trip_id)
        if trip is None or not self.guard.owns(principal, trip.owner_id):
            return []
        return await self.collection.list_by_scope(principal, self.scope_for(trip))

    async def list_by_day(
        self,
        principal: Optional[User],
        trip_id: uuid.UUID,
        day_number: int,
    ) -> list[ItineraryItem]:
        """Stops of one day by rank. Empty unless the caller owns the trip."""
        trip = await self.session.get(Trip, trip_id)
        if trip is None or not self.guard.owns(principal, trip.owner_id):
            return []
        return await self.collection.list_by_scope(principal, self.scope_for(trip, day_number))
