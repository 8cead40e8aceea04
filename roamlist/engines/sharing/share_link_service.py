"""
Share Link Service - public read-only links to a trip's itinerary.

A trip has at most one link. Anyone holding the code (or the owner's custom
slug) can read the trip while the link is public; only the owner may
create, change or delete it. Free accounts may keep a limited number of
trips shared at once.
"""

import re
import secrets
import uuid
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import select, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from roamlist.config import get_settings
from roamlist.kernel.errors import (
    AuthorizationDenied,
    DuplicateConstraintViolation,
    NotFound,
    ValidationError,
)
from roamlist.kernel.events.event_store import EventStore
from roamlist.kernel.identity.guard import AuthorizationGuard
from roamlist.kernel.models.event_log import EventType
from roamlist.kernel.models.itinerary import ItineraryItem
from roamlist.kernel.models.shared_trip import SharedTrip
from roamlist.kernel.models.trip import Trip
from roamlist.kernel.models.user import User
from roamlist.kernel.permissions.permission_service import Capability, check_permission, share_limit
from roamlist.logging_config import get_logger

logger = get_logger(__name__)

# No 0/O, 1/I/l: codes get read aloud and retyped
SHARE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghjkmnpqrstuvwxyz23456789"
MAX_SLUG_LENGTH = 100
_SLUG = re.compile(r"^[a-z0-9-]+$")

SETTINGS_FIELDS = frozenset({"is_public", "custom_slug"})


def generate_share_code(length: Optional[int] = None) -> str:
    """Random share code from SHARE_CODE_ALPHABET."""
    length = length or get_settings().share_code_length
    return "".join(secrets.choice(SHARE_CODE_ALPHABET) for _ in range(length))


def validate_slug(slug: str) -> str:
    if len(slug) > MAX_SLUG_LENGTH or not _SLUG.match(slug):
        raise ValidationError(
            "Custom slug can only contain lowercase letters, numbers and hyphens",
            field="custom_slug",
        )
    return slug


@dataclass
class SharedTripView:
    """What a link holder sees."""

    trip: Trip
    owner: User
    itinerary: list[ItineraryItem]
    view_count: int
    show_branding: bool


class ShareLinkService:
    """Trip share link operations for one session."""

    def __init__(self, session: AsyncSession, guard: Optional[AuthorizationGuard] = None):
        self.session = session
        self.guard = guard or AuthorizationGuard(session)
        self.event_store = EventStore(session)

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    async def _get_owned_trip(self, principal: User, trip_id: uuid.UUID) -> Trip:
        trip = await self.session.get(Trip, trip_id)
        return self.guard.require_ownership(principal, trip, "Trip")

    async def _share_for_trip(self, trip_id: uuid.UUID) -> Optional[SharedTrip]:
        result = await self.session.execute(select(SharedTrip).where(SharedTrip.trip_id == trip_id))
        return result.scalar_one_or_none()

    async def _share_where(self, criterion) -> Optional[SharedTrip]:
        result = await self.session.execute(select(SharedTrip).where(criterion))
        return result.scalar_one_or_none()

    async def resolve(self, code: str) -> Optional[SharedTrip]:
        """Find a link by share code, falling back to custom slug."""
        share = await self._share_where(SharedTrip.share_code == code)
        if share is None:
            share = await self._share_where(SharedTrip.custom_slug == code)
        return share

    async def count_shares(self, owner_id: uuid.UUID) -> int:
        result = await self.session.execute(
            select(func.count(SharedTrip.id)).where(SharedTrip.owner_id == owner_id)
        )
        return result.scalar_one()

    # =========================================================================
    # OWNER OPERATIONS
    # =========================================================================

    async def create(
        self,
        principal: User,
        trip_id: uuid.UUID,
        ip_address: Optional[str] = None,
    ) -> SharedTrip:
        """
        Share a trip. Sharing an already shared trip returns its link.

        Raises:
            NotFound: trip missing (or not the caller's)
            ValidationError: the role's share limit is reached
        """
        trip = await self._get_owned_trip(principal, trip_id)

        existing = await self._share_for_trip(trip.id)
        if existing is not None:
            return existing

        limit = share_limit(principal)
        if limit is not None and await self.count_shares(principal.id) >= limit:
            raise ValidationError(
                f"Free accounts can share up to {limit} trips",
                field="trip_id",
            )

        code = generate_share_code()
        while await self._share_where(SharedTrip.share_code == code) is not None:
            code = generate_share_code()

        share = SharedTrip(trip_id=trip.id, owner_id=principal.id, share_code=code)
        self.session.add(share)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateConstraintViolation("Trip is already shared", field="trip_id") from exc

        await self.event_store.log(
            event_type=EventType.SHARE_LINK_CREATED,
            entity_type="shared_trip",
            entity_id=share.id,
            user_id=principal.id,
            payload={"trip_id": trip.id},
            ip_address=ip_address,
        )
        logger.info("Trip shared", extra={"trip_id": str(trip.id)})
        return share

    async def get_settings(self, principal: Optional[User], trip_id: uuid.UUID) -> Optional[SharedTrip]:
        """The caller's link for a trip, or None."""
        trip = await self.session.get(Trip, trip_id)
        if trip is None or not self.guard.owns(principal, trip.owner_id):
            return None
        return await self._share_for_trip(trip.id)

    async def update_settings(
        self,
        principal: User,
        trip_id: uuid.UUID,
        changes: dict[str, Any],
        ip_address: Optional[str] = None,
    ) -> SharedTrip:
        """
        Change ``is_public`` and/or ``custom_slug``. Keys absent from
        ``changes`` are left alone; an empty or None slug clears it.

        Raises:
            NotFound: trip missing, or not shared yet
            AuthorizationDenied: custom slugs need the custom_urls capability
            DuplicateConstraintViolation: slug already in use
            ValidationError: bad slug or unknown field
        """
        unknown = set(changes) - SETTINGS_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update: {', '.join(sorted(unknown))}")

        trip = await self._get_owned_trip(principal, trip_id)
        share = await self._share_for_trip(trip.id)
        if share is None:
            raise NotFound("Trip is not shared")

        if "is_public" in changes:
            if changes["is_public"] is None:
                raise ValidationError("is_public cannot be null", field="is_public")
            share.is_public = bool(changes["is_public"])

        if "custom_slug" in changes:
            if not check_permission(principal.role, Capability.CUSTOM_URLS):
                raise AuthorizationDenied("Custom share URLs require a Pro account")
            slug = changes["custom_slug"] or None
            if slug is not None:
                validate_slug(slug)
                # Codes resolve before slugs, so a slug may not shadow one either
                taken = await self._share_where(
                    (SharedTrip.custom_slug == slug) | (SharedTrip.share_code == slug)
                )
                if taken is not None and taken.id != share.id:
                    raise DuplicateConstraintViolation("This custom URL is already taken", field="custom_slug")
            share.custom_slug = slug

        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateConstraintViolation("This custom URL is already taken", field="custom_slug") from exc

        await self.event_store.log(
            event_type=EventType.SHARE_LINK_UPDATED,
            entity_type="shared_trip",
            entity_id=share.id,
            user_id=principal.id,
            payload={"fields": sorted(changes), "is_public": share.is_public},
            ip_address=ip_address,
        )
        return share

    async def delete(
        self,
        principal: User,
        trip_id: uuid.UUID,
        ip_address: Optional[str] = None,
    ) -> None:
        """Remove the trip's link. Deleting a link that does not exist is a no-op."""
        trip = await self._get_owned_trip(principal, trip_id)
        share = await self._share_for_trip(trip.id)
        if share is None:
            return

        share_id = share.id
        await self.session.delete(share)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.SHARE_LINK_DELETED,
            entity_type="shared_trip",
            entity_id=share_id,
            user_id=principal.id,
            payload={"trip_id": trip.id},
            ip_address=ip_address,
        )

    # =========================================================================
    # LINK HOLDERS
    # =========================================================================

    async def get_shared_trip(self, code: str) -> Optional[SharedTripView]:
        """The trip behind a public link, itinerary by day then rank. None otherwise."""
        share = await self.resolve(code)
        if share is None or not share.is_public:
            return None

        trip = await self.session.get(Trip, share.trip_id)
        if trip is None:
            return None
        owner = await self.session.get(User, trip.owner_id)
        if owner is None:
            return None

        result = await self.session.execute(
            select(ItineraryItem)
            .where(ItineraryItem.trip_id == trip.id)
            .order_by(
                ItineraryItem.day_number,
                ItineraryItem.rank,
                ItineraryItem.created_at,
                ItineraryItem.id,
            )
        )
        return SharedTripView(
            trip=trip,
            owner=owner,
            itinerary=list(result.scalars().all()),
            view_count=share.view_count,
            show_branding=not check_permission(owner.role, Capability.HIDE_BRANDING),
        )

    async def record_view(self, code: str) -> Optional[int]:
        """
        Count one view of a public link.

        Returns:
            The new view count, or None when the link is unknown or private
        """
        share = await self.resolve(code)
        if share is None or not share.is_public:
            return None

        await self.session.execute(
            update(SharedTrip)
            .where(SharedTrip.id == share.id)
            .values(view_count=SharedTrip.view_count + 1)
            .execution_options(synchronize_session="evaluate")
        )
        return share.view_count
