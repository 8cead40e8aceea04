"""
Photo Service - owner-tagged photos shared at a visibility tier.

Photos default to private. Only the owner may change a photo's tier,
caption or existence. Listings run every candidate through the
VisibilityPolicyEngine, so callers only ever see what the tier rules allow.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from roamlist.config import get_settings
from roamlist.kernel.errors import ValidationError
from roamlist.kernel.events.event_store import EventStore
from roamlist.kernel.identity.guard import AuthorizationGuard
from roamlist.kernel.models.event_log import EventType
from roamlist.kernel.models.photo import Photo, VisibilityTier
from roamlist.kernel.models.trip import Trip
from roamlist.kernel.models.user import User
from roamlist.kernel.visibility.policy_engine import (
    ContributorProfile,
    VisibilityPolicyEngine,
    VisibilityStats,
    canonical_order,
)
from roamlist.logging_config import get_logger

logger = get_logger(__name__)


class CommunitySummary(BaseModel):
    """What the community has shared about one place."""

    place_id: uuid.UUID
    stats: VisibilityStats
    contributors: list[ContributorProfile]
    preview_storage_ref: Optional[str] = None


class PhotoService:
    """Photo operations for one session."""

    def __init__(self, session: AsyncSession, guard: Optional[AuthorizationGuard] = None):
        self.session = session
        self.guard = guard or AuthorizationGuard(session)
        self.visibility = VisibilityPolicyEngine(session)
        self.event_store = EventStore(session)

    async def _get_owned_photo(self, principal: User, photo_id: uuid.UUID) -> Photo:
        photo = await self.session.get(Photo, photo_id)
        return self.guard.require_ownership(principal, photo, "Photo")

    async def create(
        self,
        principal: User,
        place_id: uuid.UUID,
        storage_ref: str,
        trip_id: Optional[uuid.UUID] = None,
        caption: Optional[str] = None,
        visibility: VisibilityTier = VisibilityTier.PRIVATE,
        width: Optional[int] = None,
        height: Optional[int] = None,
        taken_at: Optional[datetime] = None,
        ip_address: Optional[str] = None,
    ) -> Photo:
        """
        Register an uploaded photo.

        Raises:
            ValidationError: empty storage reference or bad dimensions
            NotFound: ``trip_id`` is not one of the caller's trips
        """
        if not storage_ref or not storage_ref.strip():
            raise ValidationError("Storage reference is required", field="storage_ref")
        if (width is not None and width <= 0) or (height is not None and height <= 0):
            raise ValidationError("Dimensions must be positive", field="width")
        if trip_id is not None:
            trip = await self.session.get(Trip, trip_id)
            self.guard.require_ownership(principal, trip, "Trip")

        photo = Photo(
            owner_id=principal.id,
            place_id=place_id,
            trip_id=trip_id,
            storage_ref=storage_ref.strip(),
            caption=caption,
            visibility=VisibilityTier(visibility),
            width=width,
            height=height,
            taken_at=taken_at,
        )
        self.session.add(photo)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.PHOTO_CREATED,
            entity_type="photo",
            entity_id=photo.id,
            user_id=principal.id,
            payload={"place_id": place_id, "trip_id": trip_id, "visibility": photo.visibility},
            ip_address=ip_address,
        )
        logger.info("Photo created", extra={"photo_id": str(photo.id)})
        return photo

    async def set_visibility_tier(
        self,
        principal: User,
        photo_id: uuid.UUID,
        tier: VisibilityTier,
        ip_address: Optional[str] = None,
    ) -> Photo:
        """Change who may see a photo. Owner only."""
        tier = VisibilityTier(tier)
        photo = await self._get_owned_photo(principal, photo_id)

        old_tier = VisibilityTier(photo.visibility)
        if old_tier == tier:
            return photo

        photo.visibility = tier
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.PHOTO_VISIBILITY_CHANGED,
            entity_type="photo",
            entity_id=photo.id,
            user_id=principal.id,
            payload={"old_visibility": old_tier, "new_visibility": tier},
            ip_address=ip_address,
        )
        logger.info(
            "Photo visibility changed",
            extra={"photo_id": str(photo.id), "visibility": tier.value},
        )
        return photo

    async def update_caption(
        self,
        principal: User,
        photo_id: uuid.UUID,
        caption: Optional[str],
        ip_address: Optional[str] = None,
    ) -> Photo:
        photo = await self._get_owned_photo(principal, photo_id)
        photo.caption = caption
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.PHOTO_UPDATED,
            entity_type="photo",
            entity_id=photo.id,
            user_id=principal.id,
            payload={"fields": ["caption"]},
            ip_address=ip_address,
        )
        return photo

    async def remove(
        self,
        principal: User,
        photo_id: uuid.UUID,
        ip_address: Optional[str] = None,
    ) -> None:
        """Delete the photo record. The stored blob is the upload collaborator's concern."""
        photo = await self._get_owned_photo(principal, photo_id)
        storage_ref = photo.storage_ref
        await self.session.delete(photo)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.PHOTO_REMOVED,
            entity_type="photo",
            entity_id=photo_id,
            user_id=principal.id,
            payload={"storage_ref": storage_ref},
            ip_address=ip_address,
        )

    async def _photos_where(self, *criteria) -> list[Photo]:
        result = await self.session.execute(
            select(Photo).where(*criteria).order_by(desc(Photo.created_at), Photo.id)
        )
        return list(result.scalars().all())

    async def list_for_place(self, viewer: Optional[User], place_id: uuid.UUID) -> list[Photo]:
        """Photos of a place the viewer may see, newest first."""
        photos = await self._photos_where(Photo.place_id == place_id)
        return await self.visibility.visible_set_for(viewer, photos)

    async def list_for_trip(self, viewer: Optional[User], trip_id: uuid.UUID) -> list[Photo]:
        """Photos of a trip the viewer may see, newest first."""
        photos = await self._photos_where(Photo.trip_id == trip_id)
        return await self.visibility.visible_set_for(viewer, photos)

    async def community_summary(
        self,
        viewer: Optional[User],
        place_id: uuid.UUID,
        limit: Optional[int] = None,
    ) -> CommunitySummary:
        """
        Counts over the photos of a place the viewer may see, plus the
        first ``limit`` public contributors (oldest contribution first).
        """
        if limit is None:
            limit = get_settings().contributor_preview_limit

        photos = await self._photos_where(Photo.place_id == place_id)
        visible = await self.visibility.visible_set_for(viewer, photos)
        contributors = await self.visibility.contributor_summary(photos, limit)

        preview = next(
            (p.storage_ref for p in canonical_order(photos)
             if VisibilityTier(p.visibility) == VisibilityTier.PUBLIC),
            None,
        )
        return CommunitySummary(
            place_id=place_id,
            stats=self.visibility.aggregate_stats(visible),
            contributors=contributors,
            preview_storage_ref=preview,
        )
