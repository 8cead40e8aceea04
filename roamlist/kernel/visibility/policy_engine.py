"""
VisibilityPolicyEngine - which shared resources a viewer may see.

A resource is visible to a viewer when any of these holds:
- the viewer owns it
- its tier is public
- its tier is followers and the viewer follows its owner

Private resources are only ever visible to their owner. Anonymous viewers
see public resources only. The viewer's follow set is loaded once per call,
never per resource.

The engine filters; it never raises for authorization reasons.
"""

import uuid
from datetime import datetime, timezone
from typing import AbstractSet, Iterable, Optional, Protocol, Sequence, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roamlist.kernel.models.follow import Follow
from roamlist.kernel.models.photo import VisibilityTier
from roamlist.kernel.models.user import User
from roamlist.logging_config import get_logger

logger = get_logger(__name__)


class ShareableResource(Protocol):
    """Anything owner-tagged with a visibility tier (photos, ...)."""

    id: uuid.UUID
    owner_id: uuid.UUID
    visibility: VisibilityTier
    created_at: datetime


ResourceT = TypeVar("ResourceT", bound=ShareableResource)


class VisibilityStats(BaseModel):
    """Counts over a resource set."""

    total: int
    public_count: int
    has_public_content: bool


class ContributorProfile(BaseModel):
    """A distinct public contributor and their profile reference."""

    owner_id: uuid.UUID
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None


# =============================================================================
# PURE RULES
# =============================================================================

def is_visible(
    resource: ShareableResource,
    viewer_id: Optional[uuid.UUID],
    following: AbstractSet[uuid.UUID] = frozenset(),
) -> bool:
    """Apply the visibility rule to one resource."""
    if viewer_id is not None and resource.owner_id == viewer_id:
        return True

    tier = VisibilityTier(resource.visibility)
    if tier == VisibilityTier.PUBLIC:
        return True
    if tier == VisibilityTier.FOLLOWERS:
        return viewer_id is not None and resource.owner_id in following
    return False


def filter_visible(
    resources: Iterable[ResourceT],
    viewer_id: Optional[uuid.UUID],
    following: AbstractSet[uuid.UUID] = frozenset(),
) -> list[ResourceT]:
    """Visible subset, in input order."""
    return [r for r in resources if is_visible(r, viewer_id, following)]


def _canonical_key(resource: ShareableResource) -> tuple[datetime, str]:
    created = resource.created_at
    # SQLite hands back naive datetimes for timezone-aware columns
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created, str(resource.id)


def canonical_order(resources: Iterable[ResourceT]) -> list[ResourceT]:
    """Oldest first; id breaks ties."""
    return sorted(resources, key=_canonical_key)


def distinct_public_owners(resources: Iterable[ShareableResource], limit: int) -> list[uuid.UUID]:
    """
    First ``limit`` distinct owners of public resources, scanning in
    canonical order so the result does not depend on input order.
    """
    owners: list[uuid.UUID] = []
    if limit <= 0:
        return owners

    seen: set[uuid.UUID] = set()
    for resource in canonical_order(resources):
        if VisibilityTier(resource.visibility) != VisibilityTier.PUBLIC:
            continue
        if resource.owner_id in seen:
            continue
        seen.add(resource.owner_id)
        owners.append(resource.owner_id)
        if len(owners) >= limit:
            break
    return owners


def aggregate_stats(resources: Iterable[ShareableResource]) -> VisibilityStats:
    """Total and public counts; no graph lookups."""
    total = 0
    public_count = 0
    for resource in resources:
        total += 1
        if VisibilityTier(resource.visibility) == VisibilityTier.PUBLIC:
            public_count += 1
    return VisibilityStats(
        total=total,
        public_count=public_count,
        has_public_content=public_count > 0,
    )


# =============================================================================
# ENGINE
# =============================================================================

class VisibilityPolicyEngine:
    """
    Store-backed visibility queries.

    Usage:
        engine = VisibilityPolicyEngine(session)
        photos = await engine.visible_set(viewer.id if viewer else None, photos)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def load_following(self, viewer_id: uuid.UUID) -> frozenset[uuid.UUID]:
        """Owner ids the viewer follows, in one query."""
        result = await self.session.execute(
            select(Follow.followee_id).where(Follow.follower_id == viewer_id)
        )
        return frozenset(result.scalars().all())

    async def visible_set(
        self,
        viewer_id: Optional[uuid.UUID],
        resources: Sequence[ResourceT],
        following: Optional[AbstractSet[uuid.UUID]] = None,
    ) -> list[ResourceT]:
        """
        Visible subset of ``resources`` for ``viewer_id``.

        Args:
            viewer_id: The viewer, or None when unauthenticated
            resources: Candidate resources
            following: Pre-loaded follow set; loaded here when omitted and
                the viewer could need it

        Returns:
            Visible resources, input order preserved
        """
        if viewer_id is None:
            following = frozenset()
        elif following is None:
            needs_graph = any(
                VisibilityTier(r.visibility) == VisibilityTier.FOLLOWERS and r.owner_id != viewer_id
                for r in resources
            )
            following = await self.load_following(viewer_id) if needs_graph else frozenset()

        visible = filter_visible(resources, viewer_id, following)
        logger.debug(
            "Visibility filtered",
            extra={"candidates": len(resources), "visible": len(visible)},
        )
        return visible

    async def visible_set_for(
        self,
        viewer: Optional[User],
        resources: Sequence[ResourceT],
    ) -> list[ResourceT]:
        """visible_set for an optional principal."""
        return await self.visible_set(viewer.id if viewer else None, resources)

    async def contributor_summary(
        self,
        resources: Sequence[ShareableResource],
        limit: int,
    ) -> list[ContributorProfile]:
        """
        Up to ``limit`` distinct owners of public resources, oldest
        contribution first, with their profile reference.
        """
        owner_ids = distinct_public_owners(resources, limit)
        if not owner_ids:
            return []

        result = await self.session.execute(select(User).where(User.id.in_(owner_ids)))
        users = {user.id: user for user in result.scalars().all()}

        return [
            ContributorProfile(
                owner_id=owner_id,
                display_name=users[owner_id].display_name if owner_id in users else None,
                avatar_url=users[owner_id].avatar_url if owner_id in users else None,
            )
            for owner_id in owner_ids
        ]

    @staticmethod
    def aggregate_stats(resources: Iterable[ShareableResource]) -> VisibilityStats:
        """Total and public counts over ``resources``."""
        return aggregate_stats(resources)
