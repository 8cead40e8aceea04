"""
Bucket list: one global ranked list of places per user.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Integer, JSON, String, Text, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from roamlist.kernel.models.base import Base
from roamlist.kernel.models.ranked_item import RankedItemMixin


class BucketListStatus(str, Enum):
    """Lifecycle of a bucket-list entry."""
    WANT_TO_VISIT = "want_to_visit"
    VISITED = "visited"
    SKIPPED = "skipped"


# visited and skipped are terminal
STATUS_TRANSITIONS: dict[BucketListStatus, frozenset[BucketListStatus]] = {
    BucketListStatus.WANT_TO_VISIT: frozenset({BucketListStatus.VISITED, BucketListStatus.SKIPPED}),
    BucketListStatus.VISITED: frozenset(),
    BucketListStatus.SKIPPED: frozenset(),
}


class BucketListItem(Base, RankedItemMixin):
    """A place the owner wants to visit, ranked by priority."""

    __tablename__ = "bucket_list_items"

    uniqueness_attr = "place_id"
    entity_name = "bucket_list_item"

    status: Mapped[BucketListStatus] = mapped_column(
        String(50),
        default=BucketListStatus.WANT_TO_VISIT,
        nullable=False,
    )
    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    # Set only on the transition to visited
    visited_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    visited_date: Mapped[Optional[str]] = mapped_column(
        String(10),  # ISO date
        nullable=True,
    )
    rating: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    # {"temperature": float, "condition": str, "icon": str}
    weather: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
    )

    __table_args__ = (
        UniqueConstraint("owner_id", "place_id", name="uq_bucket_list_owner_place"),
        Index("ix_bucket_list_owner_status", "owner_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<BucketListItem place={self.place_id} rank={self.rank} status={self.status}>"
