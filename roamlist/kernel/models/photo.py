"""
Photos: owner-tagged resources shared at one of three visibility tiers.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from roamlist.kernel.models.base import Base, generate_uuid, utcnow


class VisibilityTier(str, Enum):
    """Who may see a shared resource besides its owner."""
    PUBLIC = "public"
    FOLLOWERS = "followers"
    PRIVATE = "private"


class Photo(Base):
    """A photo attached to a place (and optionally a trip)."""

    __tablename__ = "photos"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    place_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
    )
    trip_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("trips.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    visibility: Mapped[VisibilityTier] = mapped_column(
        String(20),
        default=VisibilityTier.PRIVATE,
        nullable=False,
    )

    # Blob lives in the upload collaborator's storage
    storage_ref: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
    )
    caption: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    width: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    height: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    taken_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_photos_place_visibility", "place_id", "visibility"),
    )

    def __repr__(self) -> str:
        return f"<Photo {self.id} place={self.place_id} visibility={self.visibility}>"
