"""
Trip share links: a public, read-only view of one trip's itinerary.
"""

import uuid
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from roamlist.kernel.models.base import Base, TimestampMixin, generate_uuid


class SharedTrip(Base, TimestampMixin):
    """
    One share link per trip. The link resolves by ``share_code`` or, when
    the owner's role allows it, by ``custom_slug``.
    """

    __tablename__ = "shared_trips"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    trip_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("trips.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    # Denormalized from the trip for counting a user's shares
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    share_code: Mapped[str] = mapped_column(
        String(32),
        unique=True,
        index=True,
        nullable=False,
    )
    custom_slug: Mapped[Optional[str]] = mapped_column(
        String(100),
        unique=True,
        nullable=True,
    )
    is_public: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    view_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    @property
    def share_url(self) -> str:
        return f"/shared/{self.custom_slug or self.share_code}"

    def __repr__(self) -> str:
        return f"<SharedTrip {self.share_code} trip={self.trip_id}>"
