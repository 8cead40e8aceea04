"""
Trip model. Only the container for itinerary days lives here; trip
editing is handled outside the core.
"""

import uuid
from enum import Enum

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from roamlist.kernel.models.base import Base, TimestampMixin, generate_uuid


class TripStatus(str, Enum):
    """Trip lifecycle status."""
    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"


class Trip(Base, TimestampMixin):
    """A planned trip owned by one user."""

    __tablename__ = "trips"

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
    title: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    status: Mapped[TripStatus] = mapped_column(
        String(50),
        default=TripStatus.PLANNING,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Trip {self.title[:50]}>"
