"""
Itinerary items: per-trip, per-day ranked lists of places.
"""

import uuid
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from roamlist.kernel.models.base import Base
from roamlist.kernel.models.ranked_item import RankedItemMixin


class ItineraryCategory(str, Enum):
    """What kind of stop an itinerary item is."""
    ACTIVITY = "activity"
    MEAL = "meal"
    TRANSPORT = "transport"
    ACCOMMODATION = "accommodation"
    OTHER = "other"


class ItineraryItem(Base, RankedItemMixin):
    """One stop on one day of a trip."""

    __tablename__ = "itinerary_items"

    container_attr = "trip_id"
    group_attr = "day_number"
    entity_name = "itinerary_item"

    trip_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("trips.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    day_number: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    start_time: Mapped[Optional[str]] = mapped_column(
        String(5),  # HH:MM
        nullable=True,
    )
    duration_minutes: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    category: Mapped[ItineraryCategory] = mapped_column(
        String(50),
        default=ItineraryCategory.ACTIVITY,
        nullable=False,
    )
    ai_generated: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_itinerary_scope", "owner_id", "trip_id", "day_number"),
    )

    def __repr__(self) -> str:
        return f"<ItineraryItem trip={self.trip_id} day={self.day_number} rank={self.rank}>"
