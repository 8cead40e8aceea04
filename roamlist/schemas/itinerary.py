"""
Itinerary schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from roamlist.kernel.models.itinerary import ItineraryCategory


class ItineraryItemCreate(BaseModel):
    """Add a stop to one day of a trip."""

    place_id: uuid.UUID
    day_number: int
    start_time: Optional[str] = Field(None, description="HH:MM")
    duration_minutes: Optional[int] = None
    notes: Optional[str] = Field(None, max_length=5000)
    category: ItineraryCategory = ItineraryCategory.ACTIVITY
    rank: Optional[float] = None


class ItineraryItemUpdate(BaseModel):
    """Only the fields that are sent are changed."""

    start_time: Optional[str] = Field(None, description="HH:MM")
    duration_minutes: Optional[int] = None
    notes: Optional[str] = Field(None, max_length=5000)
    category: Optional[ItineraryCategory] = None


class ItineraryPositionUpdate(BaseModel):
    """Move a stop to a day; appended to that day when ``rank`` is omitted."""

    day_number: int
    rank: Optional[float] = None


class ItineraryItemResponse(BaseModel):
    """Itinerary item response."""

    id: uuid.UUID
    owner_id: uuid.UUID
    trip_id: uuid.UUID
    place_id: uuid.UUID
    day_number: int
    rank: float
    start_time: Optional[str] = None
    duration_minutes: Optional[int] = None
    notes: Optional[str] = None
    category: ItineraryCategory
    ai_generated: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
