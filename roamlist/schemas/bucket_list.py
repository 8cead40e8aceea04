"""
Bucket list schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from roamlist.kernel.models.bucket_list import BucketListStatus


class WeatherSnapshot(BaseModel):
    """Weather at the time of a visit."""

    temperature: float
    condition: str = Field(..., max_length=100)
    icon: str = Field(..., max_length=100)


class BucketListAdd(BaseModel):
    """Add a place to the caller's bucket list."""

    place_id: uuid.UUID
    priority: Optional[float] = None  # appended after the last item when omitted
    notes: Optional[str] = Field(None, max_length=5000)


class BucketListRankUpdate(BaseModel):
    rank: float


class BucketListStatusUpdate(BaseModel):
    """Lifecycle change; visit details only apply to ``visited``."""

    status: BucketListStatus
    visited_date: Optional[str] = Field(None, description="YYYY-MM-DD")
    rating: Optional[int] = None
    weather: Optional[WeatherSnapshot] = None


class BucketListNotesUpdate(BaseModel):
    notes: Optional[str] = Field(None, max_length=5000)


class BucketListItemResponse(BaseModel):
    """Bucket list item response."""

    id: uuid.UUID
    owner_id: uuid.UUID
    place_id: uuid.UUID
    rank: float
    status: BucketListStatus
    notes: Optional[str] = None
    visited_at: Optional[datetime] = None
    visited_date: Optional[str] = None
    rating: Optional[int] = None
    weather: Optional[WeatherSnapshot] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BucketListStatsResponse(BaseModel):
    total: int
    want_to_visit: int
    visited: int
    skipped: int
