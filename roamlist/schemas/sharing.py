"""
Trip share link schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from roamlist.kernel.models.trip import TripStatus
from roamlist.schemas.itinerary import ItineraryItemResponse


class ShareSettingsUpdate(BaseModel):
    """Only the fields that are sent are changed; an empty slug clears it."""

    is_public: Optional[bool] = None
    custom_slug: Optional[str] = Field(None, max_length=100)


class ShareLinkResponse(BaseModel):
    """The owner's view of a share link."""

    id: uuid.UUID
    trip_id: uuid.UUID
    share_code: str
    custom_slug: Optional[str] = None
    share_url: str
    is_public: bool
    view_count: int
    created_at: datetime

    class Config:
        from_attributes = True


class SharedTripInfo(BaseModel):
    id: uuid.UUID
    title: str
    status: TripStatus

    class Config:
        from_attributes = True


class SharedTripOwner(BaseModel):
    id: uuid.UUID
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class SharedTripResponse(BaseModel):
    """What anyone holding the link sees."""

    trip: SharedTripInfo
    owner: SharedTripOwner
    itinerary: List[ItineraryItemResponse]
    view_count: int
    show_branding: bool

    class Config:
        from_attributes = True
