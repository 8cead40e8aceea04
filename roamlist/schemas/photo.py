"""
Photo and community schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from roamlist.kernel.models.photo import VisibilityTier


class PhotoCreate(BaseModel):
    """Register an uploaded photo. The blob is already stored."""

    place_id: uuid.UUID
    storage_ref: str = Field(..., min_length=1, max_length=1024)
    trip_id: Optional[uuid.UUID] = None
    caption: Optional[str] = Field(None, max_length=2000)
    visibility: VisibilityTier = VisibilityTier.PRIVATE
    width: Optional[int] = None
    height: Optional[int] = None
    taken_at: Optional[datetime] = None


class PhotoVisibilityUpdate(BaseModel):
    visibility: VisibilityTier


class PhotoCaptionUpdate(BaseModel):
    caption: Optional[str] = Field(None, max_length=2000)


class PhotoResponse(BaseModel):
    """Photo response."""

    id: uuid.UUID
    owner_id: uuid.UUID
    place_id: uuid.UUID
    trip_id: Optional[uuid.UUID] = None
    visibility: VisibilityTier
    storage_ref: str
    caption: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    taken_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ContributorResponse(BaseModel):
    owner_id: uuid.UUID
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class VisibilityStatsResponse(BaseModel):
    total: int
    public_count: int
    has_public_content: bool

    class Config:
        from_attributes = True


class CommunitySummaryResponse(BaseModel):
    """Shared content about one place."""

    place_id: uuid.UUID
    stats: VisibilityStatsResponse
    contributors: List[ContributorResponse]
    preview_storage_ref: Optional[str] = None

    class Config:
        from_attributes = True
