"""
Activity feed schemas.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from roamlist.engines.social.feed_service import ActivityType
from roamlist.kernel.models.user import UserRole


class ActivityActorResponse(BaseModel):
    user_id: uuid.UUID
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: UserRole
    pro_badge: bool


class ActivityResponse(BaseModel):
    """One thing a followed user did."""

    id: uuid.UUID
    type: ActivityType
    place_id: uuid.UUID
    details: Dict[str, Any] = {}
    created_at: datetime
    user: ActivityActorResponse


class FeedPageResponse(BaseModel):
    activities: List[ActivityResponse]
    next_cursor: Optional[datetime] = None
