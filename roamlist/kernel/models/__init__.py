"""
Kernel Data Models

SQLAlchemy models for principals, ranked collections, shared photos,
the follow graph and the event log.
"""

from roamlist.kernel.models.base import Base, TimestampMixin, generate_uuid, utcnow
from roamlist.kernel.models.user import User, UserRole
from roamlist.kernel.models.trip import Trip, TripStatus
from roamlist.kernel.models.ranked_item import RankedItemMixin
from roamlist.kernel.models.bucket_list import (
    BucketListItem,
    BucketListStatus,
    STATUS_TRANSITIONS,
)
from roamlist.kernel.models.itinerary import ItineraryItem, ItineraryCategory
from roamlist.kernel.models.photo import Photo, VisibilityTier
from roamlist.kernel.models.follow import Follow
from roamlist.kernel.models.shared_trip import SharedTrip
from roamlist.kernel.models.event_log import EventLog, EventType

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    "utcnow",
    # Principals
    "User",
    "UserRole",
    # Trips
    "Trip",
    "TripStatus",
    # Ranked collections
    "RankedItemMixin",
    "BucketListItem",
    "BucketListStatus",
    "STATUS_TRANSITIONS",
    "ItineraryItem",
    "ItineraryCategory",
    # Sharing
    "Photo",
    "VisibilityTier",
    "Follow",
    "SharedTrip",
    # Event Log
    "EventLog",
    "EventType",
]
