"""
Pydantic schemas for API request/response validation.
"""

from roamlist.schemas.common import (
    ErrorResponse,
    HealthResponse,
    ReorderRequest,
    ReorderResponse,
)
from roamlist.schemas.bucket_list import (
    WeatherSnapshot,
    BucketListAdd,
    BucketListRankUpdate,
    BucketListStatusUpdate,
    BucketListNotesUpdate,
    BucketListItemResponse,
    BucketListStatsResponse,
)
from roamlist.schemas.itinerary import (
    ItineraryItemCreate,
    ItineraryItemUpdate,
    ItineraryPositionUpdate,
    ItineraryItemResponse,
)
from roamlist.schemas.photo import (
    PhotoCreate,
    PhotoVisibilityUpdate,
    PhotoCaptionUpdate,
    PhotoResponse,
    ContributorResponse,
    VisibilityStatsResponse,
    CommunitySummaryResponse,
)
from roamlist.schemas.social import FollowStatusResponse
from roamlist.schemas.sharing import (
    ShareSettingsUpdate,
    ShareLinkResponse,
    SharedTripInfo,
    SharedTripOwner,
    SharedTripResponse,
)
from roamlist.schemas.feed import (
    ActivityActorResponse,
    ActivityResponse,
    FeedPageResponse,
)

__all__ = [
    # Common
    "ErrorResponse",
    "HealthResponse",
    "ReorderRequest",
    "ReorderResponse",
    # Bucket list
    "WeatherSnapshot",
    "BucketListAdd",
    "BucketListRankUpdate",
    "BucketListStatusUpdate",
    "BucketListNotesUpdate",
    "BucketListItemResponse",
    "BucketListStatsResponse",
    # Itinerary
    "ItineraryItemCreate",
    "ItineraryItemUpdate",
    "ItineraryPositionUpdate",
    "ItineraryItemResponse",
    # Photos
    "PhotoCreate",
    "PhotoVisibilityUpdate",
    "PhotoCaptionUpdate",
    "PhotoResponse",
    "ContributorResponse",
    "VisibilityStatsResponse",
    "CommunitySummaryResponse",
    # Social
    "FollowStatusResponse",
    # Share links
    "ShareSettingsUpdate",
    "ShareLinkResponse",
    "SharedTripInfo",
    "SharedTripOwner",
    "SharedTripResponse",
    # Feed
    "ActivityActorResponse",
    "ActivityResponse",
    "FeedPageResponse",
]
