"""
Sharing Engine - photos at visibility tiers and trip share links.
"""

from roamlist.engines.sharing.photo_service import CommunitySummary, PhotoService
from roamlist.engines.sharing.share_link_service import ShareLinkService, SharedTripView

__all__ = [
    "CommunitySummary",
    "PhotoService",
    "ShareLinkService",
    "SharedTripView",
]
