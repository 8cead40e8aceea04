"""
Social Engine - the follow graph and the activity feed built on it.
"""

from roamlist.engines.social.feed_service import Activity, ActivityType, FeedPage, FeedService
from roamlist.engines.social.follow_service import FollowCounts, FollowService

__all__ = [
    "Activity",
    "ActivityType",
    "FeedPage",
    "FeedService",
    "FollowCounts",
    "FollowService",
]
