"""
Bucket List Engine - ranked places with a visit lifecycle.
"""

from roamlist.engines.bucket_list.bucket_list_service import (
    BucketListService,
    BucketListStats,
)

__all__ = [
    "BucketListService",
    "BucketListStats",
]
