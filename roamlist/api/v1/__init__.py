"""
API v1 routes.
"""

from fastapi import APIRouter

from roamlist.api.v1 import bucket_list, feed, itinerary, photos, sharing, social
from roamlist.schemas.common import ErrorResponse

router = APIRouter(
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)

router.include_router(bucket_list.router, prefix="/bucket-list", tags=["Bucket List"])
router.include_router(itinerary.router, tags=["Itinerary"])
router.include_router(photos.router, tags=["Photos"])
router.include_router(social.router, tags=["Social"])
router.include_router(sharing.router, tags=["Sharing"])
router.include_router(feed.router, tags=["Feed"])
