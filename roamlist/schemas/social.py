"""
Social graph schemas.
"""

import uuid

from pydantic import BaseModel


class FollowStatusResponse(BaseModel):
    """Follow relation between the caller and a user, with that user's counts."""

    user_id: uuid.UUID
    is_following: bool
    followers: int
    following: int
