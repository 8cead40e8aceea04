"""
Common schema types used across the API.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    code: Optional[str] = None
    field: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    database: str = "connected"


class ReorderRequest(BaseModel):
    """Ids in their new order; the first gets rank 1."""

    item_ids: List[uuid.UUID] = Field(..., max_length=1000)


class ReorderResponse(BaseModel):
    """How many of the supplied ids were renumbered."""

    applied: int
    skipped: int
