"""
Shared shape of every ranked collection row.

A collection scope is ``owner_id`` plus, per model, an optional container
column (the trip of an itinerary) and an optional group column (the day).
Rows are ordered by ``rank`` inside their scope. Ranks are plain numbers:
gaps and duplicates are legal, readers always sort.
"""

import uuid
from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy import DateTime, Float, ForeignKey, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from roamlist.kernel.models.base import generate_uuid, utcnow


class RankedItemMixin:
    """Columns and scope metadata consumed by OrderedCollectionManager."""

    # Names of the attributes that narrow the scope; None when not used
    container_attr: ClassVar[Optional[str]] = None
    group_attr: ClassVar[Optional[str]] = None
    # Attribute that must be unique per owner, checked at insert
    uniqueness_attr: ClassVar[Optional[str]] = None
    # entity_type used in the event log
    entity_name: ClassVar[str] = "ranked_item"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Reference to the place record held by the places collaborator
    place_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
        index=True,
    )
    rank: Mapped[float] = mapped_column(
        Float,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )

    @property
    def group_key(self) -> Optional[int]:
        return getattr(self, self.group_attr) if self.group_attr else None

    @property
    def container_id(self) -> Optional[uuid.UUID]:
        return getattr(self, self.container_attr) if self.container_attr else None
