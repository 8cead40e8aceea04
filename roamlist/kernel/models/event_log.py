"""
Append-only event log.

Every mutation is recorded here before commit. The same rows double as the
activity records FeedService builds feeds from (place added, place visited).
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Index, JSON, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from roamlist.kernel.models.base import Base, generate_uuid, utcnow


class EventType(str, Enum):
    """All event types for the audit log."""

    # Principals
    PRINCIPAL_CREATED = "principal.created"

    # Ranked collections
    ITEM_ADDED = "collection.item_added"
    ITEM_RANK_CHANGED = "collection.item_rank_changed"
    ITEM_MOVED = "collection.item_moved"
    ITEM_UPDATED = "collection.item_updated"
    ITEM_REMOVED = "collection.item_removed"
    COLLECTION_REORDERED = "collection.reordered"

    # Bucket list lifecycle
    PLACE_VISITED = "bucket_list.place_visited"
    PLACE_SKIPPED = "bucket_list.place_skipped"

    # Sharing
    PHOTO_CREATED = "photo.created"
    PHOTO_UPDATED = "photo.updated"
    PHOTO_VISIBILITY_CHANGED = "photo.visibility_changed"
    PHOTO_REMOVED = "photo.removed"
    SHARE_LINK_CREATED = "sharing.link_created"
    SHARE_LINK_UPDATED = "sharing.link_updated"
    SHARE_LINK_DELETED = "sharing.link_deleted"

    # Social graph
    USER_FOLLOWED = "social.followed"
    USER_UNFOLLOWED = "social.unfollowed"


class EventLog(Base):
    """
    Immutable event record.

    Append-only: rows are never updated or deleted.
    """

    __tablename__ = "event_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    event_type: Mapped[EventType] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )
    entity_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    entity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
        index=True,
    )
    # Actor; system events may not have one
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
        index=True,
    )
    payload: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )
    ip_address: Mapped[Optional[str]] = mapped_column(
        String(45),  # IPv6 max length
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
    )

    __table_args__ = (
        Index("ix_event_logs_entity", "entity_type", "entity_id"),
        Index("ix_event_logs_user_time", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<EventLog {self.event_type} {self.entity_type}:{self.entity_id}>"
