"""
Event Store service for append-only audit logging.

All state mutations are logged here before commit, in the same session as
the mutation, so the record and the change land (or roll back) together.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import select, and_, desc, func
from sqlalchemy.ext.asyncio import AsyncSession

from roamlist.kernel.models.event_log import EventLog, EventType
from roamlist.logging_config import get_logger

logger = get_logger(__name__)


def _to_json_value(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_json_value(v) for v in value]
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


class EventStore:
    """
    Service for managing the immutable event log.

    Usage:
        event_store = EventStore(session)
        await event_store.log(
            event_type=EventType.ITEM_ADDED,
            entity_type="bucket_list_item",
            entity_id=item.id,
            user_id=principal.id,
            payload={"place_id": item.place_id, "rank": item.rank},
        )
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log(
        self,
        event_type: EventType,
        entity_type: str,
        entity_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
        payload: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> EventLog:
        """
        Append an event. The caller's transaction commits it.

        Args:
            event_type: The type of event
            entity_type: The type of entity (bucket_list_item, photo, ...)
            entity_id: The ID of the entity
            user_id: The acting principal (None for system events)
            payload: Additional event data; UUIDs, datetimes and enums are
                converted to JSON-friendly values
            ip_address: Client IP address

        Returns:
            The pending EventLog record
        """
        event = EventLog(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            payload=_to_json_value(payload) if payload else {},
            ip_address=ip_address,
        )
        self.session.add(event)
        logger.debug(
            "Event recorded",
            extra={"event_type": event_type.value, "entity_type": entity_type, "entity_id": str(entity_id)},
        )
        return event

    async def get_entity_history(
        self,
        entity_type: str,
        entity_id: uuid.UUID,
        event_types: Optional[List[EventType]] = None,
        limit: int = 100,
    ) -> List[EventLog]:
        """Events for one entity, newest first."""
        query = select(EventLog).where(
            and_(
                EventLog.entity_type == entity_type,
                EventLog.entity_id == entity_id,
            )
        )
        if event_types:
            query = query.where(EventLog.event_type.in_([t.value for t in event_types]))

        query = query.order_by(desc(EventLog.created_at)).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_user_activity(
        self,
        user_id: uuid.UUID,
        since: Optional[datetime] = None,
        event_types: Optional[List[EventType]] = None,
        limit: int = 100,
    ) -> List[EventLog]:
        """Events triggered by one principal, newest first."""
        query = select(EventLog).where(EventLog.user_id == user_id)

        if since:
            query = query.where(EventLog.created_at >= since)
        if event_types:
            query = query.where(EventLog.event_type.in_([t.value for t in event_types]))

        query = query.order_by(desc(EventLog.created_at)).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_events(
        self,
        event_type: Optional[EventType] = None,
        user_id: Optional[uuid.UUID] = None,
        entity_id: Optional[uuid.UUID] = None,
    ) -> int:
        """Count events matching the given criteria."""
        query = select(func.count(EventLog.id))
        if event_type:
            query = query.where(EventLog.event_type == event_type.value)
        if user_id:
            query = query.where(EventLog.user_id == user_id)
        if entity_id:
            query = query.where(EventLog.entity_id == entity_id)

        result = await self.session.execute(query)
        return result.scalar_one()
