"""
OrderedCollectionManager: per-owner ranked sequences.

One manager instance serves one ranked model (bucket list items, itinerary
items). The model's scope metadata (see RankedItemMixin) says which columns
narrow a scope beyond the owner.

Ranks are plain floats. Appends take ``max + 1`` in the scope, direct
rank edits never renumber siblings, and ``reorder`` rewrites the supplied
ids to ``1..N``. Readers always sort, so gaps and ties are harmless.
"""

import math
import uuid
from typing import Any, Generic, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ConfigDict
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from roamlist.kernel.errors import DuplicateConstraintViolation, ValidationError
from roamlist.kernel.events.event_store import EventStore
from roamlist.kernel.identity.guard import AuthorizationGuard
from roamlist.kernel.models.event_log import EventType
from roamlist.kernel.models.ranked_item import RankedItemMixin
from roamlist.kernel.models.user import User
from roamlist.logging_config import get_logger

logger = get_logger(__name__)

ItemT = TypeVar("ItemT", bound=RankedItemMixin)


class CollectionScope(BaseModel):
    """
    The set of items whose ranks are compared with each other.

    ``container_id`` is the trip for itineraries; ``group_key`` is the day.
    Both stay None for the bucket list.
    """

    model_config = ConfigDict(frozen=True)

    owner_id: uuid.UUID
    container_id: Optional[uuid.UUID] = None
    group_key: Optional[int] = None


def validate_rank(rank: float) -> float:
    """Ranks must be finite and non-negative."""
    if rank is None or not math.isfinite(rank) or rank < 0:
        raise ValidationError("Rank must be a non-negative number", field="rank")
    return float(rank)


def validate_group_key(group_key: Optional[int]) -> Optional[int]:
    """Group keys (day numbers) start at 1."""
    if group_key is not None and group_key < 1:
        raise ValidationError("Day number must be 1 or greater", field="day_number")
    return group_key


class OrderedCollectionManager(Generic[ItemT]):
    """
    Ranked collection operations for one model.

    Mutations take the acting principal and check ownership through the
    guard. Nothing is committed here: the caller's session commits the
    whole operation, including its event log rows, or rolls it all back.

    Usage:
        manager = OrderedCollectionManager(session, BucketListItem)
        item = await manager.add_item(
            principal,
            CollectionScope(owner_id=principal.id),
            place_id=place_id,
            uniqueness_key=place_id,
        )
    """

    def __init__(
        self,
        session: AsyncSession,
        model: Type[ItemT],
        guard: Optional[AuthorizationGuard] = None,
    ):
        self.session = session
        self.model = model
        self.guard = guard or AuthorizationGuard(session)
        self.event_store = EventStore(session)

    @property
    def label(self) -> str:
        """Human-readable item name for error messages."""
        return self.model.entity_name.replace("_", " ").capitalize()

    # =========================================================================
    # SCOPES
    # =========================================================================

    def _check_scope(self, scope: CollectionScope, require_group: bool) -> None:
        model = self.model
        if model.container_attr and scope.container_id is None:
            raise ValidationError(f"{self.label} scope needs a {model.container_attr}")
        if not model.container_attr and scope.container_id is not None:
            raise ValidationError(f"{self.label} collections have no container")
        if model.group_attr:
            if require_group and scope.group_key is None:
                raise ValidationError(f"{self.label} scope needs a {model.group_attr}", field=model.group_attr)
            validate_group_key(scope.group_key)
        elif scope.group_key is not None:
            raise ValidationError(f"{self.label} collections have no groups")

    def _scope_criteria(self, scope: CollectionScope, include_group: bool = True) -> list:
        model = self.model
        criteria = [model.owner_id == scope.owner_id]
        if model.container_attr and scope.container_id is not None:
            criteria.append(getattr(model, model.container_attr) == scope.container_id)
        if model.group_attr and include_group and scope.group_key is not None:
            criteria.append(getattr(model, model.group_attr) == scope.group_key)
        return criteria

    def _order_by(self, across_groups: bool) -> list:
        model = self.model
        order = []
        if across_groups and model.group_attr:
            order.append(getattr(model, model.group_attr))
        order.extend([model.rank, model.created_at, model.id])
        return order

    # =========================================================================
    # READS
    # =========================================================================

    async def next_rank(self, scope: CollectionScope) -> float:
        """``max(rank in scope, default 0) + 1``."""
        result = await self.session.execute(
            select(func.max(self.model.rank)).where(*self._scope_criteria(scope))
        )
        current = result.scalar_one_or_none()
        return (current or 0) + 1

    async def get_item(self, item_id: uuid.UUID) -> Optional[ItemT]:
        """Get an item by ID, regardless of owner."""
        return await self.session.get(self.model, item_id)

    async def get_owned_item(self, principal: User, item_id: uuid.UUID) -> ItemT:
        """Get an item the principal owns; NotFound/AuthorizationDenied otherwise."""
        item = await self.get_item(item_id)
        return self.guard.require_ownership(principal, item, self.label)

    async def list_by_scope(
        self,
        principal: Optional[User],
        scope: CollectionScope,
        *criteria: Any,
    ) -> list[ItemT]:
        """
        Items of a scope in display order.

        With a group key, items sort by rank. Without one, grouped models
        sort by group key then rank. Ties fall back to creation time, then
        id, so the order is stable.

        Returns an empty list for anonymous callers and for scopes owned by
        someone else.
        """
        if not self.guard.owns(principal, scope.owner_id):
            return []

        query = (
            select(self.model)
            .where(*self._scope_criteria(scope), *criteria)
            .order_by(*self._order_by(across_groups=scope.group_key is None))
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def add_item(
        self,
        principal: User,
        scope: CollectionScope,
        place_id: uuid.UUID,
        explicit_rank: Optional[float] = None,
        uniqueness_key: Optional[Any] = None,
        ip_address: Optional[str] = None,
        **fields: Any,
    ) -> ItemT:
        """
        Append an item to a scope.

        Without ``explicit_rank`` the item goes after the current last one.
        Two concurrent appends to the same scope can compute the same rank;
        readers tolerate the tie.

        Raises:
            AuthorizationDenied: scope belongs to another owner
            DuplicateConstraintViolation: ``uniqueness_key`` already used by the owner
            ValidationError: bad rank or scope
        """
        model = self.model
        self.guard.require_owner_id(principal, scope.owner_id)
        self._check_scope(scope, require_group=True)

        if uniqueness_key is not None:
            if not model.uniqueness_attr:
                raise ValueError(f"{model.__name__} has no uniqueness attribute")
            if await self._uniqueness_taken(scope.owner_id, uniqueness_key):
                raise DuplicateConstraintViolation(
                    f"{self.label} already exists",
                    field=model.uniqueness_attr,
                )

        rank = validate_rank(explicit_rank) if explicit_rank is not None else await self.next_rank(scope)

        values = dict(fields)
        if model.container_attr:
            values[model.container_attr] = scope.container_id
        if model.group_attr:
            values[model.group_attr] = scope.group_key

        item = model(owner_id=scope.owner_id, place_id=place_id, rank=rank, **values)
        self.session.add(item)
        await self._flush_unique()

        await self.event_store.log(
            event_type=EventType.ITEM_ADDED,
            entity_type=model.entity_name,
            entity_id=item.id,
            user_id=principal.id,
            payload={
                "place_id": place_id,
                "rank": rank,
                "container_id": scope.container_id,
                "group_key": scope.group_key,
            },
            ip_address=ip_address,
        )
        logger.info(
            "Item added",
            extra={"entity": model.entity_name, "item_id": str(item.id), "rank": rank},
        )
        return item

    async def set_rank(
        self,
        principal: User,
        item_id: uuid.UUID,
        new_rank: float,
        ip_address: Optional[str] = None,
    ) -> ItemT:
        """Overwrite one item's rank. Siblings are not renumbered."""
        new_rank = validate_rank(new_rank)
        item = await self.get_owned_item(principal, item_id)

        old_rank = item.rank
        item.rank = new_rank
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.ITEM_RANK_CHANGED,
            entity_type=self.model.entity_name,
            entity_id=item.id,
            user_id=principal.id,
            payload={"old_rank": old_rank, "new_rank": new_rank},
            ip_address=ip_address,
        )
        return item

    async def set_group_and_rank(
        self,
        principal: User,
        item_id: uuid.UUID,
        new_group_key: int,
        new_rank: float,
        ip_address: Optional[str] = None,
    ) -> ItemT:
        """Move one item to another group (day) at the given rank."""
        group_attr = self.model.group_attr
        if not group_attr:
            raise ValidationError(f"{self.label} collections have no groups")
        if new_group_key is None:
            raise ValidationError(f"{group_attr} is required", field=group_attr)
        validate_group_key(new_group_key)
        new_rank = validate_rank(new_rank)
        item = await self.get_owned_item(principal, item_id)

        old_group = getattr(item, group_attr)
        old_rank = item.rank
        setattr(item, group_attr, new_group_key)
        item.rank = new_rank
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.ITEM_MOVED,
            entity_type=self.model.entity_name,
            entity_id=item.id,
            user_id=principal.id,
            payload={
                "old_group_key": old_group,
                "new_group_key": new_group_key,
                "old_rank": old_rank,
                "new_rank": new_rank,
            },
            ip_address=ip_address,
        )
        return item

    async def reorder(
        self,
        principal: User,
        scope: CollectionScope,
        ordered_item_ids: Sequence[uuid.UUID],
        ip_address: Optional[str] = None,
    ) -> int:
        """
        Rewrite ranks to ``1..N`` in the supplied order.

        The id at position ``i`` gets rank ``i + 1``; for grouped models it
        is also moved into ``scope.group_key``. Items the list leaves out
        keep their rank, so a partial list reorders a visible subset.
        Ids that do not exist or belong to another owner or container are
        skipped. Every change is flushed together, so the request
        transaction applies all of it or none.

        Returns:
            Number of items renumbered

        Raises:
            AuthorizationDenied: scope belongs to another owner
            ValidationError: duplicate ids or bad scope
        """
        model = self.model
        self.guard.require_owner_id(principal, scope.owner_id)
        self._check_scope(scope, require_group=True)

        ids = list(ordered_item_ids)
        if len(set(ids)) != len(ids):
            raise ValidationError("Reorder list contains duplicate ids", field="item_ids")
        if not ids:
            return 0

        result = await self.session.execute(
            select(model).where(
                model.id.in_(ids),
                *self._scope_criteria(scope, include_group=False),
            )
        )
        by_id = {item.id: item for item in result.scalars().all()}

        applied = []
        for position, item_id in enumerate(ids):
            item = by_id.get(item_id)
            if item is None:
                continue
            item.rank = float(position + 1)
            if model.group_attr:
                setattr(item, model.group_attr, scope.group_key)
            applied.append(item_id)

        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.COLLECTION_REORDERED,
            entity_type=model.entity_name,
            entity_id=scope.container_id or scope.owner_id,
            user_id=principal.id,
            payload={
                "group_key": scope.group_key,
                "item_ids": applied,
                "skipped": len(ids) - len(applied),
            },
            ip_address=ip_address,
        )
        logger.info(
            "Collection reordered",
            extra={
                "entity": model.entity_name,
                "applied": len(applied),
                "skipped": len(ids) - len(applied),
            },
        )
        return len(applied)

    async def remove_item(
        self,
        principal: User,
        item_id: uuid.UUID,
        ip_address: Optional[str] = None,
    ) -> None:
        """Delete an item. Remaining ranks are not compacted."""
        item = await self.get_owned_item(principal, item_id)

        await self.session.delete(item)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.ITEM_REMOVED,
            entity_type=self.model.entity_name,
            entity_id=item_id,
            user_id=principal.id,
            payload={"place_id": item.place_id, "rank": item.rank},
            ip_address=ip_address,
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _uniqueness_taken(self, owner_id: uuid.UUID, key: Any) -> bool:
        column = getattr(self.model, self.model.uniqueness_attr)
        result = await self.session.execute(
            select(self.model.id).where(self.model.owner_id == owner_id, column == key).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def _flush_unique(self) -> None:
        # A concurrent insert can still pass the pre-check; the unique
        # index is the final word.
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateConstraintViolation(
                f"{self.label} already exists",
                field=self.model.uniqueness_attr,
            ) from exc
