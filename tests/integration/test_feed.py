"""Integration tests for the activity feed."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from roamlist.config import get_settings
from roamlist.engines.bucket_list import BucketListService
from roamlist.engines.itinerary import ItineraryService
from roamlist.engines.social import ActivityType, FeedService, FollowService
from roamlist.kernel.errors import ValidationError
from roamlist.kernel.models import BucketListStatus, EventLog, EventType, Trip, UserRole


async def log_activity(session, user, kind, place_id=None, at=None):
    """Write one activity row straight to the event log at a chosen time."""
    place_id = place_id or uuid.uuid4()
    at = at or datetime.now(timezone.utc)
    if kind == ActivityType.PLACE_VISITED:
        event = EventLog(
            event_type=EventType.PLACE_VISITED.value,
            entity_type="place",
            entity_id=place_id,
            user_id=user.id,
            payload={"item_id": str(uuid.uuid4()), "rating": 4, "visited_date": "2024-05-01"},
            created_at=at,
        )
    else:
        event = EventLog(
            event_type=EventType.ITEM_ADDED.value,
            entity_type="bucket_list_item",
            entity_id=uuid.uuid4(),
            user_id=user.id,
            payload={"place_id": str(place_id), "rank": 1.0},
            created_at=at,
        )
    session.add(event)
    await session.flush()
    return event


def hours_ago(hours):
    return datetime.now(timezone.utc) - timedelta(hours=hours)


@pytest.mark.asyncio
class TestFeed:

    async def test_anonymous_feed_is_empty(self, db_session, owner):
        await log_activity(db_session, owner, ActivityType.PLACE_ADDED)

        page = await FeedService(db_session).get_feed(None)

        assert page.activities == []
        assert page.next_cursor is None

    async def test_following_nobody(self, db_session, owner, other_user):
        await log_activity(db_session, other_user, ActivityType.PLACE_ADDED)

        page = await FeedService(db_session).get_feed(owner)

        assert page.activities == []

    async def test_only_followed_users(self, db_session, owner, other_user, third_user):
        await FollowService(db_session).follow(owner, other_user.id)
        followed = await log_activity(db_session, other_user, ActivityType.PLACE_VISITED)
        await log_activity(db_session, third_user, ActivityType.PLACE_VISITED)
        await log_activity(db_session, owner, ActivityType.PLACE_VISITED)

        page = await FeedService(db_session).get_feed(owner)

        assert [a.id for a in page.activities] == [followed.id]
        assert page.activities[0].user.user_id == other_user.id

    async def test_newest_first(self, db_session, owner, other_user, third_user):
        follows = FollowService(db_session)
        await follows.follow(owner, other_user.id)
        await follows.follow(owner, third_user.id)
        old = await log_activity(db_session, other_user, ActivityType.PLACE_ADDED, at=hours_ago(5))
        new = await log_activity(db_session, third_user, ActivityType.PLACE_VISITED, at=hours_ago(1))
        mid = await log_activity(db_session, other_user, ActivityType.PLACE_VISITED, at=hours_ago(3))

        page = await FeedService(db_session).get_feed(owner)

        assert [a.id for a in page.activities] == [new.id, mid.id, old.id]

    async def test_activity_details(self, db_session, owner, other_user):
        await FollowService(db_session).follow(owner, other_user.id)
        place_id = uuid.uuid4()
        await log_activity(db_session, other_user, ActivityType.PLACE_ADDED, place_id, at=hours_ago(2))
        await log_activity(db_session, other_user, ActivityType.PLACE_VISITED, place_id, at=hours_ago(1))

        visited, added = (await FeedService(db_session).get_feed(owner)).activities

        assert visited.type == ActivityType.PLACE_VISITED
        assert visited.place_id == place_id
        assert visited.details == {"rating": 4, "visited_date": "2024-05-01"}
        assert visited.created_at.tzinfo is not None
        assert added.type == ActivityType.PLACE_ADDED
        assert added.place_id == place_id
        assert added.details == {}

    async def test_built_from_bucket_list_changes(self, db_session, owner, other_user):
        await FollowService(db_session).follow(owner, other_user.id)
        bucket_list = BucketListService(db_session)
        kept = await bucket_list.add(other_user, uuid.uuid4())
        dropped = await bucket_list.add(other_user, uuid.uuid4())
        await bucket_list.update_status(other_user, kept.id, BucketListStatus.VISITED, rating=5)
        await bucket_list.update_status(other_user, dropped.id, BucketListStatus.SKIPPED)
        # Trip stops and skips are not feed activities
        trip = Trip(id=uuid.uuid4(), owner_id=other_user.id, title="Side trip")
        db_session.add(trip)
        await db_session.flush()
        await ItineraryService(db_session).add(other_user, trip.id, uuid.uuid4(), day_number=1)
        await db_session.flush()

        page = await FeedService(db_session).get_feed(owner)

        kinds = sorted((a.type.value, a.place_id) for a in page.activities)
        assert kinds == sorted([
            (ActivityType.PLACE_ADDED.value, kept.place_id),
            (ActivityType.PLACE_ADDED.value, dropped.place_id),
            (ActivityType.PLACE_VISITED.value, kept.place_id),
        ])

    async def test_free_feed_history_window(self, db_session, owner, other_user, monkeypatch):
        monkeypatch.setattr(get_settings(), "free_feed_history_days", 7)
        await FollowService(db_session).follow(owner, other_user.id)
        recent = await log_activity(db_session, other_user, ActivityType.PLACE_ADDED, at=hours_ago(24 * 2))
        await log_activity(db_session, other_user, ActivityType.PLACE_ADDED, at=hours_ago(24 * 10))

        page = await FeedService(db_session).get_feed(owner)

        assert [a.id for a in page.activities] == [recent.id]

    async def test_pro_sees_full_history(self, db_session, make_user, other_user, monkeypatch):
        monkeypatch.setattr(get_settings(), "free_feed_history_days", 7)
        pro = await make_user("historian", role=UserRole.PRO)
        await FollowService(db_session).follow(pro, other_user.id)
        recent = await log_activity(db_session, other_user, ActivityType.PLACE_ADDED, at=hours_ago(24 * 2))
        old = await log_activity(db_session, other_user, ActivityType.PLACE_ADDED, at=hours_ago(24 * 400))

        page = await FeedService(db_session).get_feed(pro)

        assert [a.id for a in page.activities] == [recent.id, old.id]

    async def test_cursor_pagination(self, db_session, owner, other_user):
        await FollowService(db_session).follow(owner, other_user.id)
        events = [
            await log_activity(db_session, other_user, ActivityType.PLACE_ADDED, at=hours_ago(h))
            for h in (1, 2, 3, 4, 5)
        ]
        service = FeedService(db_session)

        first = await service.get_feed(owner, limit=2)
        second = await service.get_feed(owner, limit=2, cursor=first.next_cursor)
        third = await service.get_feed(owner, limit=2, cursor=second.next_cursor)

        assert [a.id for a in first.activities] == [events[0].id, events[1].id]
        assert [a.id for a in second.activities] == [events[2].id, events[3].id]
        assert [a.id for a in third.activities] == [events[4].id]
        assert third.next_cursor is None

    async def test_default_page_size(self, db_session, owner, other_user, monkeypatch):
        monkeypatch.setattr(get_settings(), "feed_page_size", 3)
        await FollowService(db_session).follow(owner, other_user.id)
        for h in range(5):
            await log_activity(db_session, other_user, ActivityType.PLACE_ADDED, at=hours_ago(h + 1))

        page = await FeedService(db_session).get_feed(owner)

        assert len(page.activities) == 3
        assert page.next_cursor is not None

    async def test_bad_limit(self, db_session, owner):
        with pytest.raises(ValidationError):
            await FeedService(db_session).get_feed(owner, limit=0)

    async def test_pro_badge(self, db_session, owner, make_user):
        pro = await make_user("influencer", role=UserRole.PRO)
        await FollowService(db_session).follow(owner, pro.id)
        await log_activity(db_session, pro, ActivityType.PLACE_VISITED)

        (activity,) = (await FeedService(db_session).get_feed(owner)).activities

        assert activity.user.pro_badge is True
        assert activity.user.role == UserRole.PRO
        assert activity.user.display_name == "Influencer"


@pytest.mark.asyncio
class TestUserActivities:

    async def test_newest_first(self, db_session, owner):
        old = await log_activity(db_session, owner, ActivityType.PLACE_ADDED, at=hours_ago(30))
        new = await log_activity(db_session, owner, ActivityType.PLACE_VISITED, at=hours_ago(1))

        activities = await FeedService(db_session).get_user_activities(owner.id)

        assert [a.id for a in activities] == [new.id, old.id]
        assert activities[0].user.pro_badge is False

    async def test_limit(self, db_session, owner):
        for h in range(4):
            await log_activity(db_session, owner, ActivityType.PLACE_ADDED, at=hours_ago(h + 1))

        activities = await FeedService(db_session).get_user_activities(owner.id, limit=2)

        assert len(activities) == 2

    async def test_only_that_user(self, db_session, owner, other_user):
        await log_activity(db_session, other_user, ActivityType.PLACE_ADDED)

        assert await FeedService(db_session).get_user_activities(owner.id) == []

    async def test_unknown_user(self, db_session):
        assert await FeedService(db_session).get_user_activities(uuid.uuid4()) == []
