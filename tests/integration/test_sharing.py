"""Integration tests for photo visibility and the follow graph."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from roamlist.config import get_settings
from roamlist.engines.sharing import PhotoService
from roamlist.engines.social import FollowService
from roamlist.kernel.errors import DuplicateConstraintViolation, NotFound, ValidationError
from roamlist.kernel.models import UserRole, VisibilityTier
from roamlist.kernel.visibility import VisibilityPolicyEngine

BASE_TIME = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


async def add_photo(service, owner, place_id, tier, **kwargs):
    return await service.create(
        owner,
        place_id=place_id,
        storage_ref=f"photos/{uuid.uuid4().hex}.jpg",
        visibility=tier,
        **kwargs,
    )


@pytest.mark.asyncio
class TestPhotoVisibility:

    async def test_default_tier_is_private(self, db_session, owner):
        photo = await PhotoService(db_session).create(owner, place_id=uuid.uuid4(), storage_ref="photos/a.jpg")

        assert photo.visibility == VisibilityTier.PRIVATE

    async def test_followers_tier_follows_the_edge(self, db_session, owner, other_user):
        """V cannot see U's followers-only photo until V follows U."""
        photos = PhotoService(db_session)
        follows = FollowService(db_session)
        place_id = uuid.uuid4()
        photo = await add_photo(photos, owner, place_id, VisibilityTier.FOLLOWERS)

        assert photo not in await photos.list_for_place(other_user, place_id)

        await follows.follow(other_user, owner.id)

        assert photo in await photos.list_for_place(other_user, place_id)

    async def test_following_someone_else_does_not_help(self, db_session, owner, other_user, third_user):
        photos = PhotoService(db_session)
        place_id = uuid.uuid4()
        photo = await add_photo(photos, owner, place_id, VisibilityTier.FOLLOWERS)
        await FollowService(db_session).follow(other_user, third_user.id)

        assert photo not in await photos.list_for_place(other_user, place_id)

    async def test_private_only_for_owner(self, db_session, owner, other_user):
        photos = PhotoService(db_session)
        place_id = uuid.uuid4()
        photo = await add_photo(photos, owner, place_id, VisibilityTier.PRIVATE)
        await FollowService(db_session).follow(other_user, owner.id)

        assert await photos.list_for_place(owner, place_id) == [photo]
        assert await photos.list_for_place(other_user, place_id) == []
        assert await photos.list_for_place(None, place_id) == []

    async def test_public_for_anyone(self, db_session, owner, other_user):
        photos = PhotoService(db_session)
        place_id = uuid.uuid4()
        photo = await add_photo(photos, owner, place_id, VisibilityTier.PUBLIC)

        assert await photos.list_for_place(None, place_id) == [photo]
        assert await photos.list_for_place(other_user, place_id) == [photo]

    async def test_tier_change_by_owner(self, db_session, owner, other_user):
        photos = PhotoService(db_session)
        place_id = uuid.uuid4()
        photo = await add_photo(photos, owner, place_id, VisibilityTier.PRIVATE)

        await photos.set_visibility_tier(owner, photo.id, VisibilityTier.PUBLIC)

        assert await photos.list_for_place(None, place_id) == [photo]

    async def test_tier_change_by_other_user_fails(self, db_session, owner, other_user):
        photos = PhotoService(db_session)
        photo = await add_photo(photos, owner, uuid.uuid4(), VisibilityTier.PRIVATE)

        with pytest.raises(NotFound):
            await photos.set_visibility_tier(other_user, photo.id, VisibilityTier.PUBLIC)
        assert photo.visibility == VisibilityTier.PRIVATE

    async def test_caption_and_remove(self, db_session, owner, other_user):
        photos = PhotoService(db_session)
        place_id = uuid.uuid4()
        photo = await add_photo(photos, owner, place_id, VisibilityTier.PUBLIC)

        updated = await photos.update_caption(owner, photo.id, "Golden hour")
        assert updated.caption == "Golden hour"

        with pytest.raises(NotFound):
            await photos.remove(other_user, photo.id)
        await photos.remove(owner, photo.id)
        assert await photos.list_for_place(owner, place_id) == []

    async def test_trip_photos_filtered(self, db_session, owner, other_user, trip):
        photos = PhotoService(db_session)
        public = await add_photo(photos, owner, uuid.uuid4(), VisibilityTier.PUBLIC, trip_id=trip.id)
        await add_photo(photos, owner, uuid.uuid4(), VisibilityTier.PRIVATE, trip_id=trip.id)

        assert await photos.list_for_trip(other_user, trip.id) == [public]
        assert len(await photos.list_for_trip(owner, trip.id)) == 2

    async def test_photo_on_foreign_trip_rejected(self, db_session, other_user, trip):
        with pytest.raises(NotFound):
            await add_photo(PhotoService(db_session), other_user, uuid.uuid4(), VisibilityTier.PUBLIC, trip_id=trip.id)

    async def test_storage_ref_required(self, db_session, owner):
        with pytest.raises(ValidationError):
            await PhotoService(db_session).create(owner, place_id=uuid.uuid4(), storage_ref="   ")

    async def test_follow_set_supplied_by_caller(self, db_session, owner, other_user):
        photos = PhotoService(db_session)
        photo = await add_photo(photos, owner, uuid.uuid4(), VisibilityTier.FOLLOWERS)
        engine = VisibilityPolicyEngine(db_session)

        visible = await engine.visible_set(other_user.id, [photo], following={owner.id})

        assert visible == [photo]


@pytest.mark.asyncio
class TestCommunitySummary:

    async def test_contributors_are_first_distinct_public_owners(self, db_session, make_user):
        photos = PhotoService(db_session)
        place_id = uuid.uuid4()
        users = [await make_user(f"user{i}") for i in range(5)]
        # Oldest first: users[3], users[1], users[4], users[0]; users[2] only private
        order = [3, 1, 1, 4, 0]
        created = [await add_photo(photos, users[index], place_id, VisibilityTier.PUBLIC) for index in order]
        for minutes, photo in enumerate(created):
            photo.created_at = BASE_TIME + timedelta(minutes=minutes)
        await add_photo(photos, users[2], place_id, VisibilityTier.PRIVATE)
        await db_session.flush()

        summary = await photos.community_summary(None, place_id, limit=3)

        assert [c.owner_id for c in summary.contributors] == [users[3].id, users[1].id, users[4].id]
        assert summary.contributors[0].display_name == users[3].display_name
        assert summary.preview_storage_ref == created[0].storage_ref

    async def test_stats_cover_what_the_viewer_sees(self, db_session, owner, other_user):
        photos = PhotoService(db_session)
        place_id = uuid.uuid4()
        await add_photo(photos, owner, place_id, VisibilityTier.PUBLIC)
        await add_photo(photos, owner, place_id, VisibilityTier.PRIVATE)

        as_owner = await photos.community_summary(owner, place_id)
        as_stranger = await photos.community_summary(other_user, place_id)

        assert (as_owner.stats.total, as_owner.stats.public_count) == (2, 1)
        assert (as_stranger.stats.total, as_stranger.stats.public_count) == (1, 1)
        assert as_stranger.stats.has_public_content

    async def test_default_limit_from_settings(self, db_session, make_user):
        photos = PhotoService(db_session)
        place_id = uuid.uuid4()
        for i in range(5):
            await add_photo(photos, await make_user(f"fan{i}"), place_id, VisibilityTier.PUBLIC)

        summary = await photos.community_summary(None, place_id)

        assert len(summary.contributors) == get_settings().contributor_preview_limit

    async def test_empty_place(self, db_session):
        summary = await PhotoService(db_session).community_summary(None, uuid.uuid4())

        assert summary.contributors == []
        assert summary.stats.total == 0
        assert summary.preview_storage_ref is None


@pytest.mark.asyncio
class TestFollowGraph:

    async def test_follow_and_unfollow(self, db_session, owner, other_user):
        service = FollowService(db_session)

        await service.follow(owner, other_user.id)
        assert await service.is_following(owner, other_user.id)
        assert await service.following_ids(owner.id) == {other_user.id}
        counts = await service.counts(other_user.id)
        assert (counts.followers, counts.following) == (1, 0)

        await service.unfollow(owner, other_user.id)
        assert not await service.is_following(owner, other_user.id)

    async def test_follow_is_directed(self, db_session, owner, other_user):
        service = FollowService(db_session)
        await service.follow(owner, other_user.id)

        assert not await service.is_following(other_user, owner.id)

    async def test_cannot_follow_self(self, db_session, owner):
        with pytest.raises(ValidationError):
            await FollowService(db_session).follow(owner, owner.id)

    async def test_cannot_follow_twice(self, db_session, owner, other_user):
        service = FollowService(db_session)
        await service.follow(owner, other_user.id)

        with pytest.raises(DuplicateConstraintViolation):
            await service.follow(owner, other_user.id)

    async def test_unknown_user(self, db_session, owner):
        with pytest.raises(NotFound):
            await FollowService(db_session).follow(owner, uuid.uuid4())

    async def test_unfollow_when_not_following(self, db_session, owner, other_user):
        with pytest.raises(NotFound):
            await FollowService(db_session).unfollow(owner, other_user.id)

    async def test_free_follow_limit(self, db_session, make_user, monkeypatch):
        monkeypatch.setattr(get_settings(), "free_follow_limit", 2)
        service = FollowService(db_session)
        follower = await make_user("eager")
        targets = [await make_user(f"star{i}") for i in range(3)]

        await service.follow(follower, targets[0].id)
        await service.follow(follower, targets[1].id)
        with pytest.raises(ValidationError):
            await service.follow(follower, targets[2].id)

    async def test_pro_has_no_follow_limit(self, db_session, make_user, monkeypatch):
        monkeypatch.setattr(get_settings(), "free_follow_limit", 1)
        service = FollowService(db_session)
        follower = await make_user("patron", role=UserRole.PRO)
        targets = [await make_user(f"idol{i}") for i in range(3)]

        for target in targets:
            await service.follow(follower, target.id)

        assert len(await service.following_ids(follower.id)) == 3
