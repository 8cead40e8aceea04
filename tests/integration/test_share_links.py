"""Integration tests for trip share links."""

import uuid

import pytest

from roamlist.config import get_settings
from roamlist.engines.itinerary import ItineraryService
from roamlist.engines.sharing import ShareLinkService
from roamlist.engines.sharing.share_link_service import SHARE_CODE_ALPHABET
from roamlist.kernel.errors import (
    AuthorizationDenied,
    DuplicateConstraintViolation,
    NotFound,
    ValidationError,
)
from roamlist.kernel.events.event_store import EventStore
from roamlist.kernel.models import EventType, Trip, UserRole


async def make_trip(session, owner, title="Porto in spring"):
    trip = Trip(id=uuid.uuid4(), owner_id=owner.id, title=title)
    session.add(trip)
    await session.flush()
    return trip


@pytest.mark.asyncio
class TestShareLinkOwner:

    async def test_create(self, db_session, owner, trip):
        share = await ShareLinkService(db_session).create(owner, trip.id)

        assert len(share.share_code) == get_settings().share_code_length
        assert set(share.share_code) <= set(SHARE_CODE_ALPHABET)
        assert share.is_public is True
        assert share.view_count == 0
        assert share.share_url == f"/shared/{share.share_code}"

    async def test_create_twice_returns_same_link(self, db_session, owner, trip):
        service = ShareLinkService(db_session)

        first = await service.create(owner, trip.id)
        second = await service.create(owner, trip.id)

        assert first.id == second.id
        assert await service.count_shares(owner.id) == 1

    async def test_foreign_trip_not_found(self, db_session, other_user, trip):
        with pytest.raises(NotFound):
            await ShareLinkService(db_session).create(other_user, trip.id)

    async def test_free_share_limit(self, db_session, owner, monkeypatch):
        monkeypatch.setattr(get_settings(), "free_share_limit", 2)
        service = ShareLinkService(db_session)
        trips = [await make_trip(db_session, owner, f"Trip {i}") for i in range(3)]

        await service.create(owner, trips[0].id)
        await service.create(owner, trips[1].id)
        with pytest.raises(ValidationError):
            await service.create(owner, trips[2].id)

    async def test_pro_has_no_share_limit(self, db_session, make_user, monkeypatch):
        monkeypatch.setattr(get_settings(), "free_share_limit", 1)
        service = ShareLinkService(db_session)
        pro = await make_user("globetrotter", role=UserRole.PRO)

        for i in range(3):
            trip = await make_trip(db_session, pro, f"Leg {i}")
            await service.create(pro, trip.id)

        assert await service.count_shares(pro.id) == 3

    async def test_settings_only_for_owner(self, db_session, owner, other_user, trip):
        service = ShareLinkService(db_session)
        assert await service.get_settings(owner, trip.id) is None

        share = await service.create(owner, trip.id)

        assert (await service.get_settings(owner, trip.id)).id == share.id
        assert await service.get_settings(other_user, trip.id) is None
        assert await service.get_settings(None, trip.id) is None

    async def test_update_unshared_trip(self, db_session, owner, trip):
        with pytest.raises(NotFound):
            await ShareLinkService(db_session).update_settings(owner, trip.id, {"is_public": False})

    async def test_unknown_setting_rejected(self, db_session, owner, trip):
        service = ShareLinkService(db_session)
        await service.create(owner, trip.id)

        with pytest.raises(ValidationError):
            await service.update_settings(owner, trip.id, {"view_count": 0})

    async def test_delete(self, db_session, owner, trip):
        service = ShareLinkService(db_session)
        share = await service.create(owner, trip.id)
        code = share.share_code

        await service.delete(owner, trip.id)

        assert await service.get_settings(owner, trip.id) is None
        assert await service.resolve(code) is None
        # Nothing left to delete
        await service.delete(owner, trip.id)

    async def test_delete_foreign_trip(self, db_session, owner, other_user, trip):
        service = ShareLinkService(db_session)
        await service.create(owner, trip.id)

        with pytest.raises(NotFound):
            await service.delete(other_user, trip.id)
        assert await service.get_settings(owner, trip.id) is not None

    async def test_changes_are_logged(self, db_session, owner, trip):
        service = ShareLinkService(db_session)
        share = await service.create(owner, trip.id)
        await service.update_settings(owner, trip.id, {"is_public": False})
        await service.delete(owner, trip.id)
        await db_session.flush()

        history = await EventStore(db_session).get_entity_history("shared_trip", share.id)

        assert {EventType(e.event_type) for e in history} == {
            EventType.SHARE_LINK_CREATED,
            EventType.SHARE_LINK_UPDATED,
            EventType.SHARE_LINK_DELETED,
        }


@pytest.mark.asyncio
class TestCustomSlug:

    async def test_pro_sets_slug(self, db_session, make_user):
        service = ShareLinkService(db_session)
        pro = await make_user("planner", role=UserRole.PRO)
        trip = await make_trip(db_session, pro)
        await service.create(pro, trip.id)

        share = await service.update_settings(pro, trip.id, {"custom_slug": "porto-2025"})

        assert share.custom_slug == "porto-2025"
        assert share.share_url == "/shared/porto-2025"
        assert (await service.resolve("porto-2025")).id == share.id
        assert (await service.resolve(share.share_code)).id == share.id

    async def test_free_account_cannot_set_slug(self, db_session, owner, trip):
        service = ShareLinkService(db_session)
        await service.create(owner, trip.id)

        with pytest.raises(AuthorizationDenied):
            await service.update_settings(owner, trip.id, {"custom_slug": "my-trip"})

    @pytest.mark.parametrize("slug", ["Porto", "porto 2025", "porto_2025", "x" * 101])
    async def test_bad_slug(self, db_session, make_user, slug):
        service = ShareLinkService(db_session)
        pro = await make_user("planner", role=UserRole.PRO)
        trip = await make_trip(db_session, pro)
        await service.create(pro, trip.id)

        with pytest.raises(ValidationError) as exc_info:
            await service.update_settings(pro, trip.id, {"custom_slug": slug})
        assert exc_info.value.field == "custom_slug"

    async def test_slug_taken(self, db_session, make_user):
        service = ShareLinkService(db_session)
        first = await make_user("first", role=UserRole.PRO)
        second = await make_user("second", role=UserRole.PRO)
        trip_a = await make_trip(db_session, first)
        trip_b = await make_trip(db_session, second)
        await service.create(first, trip_a.id)
        await service.create(second, trip_b.id)
        await service.update_settings(first, trip_a.id, {"custom_slug": "alps"})

        with pytest.raises(DuplicateConstraintViolation):
            await service.update_settings(second, trip_b.id, {"custom_slug": "alps"})

    async def test_same_slug_again_is_fine(self, db_session, make_user):
        service = ShareLinkService(db_session)
        pro = await make_user("planner", role=UserRole.PRO)
        trip = await make_trip(db_session, pro)
        await service.create(pro, trip.id)
        await service.update_settings(pro, trip.id, {"custom_slug": "alps"})

        share = await service.update_settings(pro, trip.id, {"custom_slug": "alps"})

        assert share.custom_slug == "alps"

    async def test_empty_slug_clears(self, db_session, make_user):
        service = ShareLinkService(db_session)
        pro = await make_user("planner", role=UserRole.PRO)
        trip = await make_trip(db_session, pro)
        await service.create(pro, trip.id)
        await service.update_settings(pro, trip.id, {"custom_slug": "alps"})

        share = await service.update_settings(pro, trip.id, {"custom_slug": ""})

        assert share.custom_slug is None
        assert await service.resolve("alps") is None


@pytest.mark.asyncio
class TestSharedTripView:

    async def test_itinerary_in_day_then_rank_order(self, db_session, owner, trip):
        itinerary = ItineraryService(db_session)
        late = await itinerary.add(owner, trip.id, uuid.uuid4(), day_number=2)
        second = await itinerary.add(owner, trip.id, uuid.uuid4(), day_number=1)
        first = await itinerary.add(owner, trip.id, uuid.uuid4(), day_number=1, rank=0.5)
        service = ShareLinkService(db_session)
        share = await service.create(owner, trip.id)

        view = await service.get_shared_trip(share.share_code)

        assert view.trip.id == trip.id
        assert view.owner.id == owner.id
        assert [i.id for i in view.itinerary] == [first.id, second.id, late.id]
        assert view.show_branding is True

    async def test_pro_owner_hides_branding(self, db_session, make_user):
        service = ShareLinkService(db_session)
        pro = await make_user("planner", role=UserRole.PRO)
        trip = await make_trip(db_session, pro)
        share = await service.create(pro, trip.id)

        view = await service.get_shared_trip(share.share_code)

        assert view.show_branding is False
        assert view.itinerary == []

    async def test_private_link_hidden(self, db_session, owner, trip):
        service = ShareLinkService(db_session)
        share = await service.create(owner, trip.id)
        await service.update_settings(owner, trip.id, {"is_public": False})

        assert await service.get_shared_trip(share.share_code) is None
        assert await service.record_view(share.share_code) is None

    async def test_unknown_code(self, db_session):
        service = ShareLinkService(db_session)

        assert await service.get_shared_trip("nope") is None
        assert await service.record_view("nope") is None

    async def test_views_are_counted(self, db_session, owner, trip):
        service = ShareLinkService(db_session)
        share = await service.create(owner, trip.id)

        assert await service.record_view(share.share_code) == 1
        assert await service.record_view(share.share_code) == 2

        view = await service.get_shared_trip(share.share_code)
        assert view.view_count == 2
