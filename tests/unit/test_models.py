"""Unit tests for model defaults."""

from datetime import timezone

from roamlist.kernel.models import BucketListItem, Trip, User
from roamlist.kernel.models.base import generate_uuid, utcnow


class TestModelDefaults:

    def test_models_import_with_timestamp_defaults(self):
        created = Trip.__table__.c.created_at
        updated = Trip.__table__.c.updated_at

        assert created.default is not None
        assert updated.onupdate is not None
        assert User.__table__.c.created_at.default is not None
        assert BucketListItem.__table__.c.updated_at.onupdate is not None

    def test_utcnow_is_timezone_aware(self):
        assert utcnow().tzinfo is timezone.utc

    def test_generate_uuid_unique(self):
        assert generate_uuid() != generate_uuid()
