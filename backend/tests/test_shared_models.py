"""Tests for shared model utilities."""

import uuid
from datetime import UTC, datetime, timedelta, timezone

from dealpass.models.shared import DEFAULT_ORGANIZATION_ID, UUIDType, as_utc, generate_uuid, utc_now


class TestHelpers:
    def test_generate_uuid_is_v4(self):
        assert generate_uuid().version == 4

    def test_utc_now_is_aware(self):
        assert utc_now().tzinfo == UTC

    def test_default_organization(self):
        assert str(DEFAULT_ORGANIZATION_ID) == "00000000-0000-0000-0000-000000000001"


class TestAsUtc:
    def test_naive_value_gets_utc(self):
        value = as_utc(datetime(2026, 10, 19, 12, 0))
        assert value == datetime(2026, 10, 19, 12, 0, tzinfo=UTC)

    def test_aware_value_unchanged(self):
        plus_two = timezone(timedelta(hours=2))
        value = datetime(2026, 10, 19, 14, 0, tzinfo=plus_two)
        assert as_utc(value) is value


class TestUUIDType:
    def test_bind_accepts_uuid_and_string(self):
        value = uuid.uuid4()
        uuid_type = UUIDType()
        assert uuid_type.process_bind_param(value, None) == str(value)
        assert uuid_type.process_bind_param(str(value), None) == str(value)
        assert uuid_type.process_bind_param(None, None) is None

    def test_result_returns_uuid(self):
        value = uuid.uuid4()
        assert UUIDType().process_result_value(str(value), None) == value
        assert UUIDType().process_result_value(None, None) is None
