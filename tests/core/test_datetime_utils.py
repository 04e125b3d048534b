"""Unit tests for enrollment window arithmetic."""

from datetime import UTC, datetime, timedelta

from app.core.datetime_utils import days_remaining, ensure_utc, is_expired, weeks_from

NOW = datetime(2026, 5, 10, 12, 0, tzinfo=UTC)


def test_weeks_from_adds_seven_days_per_week():
    assert weeks_from(NOW, 14) == NOW + timedelta(days=98)


def test_naive_datetimes_are_treated_as_utc():
    naive = datetime(2026, 5, 10, 12, 0)
    assert ensure_utc(naive) == NOW


def test_is_expired_boundary():
    assert is_expired(NOW, now=NOW)
    assert is_expired(NOW - timedelta(seconds=1), now=NOW)
    assert not is_expired(NOW + timedelta(seconds=1), now=NOW)


def test_days_remaining_rounds_up():
    assert days_remaining(NOW + timedelta(days=2, hours=1), now=NOW) == 3
    assert days_remaining(NOW + timedelta(days=2), now=NOW) == 2
    assert days_remaining(NOW + timedelta(seconds=1), now=NOW) == 1


def test_days_remaining_never_negative():
    assert days_remaining(NOW, now=NOW) == 0
    assert days_remaining(NOW - timedelta(days=5), now=NOW) == 0
