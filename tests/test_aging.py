"""
SelfEmploy Portal - Registration Aging Tests
"""

from datetime import datetime, timedelta, timezone

import pytest

from app.models.registration import Registration, RegistrationStatus
from app.services.aging_service import (
    AGING_WINDOW_DAYS,
    UrgencyTier,
    days_remaining,
    filter_expiring,
    is_expiring,
    summarize_expiring,
    urgency_tier,
)


NOW = datetime(2024, 6, 20, 12, 0, tzinfo=timezone.utc)


def pending(age: timedelta, status=RegistrationStatus.PENDING) -> Registration:
    return Registration(status=status, created_at=NOW - age, name=f"aged {age}")


class TestDaysRemaining:

    def test_window_is_fifteen_days(self):
        assert AGING_WINDOW_DAYS == 15

    def test_just_created(self):
        assert days_remaining(NOW, NOW) == 15

    def test_partial_day_counts_as_full_day(self):
        assert days_remaining(NOW - timedelta(seconds=1), NOW) == 14
        assert days_remaining(NOW - timedelta(hours=23), NOW) == 14

    def test_whole_days(self):
        assert days_remaining(NOW - timedelta(days=1), NOW) == 14
        assert days_remaining(NOW - timedelta(days=1, seconds=1), NOW) == 13
        assert days_remaining(NOW - timedelta(days=10), NOW) == 5

    def test_never_negative(self):
        assert days_remaining(NOW - timedelta(days=15), NOW) == 0
        assert days_remaining(NOW - timedelta(days=40), NOW) == 0

    def test_naive_datetimes_are_utc(self):
        naive_created = (NOW - timedelta(days=3)).replace(tzinfo=None)
        assert days_remaining(naive_created, NOW) == 12

    def test_custom_window(self):
        assert days_remaining(NOW - timedelta(days=3), NOW, window_days=30) == 27


class TestUrgencyTier:

    @pytest.mark.parametrize(
        "remaining, tier",
        [
            (0, UrgencyTier.CRITICAL),
            (1, UrgencyTier.CRITICAL),
            (2, UrgencyTier.HIGH),
            (3, UrgencyTier.HIGH),
            (4, UrgencyTier.MEDIUM),
            (7, UrgencyTier.MEDIUM),
            (8, UrgencyTier.LOW),
            (15, UrgencyTier.LOW),
        ],
    )
    def test_bands(self, remaining, tier):
        assert urgency_tier(remaining) == tier


class TestExpiryFilter:

    def test_only_pending_registrations_expire(self):
        approved = pending(timedelta(days=12), RegistrationStatus.APPROVED)
        rejected = pending(timedelta(days=12), RegistrationStatus.REJECTED)
        assert not is_expiring(approved, 5, NOW)
        assert not is_expiring(rejected, 5, NOW)
        assert is_expiring(pending(timedelta(days=12)), 5, NOW)

    def test_threshold_is_inclusive(self):
        # 10 days old -> 5 remaining
        assert is_expiring(pending(timedelta(days=10)), 5, NOW)
        assert not is_expiring(pending(timedelta(days=9)), 5, NOW)

    def test_overdue_registrations_are_not_expiring(self):
        assert not is_expiring(pending(timedelta(days=20)), 5, NOW)

    def test_sorted_soonest_first(self):
        regs = [
            pending(timedelta(days=11)),
            pending(timedelta(days=14)),
            pending(timedelta(days=2)),
            pending(timedelta(days=13)),
        ]
        result = filter_expiring(regs, 5, NOW)
        assert [days_remaining(r.created_at, NOW) for r in result] == [1, 2, 4]

    def test_summary_groups_by_tier(self):
        regs = [
            pending(timedelta(days=14)),   # 1 left
            pending(timedelta(days=13)),   # 2 left
            pending(timedelta(days=12)),   # 3 left
            pending(timedelta(days=10)),   # 5 left
            pending(timedelta(days=1)),    # 14 left
            pending(timedelta(days=14), RegistrationStatus.APPROVED),
        ]
        alert = summarize_expiring(regs, now=NOW)

        assert alert.threshold_days == 5
        assert alert.total == 4
        assert alert.by_tier == {"critical": 1, "high": 2, "medium": 1, "low": 0}

    def test_summary_of_nothing(self):
        alert = summarize_expiring([], threshold=3, now=NOW)
        assert alert.total == 0
        assert alert.registrations == []
