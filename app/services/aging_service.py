"""
SelfEmploy Portal - Registration Aging

Days-remaining computation for pending registrations and urgency banding.

A pending registration expires ``AGING_WINDOW_DAYS`` after it was created:

    days_remaining = max(0, window - ceil((now - created_at) / 1 day))

Only pending registrations ever count as "expiring"; approved and rejected
ones are settled.
"""

import math
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional

from app.config import settings
from app.models.registration import Registration, RegistrationStatus


AGING_WINDOW_DAYS = settings.registration_aging_days
SECONDS_PER_DAY = timedelta(days=1).total_seconds()


class UrgencyTier(str, Enum):
    """Urgency band for a pending registration."""
    CRITICAL = "critical"  # 1 day or less
    HIGH = "high"          # 2-3 days
    MEDIUM = "medium"      # 4-7 days
    LOW = "low"            # more than 7 days


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; stored timestamps are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def days_remaining(
    created_at: datetime,
    now: Optional[datetime] = None,
    window_days: Optional[int] = None,
) -> int:
    """Whole days left before a pending registration created at ``created_at`` expires."""
    window = AGING_WINDOW_DAYS if window_days is None else window_days
    elapsed = _as_utc(now or utcnow()) - _as_utc(created_at)
    elapsed_days = math.ceil(elapsed.total_seconds() / SECONDS_PER_DAY)
    return max(0, window - elapsed_days)


def urgency_tier(remaining: int) -> UrgencyTier:
    if remaining <= 1:
        return UrgencyTier.CRITICAL
    if remaining <= 3:
        return UrgencyTier.HIGH
    if remaining <= 7:
        return UrgencyTier.MEDIUM
    return UrgencyTier.LOW


def is_expiring(
    registration: Registration,
    threshold: int,
    now: Optional[datetime] = None,
    window_days: Optional[int] = None,
) -> bool:
    """
    True for a pending registration with ``0 < days_remaining <= threshold``.

    Registrations already past the window (0 days left) are overdue, not
    expiring, and are left out.
    """
    if registration.status != RegistrationStatus.PENDING:
        return False
    remaining = days_remaining(registration.created_at, now, window_days)
    return 0 < remaining <= threshold


def filter_expiring(
    registrations: Iterable[Registration],
    threshold: int,
    now: Optional[datetime] = None,
    window_days: Optional[int] = None,
) -> List[Registration]:
    """Pending registrations expiring within ``threshold`` days, soonest first."""
    now = now or utcnow()
    expiring = [r for r in registrations if is_expiring(r, threshold, now, window_days)]
    return sorted(expiring, key=lambda r: days_remaining(r.created_at, now, window_days))


@dataclass
class ExpiryAlert:
    """Summary used for the dashboard's expiring-registrations alert."""
    threshold_days: int
    total: int
    by_tier: Dict[str, int]
    registrations: List[Registration]


def summarize_expiring(
    registrations: Iterable[Registration],
    threshold: Optional[int] = None,
    now: Optional[datetime] = None,
    window_days: Optional[int] = None,
) -> ExpiryAlert:
    """Group expiring pending registrations by urgency tier."""
    threshold = settings.expiry_alert_days if threshold is None else threshold
    now = now or utcnow()
    expiring = filter_expiring(registrations, threshold, now, window_days)
    tiers = Counter(
        urgency_tier(days_remaining(r.created_at, now, window_days)).value
        for r in expiring
    )
    return ExpiryAlert(
        threshold_days=threshold,
        total=len(expiring),
        by_tier={tier.value: tiers.get(tier.value, 0) for tier in UrgencyTier},
        registrations=expiring,
    )
