"""
Priority policies for the verification queue.

A policy maps an item's creation timestamp (and the current time) to a
Priority. The default policy buckets by staleness:

    age <  3 days            -> High
    3 days <= age < 7 days   -> Medium
    age >= 7 days            -> Low

Timestamps in the future count as High.
"""

import enum
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from practitioner_passport.core.config import settings


class Priority(str, enum.Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


PriorityPolicy = Callable[[Optional[datetime], datetime], Priority]


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def recency_priority(
    created_at: Optional[datetime],
    now: Optional[datetime] = None,
    high_within_days: Optional[int] = None,
    medium_within_days: Optional[int] = None,
) -> Priority:
    """Classify an item by how long ago it was created"""
    if created_at is None:
        return Priority.LOW

    high_days = settings.PRIORITY_HIGH_WITHIN_DAYS if high_within_days is None else high_within_days
    medium_days = settings.PRIORITY_MEDIUM_WITHIN_DAYS if medium_within_days is None else medium_within_days

    now = _naive_utc(now or datetime.utcnow())
    age = now - _naive_utc(created_at)

    if age < timedelta(days=high_days):
        return Priority.HIGH
    if age < timedelta(days=medium_days):
        return Priority.MEDIUM
    return Priority.LOW


def make_recency_policy(high_within_days: int, medium_within_days: int) -> PriorityPolicy:
    """Build a recency policy with fixed thresholds"""
    if high_within_days > medium_within_days:
        raise ValueError("high threshold must not exceed medium threshold")

    def policy(created_at: Optional[datetime], now: datetime) -> Priority:
        return recency_priority(created_at, now, high_within_days, medium_within_days)

    return policy
