from __future__ import annotations
from datetime import date, datetime, timedelta, UTC
from typing import Optional

__all__ = ["utc_now", "ensure_aware_utc", "to_naive_utc", "days_from_now", "day_range"]

def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(UTC)

def ensure_aware_utc(dt: datetime | None) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware in UTC (assumes naive input already in UTC)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)

def to_naive_utc(dt: datetime | None) -> Optional[datetime]:
    """Convert aware datetime to naive UTC for storage/compare; pass through naive assumed UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(UTC).replace(tzinfo=None)

def days_from_now(days: int, now: datetime | None = None) -> datetime:
    return (now or utc_now()) + timedelta(days=days)

def day_range(start: date, end: date) -> list[date]:
    """Every calendar day from start to end, both inclusive."""
    if end < start:
        return []
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]
