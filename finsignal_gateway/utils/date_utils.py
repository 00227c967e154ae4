"""Date and time helpers; all analysis runs on UTC"""

from datetime import date, datetime, timedelta, timezone
from typing import List


def to_utc(value: datetime) -> datetime:
    """Normalize a datetime to UTC (naive values are assumed to already be UTC)"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def generate_date_range(start: date, days: int) -> List[date]:
    """Generate the `days` consecutive dates following start (start excluded)"""
    return [start + timedelta(days=i) for i in range(1, days + 1)]
