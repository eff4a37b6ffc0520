"""Date manipulation utilities"""

from datetime import date, timedelta
from typing import Iterable, List


def add_days(from_date: date, days: int) -> date:
    """Calendar-day offset (no business-day or timezone adjustment)"""
    return from_date + timedelta(days=days)


def generate_due_dates(start: date, count: int, interval_days: int) -> List[date]:
    """Due dates one interval apart, the first one interval after start"""
    return [add_days(start, i * interval_days) for i in range(1, count + 1)]


def dates_before(anchor: date, offsets_days: Iterable[int]) -> List[date]:
    """Distinct dates `offset` days before anchor, ascending"""
    return sorted({add_days(anchor, -offset) for offset in offsets_days})
