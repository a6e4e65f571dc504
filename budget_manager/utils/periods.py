"""Month helpers - months are identified by "YYYY-MM" keys and stored as first-of-month dates"""
from datetime import date, datetime
from typing import List, Optional, Union

import pytz


def month_start(value: Union[date, datetime]) -> date:
    return date(value.year, value.month, 1)


def parse_month(key: str) -> date:
    """'2026-10' -> date(2026, 10, 1); raises ValueError on anything else"""
    try:
        parsed = datetime.strptime(key.strip(), "%Y-%m")
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid month {key!r}, expected YYYY-MM") from None
    return date(parsed.year, parsed.month, 1)


def month_key(value: Union[date, datetime]) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def month_label(value: Union[date, datetime]) -> str:
    return value.strftime("%B %Y")


def shift_month(value: Union[date, datetime], months: int) -> date:
    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def next_month(value: Union[date, datetime]) -> date:
    return shift_month(value, 1)


def month_range(end: date, months: int) -> List[date]:
    """``months`` consecutive month starts ending at ``end`` (oldest first)"""
    return [shift_month(end, -offset) for offset in range(months - 1, -1, -1)]


def today(timezone: Optional[str] = None) -> date:
    if timezone is None:
        from ..config import get_settings

        timezone = get_settings().timezone
    return datetime.now(pytz.timezone(timezone)).date()


def current_month(timezone: Optional[str] = None) -> date:
    return month_start(today(timezone))
