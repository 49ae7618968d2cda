"""Canonical calendar handling for transaction dates and period keys."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal
from zoneinfo import ZoneInfo

Granularity = Literal["day", "month"]

CANONICAL_TZ = ZoneInfo("Europe/Berlin")


def to_canonical_date(value: date | datetime | str) -> date:
    """Resolve a date, datetime or ISO string to a calendar day in CANONICAL_TZ.

    Naive datetimes are taken to already be in the canonical timezone.
    """
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        value = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(CANONICAL_TZ)
        return value.date()
    return value


def period_start(value: date | datetime | str, granularity: Granularity) -> date:
    day = to_canonical_date(value)
    if granularity == "day":
        return day
    if granularity == "month":
        return day.replace(day=1)
    raise ValueError(f"Unsupported granularity: {granularity!r}")


def period_key(value: date | datetime | str, granularity: Granularity) -> str:
    """Format the period containing ``value`` (``YYYY-MM-DD`` or ``YYYY-MM``)."""
    start = period_start(value, granularity)
    if granularity == "day":
        return start.isoformat()
    return start.strftime("%Y-%m")
