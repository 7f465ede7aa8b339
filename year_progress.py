"""
Calendar arithmetic for the year-progress wallpaper.

    resolve_date()  - (date override, timezone) -> civil date
    DayMetrics      - day of year, days in year, days left, percent elapsed
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


class InvalidDateError(ValueError):
    """The literal date override is not a valid YYYY-MM-DD date."""


def is_leap(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_year(year: int) -> int:
    return 366 if is_leap(year) else 365


def parse_date(value: str) -> date:
    """Parse a literal ``YYYY-MM-DD`` string as plain calendar components."""
    try:
        year, month, day = (int(part) for part in value.strip().split("-"))
        return date(year, month, day)
    except ValueError as exc:
        raise InvalidDateError(f"Invalid date: {value!r}. Expected YYYY-MM-DD.") from exc


def _zone(name: str):
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        logger.warning("Unknown timezone %r, using UTC", name)
        return timezone.utc


def resolve_date(
    date_override: Optional[str] = None,
    tz_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> date:
    """
    Resolve the calendar date a wallpaper should show.

    A literal date override always wins and is taken as-is, with no
    timezone conversion. Otherwise "today" is the current instant seen in
    ``tz_name``; a missing or unknown timezone means UTC.

    Args:
        date_override: ``YYYY-MM-DD`` string, or None
        tz_name:       IANA timezone name, or None
        now:           current instant (aware); defaults to the system clock

    Returns:
        A plain ``datetime.date``.
    """
    if date_override:
        return parse_date(date_override)

    instant = now or datetime.now(timezone.utc)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)

    zone = _zone(tz_name) if tz_name else timezone.utc
    return instant.astimezone(zone).date()


@dataclass(frozen=True)
class DayMetrics:
    """
    Where a date sits within its year.

    day_of_year:  1-based, 1..365 (366 on Dec 31 of a leap year)
    days_in_year: 365 or 366
    days_left:    days after today up to and including Dec 31
    """
    day_of_year: int
    days_in_year: int
    days_left: int

    @property
    def percent_elapsed(self) -> str:
        """Percent of the year elapsed, one decimal digit."""
        return f"{self.day_of_year / self.days_in_year * 100:.1f}"

    @classmethod
    def for_date(cls, day: date) -> DayMetrics:
        jan1 = date(day.year, 1, 1)
        dec31 = date(day.year, 12, 31)
        return cls(
            day_of_year=(day - jan1).days + 1,
            days_in_year=days_in_year(day.year),
            days_left=(dec31 - day).days,
        )

    def to_dict(self) -> dict:
        return {
            "day_of_year": self.day_of_year,
            "days_in_year": self.days_in_year,
            "days_left": self.days_left,
            "percent_elapsed": self.percent_elapsed,
        }
