from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable, List, Optional, Union


class SchedulingError(Exception):
    """Base class for booking rule violations."""


class InvalidPeriodSelector(SchedulingError):
    pass


# --- date/time string helpers ---

def parse_iso_date(value: Union[str, date]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def normalize_time(value: Union[str, time]) -> time:
    """Accepts "HH:MM" or "HH:MM:SS" and returns a time."""
    if isinstance(value, time):
        if value.microsecond:
            raise ValueError(f"Fractional seconds are not supported: {value}")
        return value
    parts = value.strip().split(":")
    if len(parts) == 2:
        parts.append("0")
    if len(parts) != 3:
        raise ValueError(f"Invalid time: {value!r}")
    hh, mm, ss = (int(p) for p in parts)
    return time(hh, mm, ss)


def format_time(value: Union[str, time]) -> str:
    return normalize_time(value).strftime("%H:%M:%S")


# --- period resolution ---

@dataclass(frozen=True)
class Period:
    start: date
    end: date

    def contains(self, value: Union[str, date]) -> bool:
        # inclusive on both ends
        return self.start <= parse_iso_date(value) <= self.end

    @property
    def label(self) -> str:
        return f"{self.start.isoformat()}_{self.end.isoformat()}"


def _last_day(year: int, month: int) -> date:
    return date(year, month, monthrange(year, month)[1])


def resolve_period(
    year: Optional[int] = None,
    month: Optional[int] = None,
    quarter: Optional[int] = None,
) -> Period:
    """
    Turn a (year, month?, quarter?) selector into an inclusive date window.

    Year alone covers the whole year. Month and quarter are mutually
    exclusive. A missing year is rejected rather than widened.
    """
    if year is None:
        raise InvalidPeriodSelector("A year is required to select a period")
    if not 1 <= year <= 9999:
        raise InvalidPeriodSelector(f"Year out of range: {year}")
    if month is not None and quarter is not None:
        raise InvalidPeriodSelector("Select either a month or a quarter, not both")

    if month is not None:
        if not 1 <= month <= 12:
            raise InvalidPeriodSelector(f"Month must be between 1 and 12, got {month}")
        return Period(date(year, month, 1), _last_day(year, month))

    if quarter is not None:
        if not 1 <= quarter <= 4:
            raise InvalidPeriodSelector(f"Quarter must be between 1 and 4, got {quarter}")
        first_month = (quarter - 1) * 3 + 1
        return Period(date(year, first_month, 1), _last_day(year, first_month + 2))

    return Period(date(year, 1, 1), date(year, 12, 31))


def filter_by_period(records: Iterable, period: Period) -> List:
    """Records whose booking_date falls inside the period, in input order."""
    return [r for r in records if period.contains(r.booking_date)]
