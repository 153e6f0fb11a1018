"""Business calendar and elapsed working-hours arithmetic."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

LOGGER = logging.getLogger(__name__)

_SECONDS_PER_HOUR = 3600
_SATURDAY = 5

HolidayInput = Union[str, date, datetime]


def utcnow() -> datetime:
    """Return the current UTC instant as a naive datetime (the storage convention)."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_holidays(raw: Union[str, Iterable[HolidayInput], None]) -> set[date]:
    """Parse holiday entries into dates.

    Accepts a comma-separated string or an iterable of strings, dates or
    datetimes. Malformed entries are skipped with a warning.
    """

    if raw is None:
        return set()
    entries: Iterable[HolidayInput] = raw.split(",") if isinstance(raw, str) else raw
    holidays: set[date] = set()
    for entry in entries:
        if isinstance(entry, datetime):
            holidays.add(entry.date())
            continue
        if isinstance(entry, date):
            holidays.add(entry)
            continue
        text = str(entry).strip()
        if not text:
            continue
        try:
            holidays.add(datetime.fromisoformat(text).date())
        except ValueError:
            LOGGER.warning("Skipping malformed holiday entry '%s'", text)
    return holidays


class BusinessCalendar:
    """Working-day calendar: weekends are implicit, holidays explicit.

    Naive instants are interpreted as UTC. When a timezone is configured the
    day walk happens on local wall-clock dates. ``start_hour``/``end_hour``
    restrict each working day to a window; ``0``/``0`` counts whole days.
    """

    def __init__(
        self,
        holidays: Union[str, Iterable[HolidayInput], None] = (),
        *,
        timezone_name: Optional[str] = None,
        start_hour: int = 0,
        end_hour: int = 0,
    ) -> None:
        if not 0 <= start_hour <= 23 or not 0 <= end_hour <= 24:
            raise ValueError(f"Invalid business hours window {start_hour}-{end_hour}")
        if end_hour and end_hour <= start_hour:
            raise ValueError(f"Business day end hour {end_hour} must be after start hour {start_hour}")
        try:
            self._zone = ZoneInfo(timezone_name) if timezone_name else None
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"Unknown timezone '{timezone_name}'") from exc
        self._holidays = frozenset(parse_holidays(holidays))
        self.start_hour = start_hour
        self.end_hour = end_hour

    @property
    def holidays(self) -> frozenset[date]:
        return self._holidays

    def _to_local(self, instant: datetime) -> datetime:
        if self._zone is None:
            if instant.tzinfo is not None:
                return instant.astimezone(timezone.utc).replace(tzinfo=None)
            return instant
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return instant.astimezone(self._zone).replace(tzinfo=None)

    def _window(self, day_start: datetime) -> tuple[datetime, datetime]:
        if self.end_hour > self.start_hour:
            return day_start + timedelta(hours=self.start_hour), day_start + timedelta(hours=self.end_hour)
        return day_start, day_start + timedelta(days=1)

    def is_working_day(self, day: Union[date, datetime]) -> bool:
        if isinstance(day, datetime):
            day = day.date()
        return day.weekday() < _SATURDAY and day not in self._holidays

    def is_working_time(self, instant: datetime) -> bool:
        local = self._to_local(instant)
        if not self.is_working_day(local):
            return False
        window_start, window_end = self._window(datetime.combine(local.date(), time.min))
        return window_start <= local < window_end

    def weekend_days(self, start: date, end: date) -> int:
        """Count Saturdays and Sundays in the inclusive date range."""

        count = 0
        current = start
        while current <= end:
            if current.weekday() >= _SATURDAY:
                count += 1
            current += timedelta(days=1)
        return count

    def holiday_days(self, start: date, end: date) -> int:
        """Count holidays falling on weekdays in the inclusive date range."""

        return sum(1 for day in self._holidays if start <= day <= end and day.weekday() < _SATURDAY)

    def elapsed_working_hours(self, start: datetime, end: Optional[datetime] = None) -> int:
        """Return whole working hours between ``start`` and ``end`` (default: now).

        Each working day contributes the truncated whole hours of its overlap
        with ``[start, end)``; weekends and holidays contribute nothing.
        """

        local_start = self._to_local(start)
        local_end = self._to_local(end if end is not None else utcnow())
        if local_start >= local_end:
            return 0

        total = 0
        current = local_start
        while current < local_end:
            day_start = datetime.combine(current.date(), time.min)
            if self.is_working_day(day_start):
                window_start, window_end = self._window(day_start)
                effective_start = max(current, window_start)
                effective_end = min(local_end, window_end)
                if effective_end > effective_start:
                    total += int((effective_end - effective_start).total_seconds()) // _SECONDS_PER_HOUR
            current = day_start + timedelta(days=1)
        return total


class ElapsedTimeCalculator:
    """Converts instants into elapsed working hours against a calendar."""

    def __init__(self, calendar: Optional[BusinessCalendar] = None) -> None:
        self.calendar = calendar or BusinessCalendar()

    def elapsed_working_hours(self, start: datetime, end: Optional[datetime] = None) -> int:
        return self.calendar.elapsed_working_hours(start, end)
