"""Half-open time intervals and timezone normalization helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.exceptions import InvalidInterval

_SECONDS_PER_HOUR = Decimal(3600)


@dataclass(frozen=True)
class Interval:
    """Time range ``[start, end)``; touching endpoints do not overlap.

    ``kind`` and ``source_id`` describe where an interval came from (a booking
    or a schedule block) and do not take part in equality.
    """

    start: datetime
    end: datetime
    kind: Optional[str] = field(default=None, compare=False)
    source_id: Optional[int] = field(default=None, compare=False)

    def overlaps(self, other: "Interval") -> bool:
        return self.start < other.end and other.start < self.end

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def duration_hours(self) -> Decimal:
        duration = self.duration
        total_seconds = Decimal(duration.days * 86400 + duration.seconds) + (
            Decimal(duration.microseconds) / Decimal(1_000_000)
        )
        return total_seconds / _SECONDS_PER_HOUR

    def widened(self, margin: timedelta) -> "Interval":
        return Interval(self.start - margin, self.end + margin)


def validate_bounds(start: datetime, end: datetime) -> None:
    """Reject malformed intervals before any store access."""

    if (start.tzinfo is None) != (end.tzinfo is None):
        raise InvalidInterval(
            "start_time and end_time must both include a timezone offset or both omit it"
        )
    if end <= start:
        raise InvalidInterval("end_time must be after start_time")


def field_zone(name: Optional[str]) -> ZoneInfo:
    try:
        return ZoneInfo(name or "UTC")
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidInterval(f"Unknown field timezone: {name}") from exc


def to_utc(value: datetime, zone: ZoneInfo) -> datetime:
    """Interpret naive values in ``zone`` and return an aware UTC datetime."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=zone)
    return value.astimezone(timezone.utc)


def normalize(start: datetime, end: datetime, zone: ZoneInfo) -> Interval:
    interval = Interval(to_utc(start, zone), to_utc(end, zone))
    if interval.end <= interval.start:
        raise InvalidInterval("end_time must be after start_time")
    return interval


def _window_for(day: date, open_time: time, close_time: time, zone: ZoneInfo) -> Interval:
    opens = datetime.combine(day, open_time, tzinfo=zone)
    closes = datetime.combine(day, close_time, tzinfo=zone)
    if closes <= opens:
        closes += timedelta(days=1)
    return Interval(opens.astimezone(timezone.utc), closes.astimezone(timezone.utc))


def ensure_within_operating_hours(
    interval: Interval,
    *,
    open_time: Optional[time],
    close_time: Optional[time],
    zone: ZoneInfo,
) -> None:
    """Require ``interval`` to fit inside one opening window of the field.

    Fields without opening hours are unrestricted. A closing time at or before
    the opening time describes a window that runs past midnight.
    """

    if open_time is None or close_time is None:
        return

    local_start = interval.start.astimezone(zone)
    # A window opened the previous day may still be running after midnight.
    for day in (local_start.date() - timedelta(days=1), local_start.date()):
        window = _window_for(day, open_time, close_time, zone)
        if window.start <= interval.start and interval.end <= window.end:
            return

    raise InvalidInterval(
        "Booking must be within the field opening hours"
        f" ({open_time} - {close_time})"
    )


__all__ = [
    "Interval",
    "ensure_within_operating_hours",
    "field_zone",
    "normalize",
    "to_utc",
    "validate_bounds",
]
