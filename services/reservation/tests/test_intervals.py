from datetime import datetime, time, timezone
from decimal import Decimal

import pytest

from app.core.exceptions import InvalidInterval
from app.services.intervals import (
    Interval,
    ensure_within_operating_hours,
    field_zone,
    normalize,
    validate_bounds,
)

from conftest import on_day


def test_validate_bounds_rejects_empty_and_reversed_intervals():
    with pytest.raises(InvalidInterval):
        validate_bounds(on_day(1, 10), on_day(1, 10))
    with pytest.raises(InvalidInterval):
        validate_bounds(on_day(1, 11), on_day(1, 10))


def test_validate_bounds_rejects_mixed_naive_and_aware_values():
    with pytest.raises(InvalidInterval):
        validate_bounds(datetime(2030, 1, 2, 10), on_day(1, 11))


def test_naive_values_are_read_in_the_field_timezone():
    zone = field_zone("America/Lima")

    interval = normalize(datetime(2030, 1, 2, 10), datetime(2030, 1, 2, 11), zone)

    assert interval.start == datetime(2030, 1, 2, 15, tzinfo=timezone.utc)
    assert interval.duration_hours == Decimal(1)


def test_unknown_timezone_is_invalid():
    with pytest.raises(InvalidInterval):
        field_zone("Mars/Olympus_Mons")


def test_operating_hours_unrestricted_when_not_configured():
    ensure_within_operating_hours(
        Interval(on_day(1, 2), on_day(1, 4)),
        open_time=None,
        close_time=None,
        zone=field_zone("UTC"),
    )


def test_operating_hours_window():
    zone = field_zone("UTC")

    ensure_within_operating_hours(
        Interval(on_day(1, 8), on_day(1, 22)), open_time=time(8), close_time=time(22), zone=zone
    )
    with pytest.raises(InvalidInterval):
        ensure_within_operating_hours(
            Interval(on_day(1, 21), on_day(1, 23)), open_time=time(8), close_time=time(22), zone=zone
        )


def test_overnight_operating_hours():
    zone = field_zone("UTC")

    ensure_within_operating_hours(
        Interval(on_day(1, 23), on_day(2, 1)), open_time=time(18), close_time=time(2), zone=zone
    )
    ensure_within_operating_hours(
        Interval(on_day(2, 0, 30), on_day(2, 1, 30)), open_time=time(18), close_time=time(2), zone=zone
    )
    with pytest.raises(InvalidInterval):
        ensure_within_operating_hours(
            Interval(on_day(2, 1), on_day(2, 3)), open_time=time(18), close_time=time(2), zone=zone
        )
