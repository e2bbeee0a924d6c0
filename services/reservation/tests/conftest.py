"""Shared fixtures: a throwaway SQLite store, a controllable clock and seed helpers."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Optional

import pytest

from app.core.database import Database
from app.models import Field, Promotion
from app.services.booking_coordinator import BookingCoordinator

# Day 0 of every scenario. Bookings are made on later days.
BASE_TIME = datetime(2030, 1, 1, 8, 0, tzinfo=timezone.utc)


def on_day(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2030, 1, 1 + day, hour, minute, tzinfo=timezone.utc)


class FrozenClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def database(tmp_path) -> Database:
    store = Database(f"sqlite:///{tmp_path / 'reservation.db'}", timeout_seconds=30).open()
    store.create_all()
    yield store
    store.close()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(BASE_TIME)


@pytest.fixture
def coordinator(database: Database, clock: FrozenClock) -> BookingCoordinator:
    return BookingCoordinator(database, clock=clock)


@pytest.fixture
def make_field(database: Database) -> Callable[..., int]:
    def _make_field(
        *,
        price_per_hour: str = "40.00",
        timezone_name: str = "UTC",
        open_time=None,
        close_time=None,
        name: str = "Cancha 1",
    ) -> int:
        with database.transaction() as db:
            field = Field(
                field_name=name,
                price_per_hour=Decimal(price_per_hour),
                timezone=timezone_name,
                open_time=open_time,
                close_time=close_time,
                status="active",
            )
            db.add(field)
            db.flush()
            return field.id_field

    return _make_field


@pytest.fixture
def make_promotion(database: Database) -> Callable[..., int]:
    def _make_promotion(
        field_id: int,
        *,
        discount_type: str = "percentage",
        discount_value: str = "20",
        start_date: datetime,
        end_date: datetime,
        is_active: bool = True,
        created_at: Optional[datetime] = None,
    ) -> int:
        with database.transaction() as db:
            promotion = Promotion(
                id_field=field_id,
                title="Promo",
                discount_type=discount_type,
                discount_value=Decimal(discount_value),
                start_date=start_date,
                end_date=end_date,
                is_active=is_active,
                created_at=created_at or BASE_TIME,
            )
            db.add(promotion)
            db.flush()
            return promotion.id_promotion

    return _make_promotion
