"""Background sweep of pending bookings past their payment deadline."""

import asyncio
from datetime import timedelta
from typing import Optional

from app.core.exceptions import TransientStoreError
from app.services.expiry_worker import run_expiry_loop

from conftest import on_day


class _CountingCoordinator:
    def __init__(self, failures: int = 0, error: Optional[Exception] = None) -> None:
        self.calls = 0
        self.failures = failures
        self.error = error or TransientStoreError()

    def expire_pending_bookings(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return 0


def _run_until(coordinator, *, calls: int) -> None:
    async def scenario() -> None:
        stop_event = asyncio.Event()
        task = asyncio.create_task(
            run_expiry_loop(coordinator, interval_seconds=0.01, stop_event=stop_event)
        )
        for _ in range(500):
            if coordinator.calls >= calls:
                break
            await asyncio.sleep(0.01)
        stop_event.set()
        await asyncio.wait_for(task, timeout=5)

    asyncio.run(scenario())


def test_loop_sweeps_until_stopped():
    coordinator = _CountingCoordinator()

    _run_until(coordinator, calls=3)

    assert coordinator.calls >= 3


def test_loop_survives_store_errors():
    coordinator = _CountingCoordinator(failures=2)

    _run_until(coordinator, calls=4)

    assert coordinator.calls >= 4


def test_loop_survives_unexpected_errors():
    coordinator = _CountingCoordinator(failures=2, error=RuntimeError("handle closed"))

    _run_until(coordinator, calls=4)

    assert coordinator.calls >= 4


def test_loop_cancels_expired_bookings(coordinator, make_field, clock):
    field_id = make_field()
    booking = coordinator.reserve(field_id, on_day(1, 10), on_day(1, 11), owner_id=1)
    clock.advance(timedelta(minutes=10))

    async def scenario() -> None:
        stop_event = asyncio.Event()
        task = asyncio.create_task(
            run_expiry_loop(coordinator, interval_seconds=0.01, stop_event=stop_event)
        )
        for _ in range(500):
            if coordinator.get_booking(booking.id_booking).status == "cancelled":
                break
            await asyncio.sleep(0.01)
        stop_event.set()
        await asyncio.wait_for(task, timeout=5)

    asyncio.run(scenario())

    assert coordinator.get_booking(booking.id_booking).status == "cancelled"
