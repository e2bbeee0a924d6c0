"""Periodic cancellation of pending bookings whose payment window closed."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from app.core.exceptions import ReservationError
from app.services.booking_coordinator import BookingCoordinator

logger = logging.getLogger(__name__)


async def run_expiry_loop(
    coordinator: BookingCoordinator,
    *,
    interval_seconds: float,
    stop_event: Optional[asyncio.Event] = None,
) -> None:
    """Sweep expired pending bookings every ``interval_seconds`` until stopped."""

    stop_event = stop_event or asyncio.Event()
    logger.info("Expired booking sweep every %s seconds", interval_seconds)

    while not stop_event.is_set():
        try:
            await asyncio.to_thread(coordinator.expire_pending_bookings)
        except ReservationError as exc:
            # The next sweep picks up whatever this one missed.
            logger.warning("Expired booking sweep failed: %s", exc)
        except Exception:
            logger.exception("Unexpected error during expired booking sweep")

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
        except asyncio.TimeoutError:
            continue

    logger.info("Expired booking sweep stopped")


__all__ = ["run_expiry_loop"]
