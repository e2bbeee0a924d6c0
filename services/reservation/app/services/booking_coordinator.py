"""Booking coordinator: validation, conflict detection, pricing and commit.

Every operation runs in its own store transaction. Writers of one field are
serialized by locking the field row (and, on SQLite, by ``BEGIN IMMEDIATE``),
so the timeline read for conflict detection is the one the insert commits
against. A commit-time race is retried exactly once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Mapping, Optional, Sequence, TypeVar

from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    OperationalError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.orm import Session

from app.core.config import merge_options, settings
from app.core.database import Database
from app.core.exceptions import (
    InvalidInterval,
    NotFound,
    SlotUnavailable,
    TransientStoreError,
)
from app.models.booking import Booking, BookingStatus
from app.models.field import Field
from app.models.schedule_block import ScheduleBlock
from app.repository import (
    booking_repository,
    field_repository,
    promotion_repository,
    schedule_block_repository,
)
from app.services import conflict_detector, pricing_resolver
from app.services.booking_state import (
    ReservationPhase,
    ReservationTrace,
    ensure_transition,
    parse_status,
)
from app.services.intervals import (
    Interval,
    ensure_within_operating_hours,
    field_zone,
    normalize,
    to_utc,
    validate_bounds,
)
from app.services.pricing_resolver import Quote

logger = logging.getLogger(__name__)

T = TypeVar("T")

# PostgreSQL SQLSTATEs for serialization failure and deadlock.
_SERIALIZATION_SQLSTATES = frozenset({"40001", "40P01"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Availability:
    available: bool
    conflicts: List[Interval] = field(default_factory=list)


class _CommitRace(Exception):
    """Internal marker: the store rejected a write that passed detection."""

    def __init__(self, cause: Exception, *, serialization: bool) -> None:
        super().__init__(str(cause))
        self.cause = cause
        self.serialization = serialization


def _sqlstate(exc: OperationalError) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


class BookingCoordinator:
    """Entry point for availability, pricing and booking lifecycle operations."""

    def __init__(
        self,
        database: Database,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.database = database
        self.clock = clock or _utcnow
        self.options = merge_options(settings.coordinator_options(), options)

    @property
    def _conflict_window(self) -> timedelta:
        return timedelta(hours=self.options["conflict_window_hours"] or 0)

    @property
    def _payment_deadline(self) -> Optional[timedelta]:
        minutes = self.options["payment_deadline_minutes"]
        if minutes is None:
            return None
        return timedelta(minutes=minutes)

    def _now(self) -> datetime:
        now = self.clock()
        if now.tzinfo is None:
            return now.replace(tzinfo=timezone.utc)
        return now.astimezone(timezone.utc)

    @staticmethod
    def _require_field(db: Session, field_id: int, *, for_update: bool = False) -> Field:
        field_row = field_repository.get_field(db, field_id, for_update=for_update)
        if field_row is None:
            raise NotFound("Field not found")
        return field_row

    @staticmethod
    def _require_booking(db: Session, booking_id: int) -> Booking:
        booking = booking_repository.get_booking(db, booking_id, for_update=True)
        if booking is None:
            raise NotFound("Booking not found")
        return booking

    def _field_interval(self, field_row: Field, start: datetime, end: datetime) -> Interval:
        return normalize(start, end, field_zone(field_row.timezone))

    def _load_timeline(self, db: Session, field_id: int, interval: Interval):
        window = interval.widened(self._conflict_window)
        bookings = booking_repository.list_live_bookings_in_range(
            db,
            field_id=field_id,
            start_time=window.start,
            end_time=window.end,
        )
        blocks = schedule_block_repository.list_blocks(
            db,
            field_id=field_id,
            start_time=window.start,
            end_time=window.end,
        )
        return bookings, blocks

    def _run(self, operation: Callable[[Session], T], *, description: str) -> T:
        """Run ``operation`` in one transaction, translating store failures."""

        try:
            with self.database.transaction() as db:
                return operation(db)
        except IntegrityError as exc:
            raise _CommitRace(exc, serialization=False) from exc
        except OperationalError as exc:
            if _sqlstate(exc) in _SERIALIZATION_SQLSTATES:
                raise _CommitRace(exc, serialization=True) from exc
            logger.warning("Store failure during %s: %s", description, exc)
            raise TransientStoreError() from exc
        except PoolTimeoutError as exc:
            logger.warning("Store connection timeout during %s: %s", description, exc)
            raise TransientStoreError() from exc
        except DBAPIError as exc:
            logger.warning("Store error during %s: %s", description, exc)
            raise TransientStoreError() from exc

    def _run_with_race_retry(
        self,
        operation: Callable[[Session, int], T],
        *,
        description: str,
    ) -> T:
        """Run ``operation`` and retry it once if the commit loses a race."""

        try:
            return self._run(lambda db: operation(db, 1), description=description)
        except _CommitRace as first:
            logger.warning("Commit race during %s, retrying once: %s", description, first)

        try:
            return self._run(lambda db: operation(db, 2), description=description)
        except _CommitRace as second:
            if second.serialization:
                raise TransientStoreError() from second.cause
            raise SlotUnavailable() from second.cause

    def check_availability(self, field_id: int, start: datetime, end: datetime) -> Availability:
        validate_bounds(start, end)

        def _check(db: Session) -> Availability:
            field_row = self._require_field(db, field_id)
            interval = self._field_interval(field_row, start, end)
            bookings, blocks = self._load_timeline(db, field_id, interval)
            result = conflict_detector.detect(field_id, interval, bookings, blocks)
            return Availability(
                available=not result.conflict,
                conflicts=result.conflicting_intervals,
            )

        return self._run_once(_check, description="check_availability")

    def quote_price(self, field_id: int, start: datetime, end: datetime) -> Quote:
        validate_bounds(start, end)

        def _quote(db: Session) -> Quote:
            field_row = self._require_field(db, field_id)
            interval = self._field_interval(field_row, start, end)
            return self._price(db, field_row, interval)

        return self._run_once(_quote, description="quote_price")

    def get_booking(self, booking_id: int) -> Booking:
        def _get(db: Session) -> Booking:
            booking = booking_repository.get_booking(db, booking_id)
            if booking is None:
                raise NotFound("Booking not found")
            return booking

        return self._run_once(_get, description="get_booking")

    def list_bookings(
        self,
        field_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        *,
        status_filter: Optional[Sequence[str]] = None,
    ) -> List[Booking]:
        if start is not None and end is not None:
            validate_bounds(start, end)

        def _list(db: Session) -> List[Booking]:
            field_row = self._require_field(db, field_id)
            zone = field_zone(field_row.timezone)
            return booking_repository.list_bookings(
                db,
                field_id=field_id,
                start_time=to_utc(start, zone) if start is not None else None,
                end_time=to_utc(end, zone) if end is not None else None,
                status_filter=status_filter,
            )

        return self._run_once(_list, description="list_bookings")

    def list_schedule_blocks(
        self,
        field_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[ScheduleBlock]:
        if start is not None and end is not None:
            validate_bounds(start, end)

        def _list(db: Session) -> List[ScheduleBlock]:
            field_row = self._require_field(db, field_id)
            zone = field_zone(field_row.timezone)
            return schedule_block_repository.list_blocks(
                db,
                field_id=field_id,
                start_time=to_utc(start, zone) if start is not None else None,
                end_time=to_utc(end, zone) if end is not None else None,
            )

        return self._run_once(_list, description="list_schedule_blocks")

    def _run_once(self, operation: Callable[[Session], T], *, description: str) -> T:
        try:
            return self._run(operation, description=description)
        except _CommitRace as exc:
            raise TransientStoreError() from exc.cause

    def _price(self, db: Session, field_row: Field, interval: Interval) -> Quote:
        promotions = promotion_repository.list_active_promotions(
            db,
            field_id=field_row.id_field,
            start_time=interval.start,
            end_time=interval.end,
        )
        return pricing_resolver.quote(field_row, interval, promotions)

    def reserve(
        self,
        field_id: int,
        start: datetime,
        end: datetime,
        owner_id: int,
    ) -> Booking:
        """Create a ``pending`` booking or raise a typed reservation error."""

        validate_bounds(start, end)

        def _attempt(db: Session, attempt: int) -> Booking:
            trace = ReservationTrace(field_id, owner_id, attempt)
            trace.advance(ReservationPhase.VALIDATING)
            try:
                field_row = self._require_field(db, field_id, for_update=True)
                interval = self._field_interval(field_row, start, end)
                ensure_within_operating_hours(
                    interval,
                    open_time=field_row.open_time,
                    close_time=field_row.close_time,
                    zone=field_zone(field_row.timezone),
                )

                bookings, blocks = self._load_timeline(db, field_id, interval)
                result = conflict_detector.detect(field_id, interval, bookings, blocks)
                if result.conflict:
                    raise SlotUnavailable(conflicts=result.conflicting_intervals)
            except (InvalidInterval, NotFound, SlotUnavailable) as exc:
                trace.advance(ReservationPhase.REJECTED)
                logger.info(
                    "Reservation rejected for field %s owner %s: %s",
                    field_id,
                    owner_id,
                    exc,
                )
                raise

            price = self._price(db, field_row, interval)
            trace.advance(ReservationPhase.PRICED)

            now = self._now()
            deadline = self._payment_deadline
            try:
                booking = booking_repository.add_booking(
                    db,
                    {
                        "id_field": field_id,
                        "id_owner": owner_id,
                        "start_time": interval.start,
                        "end_time": interval.end,
                        "status": BookingStatus.PENDING.value,
                        "base_price": price.base_price,
                        "total_price": price.total_price,
                        "id_promotion": price.applied_promotion_id,
                        "payment_deadline": now + deadline if deadline is not None else None,
                        "created_at": now,
                        "updated_at": now,
                    },
                )
            except (IntegrityError, OperationalError):
                trace.advance(ReservationPhase.REJECTED)
                raise

            trace.advance(ReservationPhase.COMMITTED)
            logger.info(
                "Booking %s reserved on field %s for owner %s (%s - %s, total %s)",
                booking.id_booking,
                field_id,
                owner_id,
                interval.start,
                interval.end,
                price.total_price,
            )
            return booking

        return self._run_with_race_retry(_attempt, description="reserve")

    def confirm(self, booking_id: int) -> Booking:
        """Move a pending booking to ``confirmed``. Confirming twice is a no-op."""

        def _confirm(db: Session) -> Booking:
            booking = self._require_booking(db, booking_id)
            current = parse_status(booking.status)
            if current is BookingStatus.CONFIRMED:
                return booking

            ensure_transition(current, BookingStatus.CONFIRMED)
            now = self._now()
            booking.status = BookingStatus.CONFIRMED.value
            booking.confirmed_at = now
            booking.updated_at = now
            booking_repository.save_booking(db, booking)
            logger.info("Booking %s confirmed", booking_id)
            return booking

        return self._run_once(_confirm, description="confirm")

    def cancel(self, booking_id: int) -> Booking:
        """Cancel a booking and free its interval. Cancelling twice is a no-op."""

        def _cancel(db: Session) -> Booking:
            booking = self._require_booking(db, booking_id)
            current = parse_status(booking.status)
            if current is BookingStatus.CANCELLED:
                return booking

            ensure_transition(current, BookingStatus.CANCELLED)
            self._mark_cancelled(booking)
            booking_repository.save_booking(db, booking)
            logger.info("Booking %s cancelled (was %s)", booking_id, current.value)
            return booking

        return self._run_once(_cancel, description="cancel")

    def _mark_cancelled(self, booking: Booking) -> None:
        now = self._now()
        booking.status = BookingStatus.CANCELLED.value
        booking.cancelled_at = now
        booking.updated_at = now

    def expire_pending_bookings(self, now: Optional[datetime] = None) -> int:
        """Cancel pending bookings whose payment deadline has passed."""

        cutoff = now or self._now()

        def _expire(db: Session) -> int:
            expired = booking_repository.list_expired_pending_bookings(db, now=cutoff)
            for booking in expired:
                self._mark_cancelled(booking)
                booking_repository.save_booking(db, booking)
            return len(expired)

        count = self._run_once(_expire, description="expire_pending_bookings")
        if count:
            logger.info("Cancelled %s expired pending booking(s)", count)
        return count

    def add_schedule_block(
        self,
        field_id: int,
        start: datetime,
        end: datetime,
        reason: str,
        note: Optional[str] = None,
    ) -> ScheduleBlock:
        """Declare the field unavailable over ``[start, end)``.

        Fails with :class:`SlotUnavailable` when the window overlaps a live
        booking or another block.
        """

        validate_bounds(start, end)

        def _attempt(db: Session, attempt: int) -> ScheduleBlock:
            field_row = self._require_field(db, field_id, for_update=True)
            interval = self._field_interval(field_row, start, end)

            bookings, blocks = self._load_timeline(db, field_id, interval)
            result = conflict_detector.detect(field_id, interval, bookings, blocks)
            if result.conflict:
                logger.info(
                    "Schedule block rejected for field %s: %s conflict(s)",
                    field_id,
                    len(result.conflicting_intervals),
                )
                raise SlotUnavailable(
                    "The block overlaps existing bookings or blocks",
                    conflicts=result.conflicting_intervals,
                )

            block = schedule_block_repository.add_block(
                db,
                {
                    "id_field": field_id,
                    "start_time": interval.start,
                    "end_time": interval.end,
                    "reason": reason,
                    "note": note,
                    "created_at": self._now(),
                },
            )
            logger.info(
                "Schedule block %s added on field %s (%s - %s, attempt %s)",
                block.id_block,
                field_id,
                interval.start,
                interval.end,
                attempt,
            )
            return block

        return self._run_with_race_retry(_attempt, description="add_schedule_block")

    def remove_schedule_block(self, block_id: int) -> None:
        def _remove(db: Session) -> None:
            block = schedule_block_repository.get_block(db, block_id, for_update=True)
            if block is None:
                raise NotFound("Schedule block not found")
            # Lock the field so removal is ordered with concurrent writers.
            self._require_field(db, block.id_field, for_update=True)
            schedule_block_repository.delete_block(db, block)
            logger.info("Schedule block %s removed from field %s", block_id, block.id_field)

        self._run_once(_remove, description="remove_schedule_block")


__all__ = ["Availability", "BookingCoordinator"]
