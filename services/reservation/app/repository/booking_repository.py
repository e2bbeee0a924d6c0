from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.booking import LIVE_BOOKING_STATUSES, Booking, BookingStatus


def get_booking(db: Session, booking_id: int, *, for_update: bool = False) -> Optional[Booking]:
    query = db.query(Booking).filter(Booking.id_booking == booking_id)
    if for_update:
        query = query.with_for_update()
    return query.first()


def list_live_bookings_in_range(
    db: Session,
    *,
    field_id: int,
    start_time: datetime,
    end_time: datetime,
) -> list[Booking]:
    """Pending and confirmed bookings of a field overlapping the range."""

    return (
        db.query(Booking)
        .filter(Booking.id_field == field_id)
        .filter(Booking.start_time < end_time)
        .filter(Booking.end_time > start_time)
        .filter(func.lower(Booking.status).in_(LIVE_BOOKING_STATUSES))
        .order_by(Booking.start_time)
        .all()
    )


def list_bookings(
    db: Session,
    *,
    field_id: int,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
    status_filter: Optional[Sequence[str]] = None,
) -> list[Booking]:
    query = db.query(Booking).filter(Booking.id_field == field_id)

    if end_time is not None:
        query = query.filter(Booking.start_time < end_time)
    if start_time is not None:
        query = query.filter(Booking.end_time > start_time)

    normalized_statuses = [
        status_value.strip().lower()
        for status_value in (status_filter or ())
        if status_value and status_value.strip()
    ]

    if normalized_statuses:
        query = query.filter(func.lower(Booking.status).in_(normalized_statuses))

    return query.order_by(Booking.start_time, Booking.id_booking).all()


def list_expired_pending_bookings(
    db: Session,
    *,
    now: datetime,
    limit: Optional[int] = None,
) -> list[Booking]:
    query = (
        db.query(Booking)
        .filter(Booking.status == BookingStatus.PENDING.value)
        .filter(Booking.payment_deadline.isnot(None))
        .filter(Booking.payment_deadline <= now)
        .order_by(Booking.payment_deadline)
        .with_for_update()
    )
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def add_booking(db: Session, booking_data: Dict[str, object]) -> Booking:
    """Stage a booking and flush it so store constraints fire immediately."""

    booking = Booking(**booking_data)
    db.add(booking)
    db.flush()
    return booking


def save_booking(db: Session, booking: Booking) -> Booking:
    db.add(booking)
    db.flush()
    return booking


__all__ = [
    "add_booking",
    "get_booking",
    "list_bookings",
    "list_expired_pending_bookings",
    "list_live_bookings_in_range",
    "save_booking",
]
