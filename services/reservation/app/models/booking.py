"""SQLAlchemy model for a reservation of a field over a half-open interval."""

from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    DDL,
    ForeignKey,
    Index,
    Numeric,
    String,
    event,
    func,
)

from app.core.database import Base, IdType, UTCDateTime


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


LIVE_BOOKING_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)


class Booking(Base):

    __tablename__ = "booking"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_booking_interval"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled')",
            name="ck_booking_status",
        ),
        Index("ix_booking_field_start", "id_field", "start_time"),
    )

    id_booking = Column(IdType, primary_key=True, index=True)
    id_field = Column(IdType, ForeignKey("field.id_field"), nullable=False)
    id_owner = Column(IdType, nullable=False, index=True)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)
    status = Column(String(30), nullable=False, default=BookingStatus.PENDING.value)
    base_price = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    id_promotion = Column(IdType, ForeignKey("promotion.id_promotion"), nullable=True)
    payment_deadline = Column(UTCDateTime, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, server_default=func.now())
    updated_at = Column(UTCDateTime, nullable=True)
    confirmed_at = Column(UTCDateTime, nullable=True)
    cancelled_at = Column(UTCDateTime, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<Booking(id_booking={self.id_booking}, status={self.status}, "
            f"start_time={self.start_time}, end_time={self.end_time})>"
        )


# Native range exclusion on PostgreSQL: live bookings of one field may not
# overlap. Other backends rely on the coordinator's locked check.
event.listen(
    Booking.__table__,
    "after_create",
    DDL(
        "CREATE EXTENSION IF NOT EXISTS btree_gist; "
        "ALTER TABLE booking ADD CONSTRAINT ex_booking_field_overlap "
        "EXCLUDE USING gist (id_field WITH =, "
        "tstzrange(start_time, end_time, '[)') WITH &&) "
        "WHERE (status <> 'cancelled')"
    ).execute_if(dialect="postgresql"),
)


__all__ = ["Booking", "BookingStatus", "LIVE_BOOKING_STATUSES"]
