"""SQLAlchemy models for the reservation service."""
from app.models.field import Field
from app.models.promotion import DiscountType, Promotion
from app.models.booking import Booking, BookingStatus, LIVE_BOOKING_STATUSES
from app.models.schedule_block import ScheduleBlock

__all__ = [
    "Booking",
    "BookingStatus",
    "DiscountType",
    "Field",
    "LIVE_BOOKING_STATUSES",
    "Promotion",
    "ScheduleBlock",
]
