"""Pydantic schemas for the reservation service."""

from app.schemas.availability import AvailabilityResponse, IntervalResponse, QuoteResponse
from app.schemas.booking import BookingCreate, BookingResponse
from app.schemas.schedule_block import ScheduleBlockCreate, ScheduleBlockResponse

__all__ = [
    "AvailabilityResponse",
    "BookingCreate",
    "BookingResponse",
    "IntervalResponse",
    "QuoteResponse",
    "ScheduleBlockCreate",
    "ScheduleBlockResponse",
]
