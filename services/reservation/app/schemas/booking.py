"""Pydantic schemas for booking resources."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BookingCreate(BaseModel):
    """Schema used when reserving a field interval."""

    id_field: int = Field(..., gt=0)
    start_time: datetime
    end_time: datetime


class BookingResponse(BaseModel):
    """Booking data returned to API clients."""

    id_booking: int
    id_field: int
    id_owner: int
    start_time: datetime
    end_time: datetime
    status: str
    base_price: Decimal
    total_price: Decimal
    id_promotion: Optional[int] = None
    payment_deadline: Optional[datetime] = None
    created_at: datetime
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
