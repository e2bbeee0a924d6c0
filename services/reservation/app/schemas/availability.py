"""Schemas for availability checks and price quotes."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class IntervalResponse(BaseModel):
    start_time: datetime
    end_time: datetime
    kind: Optional[str] = None
    source_id: Optional[int] = None


class AvailabilityResponse(BaseModel):
    available: bool
    conflicts: List[IntervalResponse]


class QuoteResponse(BaseModel):
    total_price: Decimal
    base_price: Decimal
    id_promotion: Optional[int] = None
