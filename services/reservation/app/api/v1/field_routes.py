"""Read-only field timeline routes: availability, quotes and bookings."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.dependencies import get_coordinator
from app.schemas.availability import AvailabilityResponse, IntervalResponse, QuoteResponse
from app.schemas.booking import BookingResponse
from app.services.booking_coordinator import BookingCoordinator

router = APIRouter(prefix="/fields", tags=["fields"])


@router.get("/{field_id}/availability", response_model=AvailabilityResponse)
def check_availability(
    field_id: int,
    *,
    start_time: datetime = Query(..., description="Interval start (ISO 8601)"),
    end_time: datetime = Query(..., description="Interval end, exclusive (ISO 8601)"),
    coordinator: BookingCoordinator = Depends(get_coordinator),
) -> AvailabilityResponse:
    """Report whether the interval is free and list every conflicting window."""

    availability = coordinator.check_availability(field_id, start_time, end_time)
    return AvailabilityResponse(
        available=availability.available,
        conflicts=[
            IntervalResponse(
                start_time=conflict.start,
                end_time=conflict.end,
                kind=conflict.kind,
                source_id=conflict.source_id,
            )
            for conflict in availability.conflicts
        ],
    )


@router.get("/{field_id}/quote", response_model=QuoteResponse)
def quote_price(
    field_id: int,
    *,
    start_time: datetime = Query(..., description="Interval start (ISO 8601)"),
    end_time: datetime = Query(..., description="Interval end, exclusive (ISO 8601)"),
    coordinator: BookingCoordinator = Depends(get_coordinator),
) -> QuoteResponse:
    """Price the interval, applying the best active promotion."""

    quote = coordinator.quote_price(field_id, start_time, end_time)
    return QuoteResponse(
        total_price=quote.total_price,
        base_price=quote.base_price,
        id_promotion=quote.applied_promotion_id,
    )


@router.get("/{field_id}/bookings", response_model=List[BookingResponse])
def list_field_bookings(
    field_id: int,
    *,
    start_time: Optional[datetime] = Query(None, description="Range start"),
    end_time: Optional[datetime] = Query(None, description="Range end, exclusive"),
    status: Optional[List[str]] = Query(None, description="Filter bookings by status"),
    coordinator: BookingCoordinator = Depends(get_coordinator),
) -> List[BookingResponse]:
    """Retrieve the bookings of a field overlapping the optional range."""

    return coordinator.list_bookings(
        field_id,
        start_time,
        end_time,
        status_filter=status,
    )
