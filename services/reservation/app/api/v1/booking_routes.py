"""API routes for reserving, confirming and cancelling bookings."""

from fastapi import APIRouter, BackgroundTasks, Depends, status

from app.core.security import get_current_owner_id, get_current_user
from app.dependencies import get_coordinator, get_notification_client
from app.schemas.booking import BookingCreate, BookingResponse
from app.services.booking_coordinator import BookingCoordinator
from app.services.notification_client import NotificationClient

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def reserve(
    payload: BookingCreate,
    owner_id: int = Depends(get_current_owner_id),
    coordinator: BookingCoordinator = Depends(get_coordinator),
) -> BookingResponse:
    """Reserve a field interval for the authenticated user as a pending booking."""

    return coordinator.reserve(
        payload.id_field,
        payload.start_time,
        payload.end_time,
        owner_id,
    )


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: int,
    _: dict = Depends(get_current_user),
    coordinator: BookingCoordinator = Depends(get_coordinator),
) -> BookingResponse:
    """Retrieve a booking by its identifier."""

    return coordinator.get_booking(booking_id)


@router.post("/{booking_id}/confirm", response_model=BookingResponse)
def confirm_booking(
    booking_id: int,
    background_tasks: BackgroundTasks,
    _: dict = Depends(get_current_user),
    coordinator: BookingCoordinator = Depends(get_coordinator),
    notifications: NotificationClient = Depends(get_notification_client),
) -> BookingResponse:
    """Mark a pending booking as paid. Repeated calls return the same booking."""

    booking = coordinator.confirm(booking_id)
    background_tasks.add_task(notifications.send_booking_event, "booking.confirmed", booking)
    return booking


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: int,
    background_tasks: BackgroundTasks,
    _: dict = Depends(get_current_user),
    coordinator: BookingCoordinator = Depends(get_coordinator),
    notifications: NotificationClient = Depends(get_notification_client),
) -> BookingResponse:
    """Cancel a booking and release its time slot."""

    booking = coordinator.cancel(booking_id)
    background_tasks.add_task(notifications.send_booking_event, "booking.cancelled", booking)
    return booking
