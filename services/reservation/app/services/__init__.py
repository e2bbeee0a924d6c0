"""Domain services for the reservation service."""

from app.services.booking_coordinator import Availability, BookingCoordinator
from app.services.notification_client import NotificationClient

__all__ = ["Availability", "BookingCoordinator", "NotificationClient"]
