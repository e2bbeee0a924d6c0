"""Shared dependencies for the reservation service."""

from fastapi import Request

from app.core.database import Database
from app.services.booking_coordinator import BookingCoordinator
from app.services.notification_client import NotificationClient


def get_database(request: Request) -> Database:
    """Return the store handle opened by the application lifespan."""

    return request.app.state.database


def get_coordinator(request: Request) -> BookingCoordinator:
    return BookingCoordinator(
        get_database(request),
        clock=getattr(request.app.state, "clock", None),
    )


def get_notification_client(request: Request) -> NotificationClient:
    return request.app.state.notification_client
