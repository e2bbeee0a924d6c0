"""Best-effort delivery of booking lifecycle events to the notification service."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.models.booking import Booking

logger = logging.getLogger(__name__)


def booking_event_payload(event: str, booking: Booking) -> Dict[str, Any]:
    return {
        "event": event,
        "booking_id": booking.id_booking,
        "field_id": booking.id_field,
        "owner_id": booking.id_owner,
        "status": booking.status,
        "start_time": booking.start_time.isoformat(),
        "end_time": booking.end_time.isoformat(),
        "total_price": str(booking.total_price),
    }


class NotificationClient:
    """Posts booking events; a missing base URL disables delivery."""

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        configured_base = settings.NOTIFICATION_SERVICE_URL if base_url is None else base_url
        self._base_url = configured_base.rstrip("/") if configured_base else ""
        self._timeout = timeout or settings.NOTIFICATION_SERVICE_TIMEOUT
        self._client = client

    @property
    def is_configured(self) -> bool:
        return bool(self._base_url)

    def send_booking_event(self, event: str, booking: Booking) -> bool:
        """Post a booking lifecycle event. Failures are logged, never raised."""

        if not self.is_configured:
            logger.info("Notification service URL not configured; skipping %s event", event)
            return False

        url = f"{self._base_url}/api/pichangapp/v1/notification/notifications/booking-events"
        payload = booking_event_payload(event, booking)

        try:
            if self._client is not None:
                response = self._client.post(url, json=payload, timeout=self._timeout)
            else:
                response = httpx.post(url, json=payload, timeout=self._timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Notification service returned HTTP %s for booking %s event %s: %s",
                exc.response.status_code,
                booking.id_booking,
                event,
                exc.response.text,
            )
            return False
        except httpx.RequestError as exc:
            logger.warning("Failed to reach notification service: %s", exc)
            return False

        return True


__all__ = ["NotificationClient", "booking_event_payload"]
