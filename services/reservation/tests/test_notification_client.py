"""Best-effort booking event delivery."""

import json
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import httpx

from app.services.notification_client import NotificationClient, booking_event_payload


def _booking():
    return SimpleNamespace(
        id_booking=11,
        id_field=3,
        id_owner=7,
        status="confirmed",
        start_time=datetime(2030, 1, 2, 10, tzinfo=timezone.utc),
        end_time=datetime(2030, 1, 2, 11, tzinfo=timezone.utc),
        total_price=Decimal("32.00"),
    )


def test_payload_describes_the_booking():
    payload = booking_event_payload("booking.confirmed", _booking())

    assert payload == {
        "event": "booking.confirmed",
        "booking_id": 11,
        "field_id": 3,
        "owner_id": 7,
        "status": "confirmed",
        "start_time": "2030-01-02T10:00:00+00:00",
        "end_time": "2030-01-02T11:00:00+00:00",
        "total_price": "32.00",
    }


def test_unconfigured_client_skips_delivery():
    client = NotificationClient(base_url="")

    assert client.is_configured is False
    assert client.send_booking_event("booking.confirmed", _booking()) is False


def test_event_is_posted_to_notification_service():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202, json={"accepted": True})

    http = httpx.Client(transport=httpx.MockTransport(handler))
    client = NotificationClient(base_url="http://notifications.local/", client=http)

    assert client.send_booking_event("booking.cancelled", _booking()) is True
    assert len(seen) == 1
    assert seen[0].url.path == "/api/pichangapp/v1/notification/notifications/booking-events"
    assert json.loads(seen[0].content)["event"] == "booking.cancelled"


def test_error_status_is_reported_not_raised():
    http = httpx.Client(
        transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
    )
    client = NotificationClient(base_url="http://notifications.local", client=http)

    assert client.send_booking_event("booking.confirmed", _booking()) is False


def test_unreachable_service_is_reported_not_raised():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    http = httpx.Client(transport=httpx.MockTransport(handler))
    client = NotificationClient(base_url="http://notifications.local", client=http)

    assert client.send_booking_event("booking.confirmed", _booking()) is False
