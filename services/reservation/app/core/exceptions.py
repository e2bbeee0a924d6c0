"""Typed errors raised by the booking and schedule conflict engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from fastapi import status

if TYPE_CHECKING:  # pragma: no cover - typing only
    from app.services.intervals import Interval


class ReservationError(Exception):
    """Base class for errors surfaced to callers of the reservation engine."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"
    default_message: str = "Reservation error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code}


class InvalidInterval(ReservationError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_INTERVAL"
    default_message = "end_time must be after start_time"


class SlotUnavailable(ReservationError):
    """The requested interval overlaps a live booking or a schedule block."""

    status_code = status.HTTP_409_CONFLICT
    code = "SLOT_UNAVAILABLE"
    default_message = "The selected time slot is no longer available"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        conflicts: Sequence["Interval"] = (),
    ) -> None:
        super().__init__(message)
        self.conflicts: List["Interval"] = list(conflicts)

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["conflicts"] = [
            {
                "start_time": conflict.start.isoformat(),
                "end_time": conflict.end.isoformat(),
                "kind": conflict.kind,
                "source_id": conflict.source_id,
            }
            for conflict in self.conflicts
        ]
        return payload


class TransientStoreError(ReservationError):
    """Timeout or serialization failure; the whole operation may be retried."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "TRANSIENT_STORE_ERROR"
    default_message = "The reservation store is busy, please retry"


class NotFound(ReservationError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Resource not found"


class InvalidState(ReservationError):
    status_code = status.HTTP_409_CONFLICT
    code = "INVALID_STATE"
    default_message = "Operation not allowed in the current booking state"


__all__ = [
    "ReservationError",
    "InvalidInterval",
    "SlotUnavailable",
    "TransientStoreError",
    "NotFound",
    "InvalidState",
]
