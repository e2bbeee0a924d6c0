"""Booking lifecycle: reservation phases and persisted status transitions."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from app.core.exceptions import InvalidState
from app.models.booking import BookingStatus

logger = logging.getLogger(__name__)


class ReservationPhase(str, Enum):
    CREATED = "created"
    VALIDATING = "validating"
    REJECTED = "rejected"
    PRICED = "priced"
    COMMITTED = "committed"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


_PHASE_TRANSITIONS: Dict[ReservationPhase, FrozenSet[ReservationPhase]] = {
    ReservationPhase.CREATED: frozenset({ReservationPhase.VALIDATING}),
    ReservationPhase.VALIDATING: frozenset(
        {ReservationPhase.REJECTED, ReservationPhase.PRICED}
    ),
    # A priced attempt can still lose the race at commit time.
    ReservationPhase.PRICED: frozenset(
        {ReservationPhase.COMMITTED, ReservationPhase.REJECTED}
    ),
    ReservationPhase.COMMITTED: frozenset(
        {ReservationPhase.CONFIRMED, ReservationPhase.CANCELLED}
    ),
    ReservationPhase.CONFIRMED: frozenset({ReservationPhase.CANCELLED}),
    ReservationPhase.REJECTED: frozenset(),
    ReservationPhase.CANCELLED: frozenset(),
}

_STATUS_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset(),
}


class ReservationTrace:
    """Tracks the phases one reservation attempt goes through."""

    def __init__(self, field_id: int, owner_id: int, attempt: int = 1) -> None:
        self.field_id = field_id
        self.owner_id = owner_id
        self.attempt = attempt
        self.phase = ReservationPhase.CREATED
        self.history: List[ReservationPhase] = [ReservationPhase.CREATED]

    def advance(self, target: ReservationPhase) -> None:
        allowed = _PHASE_TRANSITIONS[self.phase]
        if target not in allowed:
            raise InvalidState(
                f"Cannot move reservation from {self.phase.value} to {target.value}"
            )
        logger.debug(
            "Reservation field=%s owner=%s attempt=%s: %s -> %s",
            self.field_id,
            self.owner_id,
            self.attempt,
            self.phase.value,
            target.value,
        )
        self.phase = target
        self.history.append(target)

    @property
    def is_terminal(self) -> bool:
        return not _PHASE_TRANSITIONS[self.phase]


def parse_status(value: Optional[str]) -> BookingStatus:
    try:
        return BookingStatus((value or "").strip().lower())
    except ValueError as exc:
        raise InvalidState(f"Unknown booking status: {value}") from exc


def ensure_transition(current: BookingStatus, target: BookingStatus) -> None:
    """Raise :class:`InvalidState` unless ``current -> target`` is allowed."""

    if target not in _STATUS_TRANSITIONS[current]:
        raise InvalidState(
            f"Booking cannot move from {current.value} to {target.value}"
        )


__all__ = [
    "ReservationPhase",
    "ReservationTrace",
    "ensure_transition",
    "parse_status",
]
