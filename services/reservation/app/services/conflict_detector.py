"""Pure overlap detection between a proposed interval and a field timeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from app.models.booking import BookingStatus
from app.services.intervals import Interval

logger = logging.getLogger(__name__)

KIND_BOOKING = "booking"
KIND_BLOCK = "block"


@dataclass(frozen=True)
class ConflictResult:
    conflict: bool
    conflicting_intervals: List[Interval] = field(default_factory=list)


def _as_interval(item: Any, *, field_id: int, kind: str, id_attribute: str) -> Optional[Interval]:
    if isinstance(item, Interval):
        return item

    item_field_id = getattr(item, "id_field", None)
    if item_field_id is not None and item_field_id != field_id:
        return None

    status_value = (getattr(item, "status", None) or "").strip().lower()
    if status_value == BookingStatus.CANCELLED.value:
        return None

    return Interval(
        item.start_time,
        item.end_time,
        kind=kind,
        source_id=getattr(item, id_attribute, None),
    )


def detect(
    field_id: int,
    proposed: Interval,
    existing_bookings: Iterable[Any],
    existing_blocks: Iterable[Any],
) -> ConflictResult:
    """Return every existing interval on ``field_id`` overlapping ``proposed``.

    ``existing_bookings`` and ``existing_blocks`` may hold :class:`Interval`
    objects or rows exposing ``start_time``/``end_time``. Rows belonging to
    another field and cancelled bookings are ignored. Conflicts are sorted by
    start time.
    """

    candidates: List[Interval] = []
    for item in existing_bookings:
        interval = _as_interval(
            item, field_id=field_id, kind=KIND_BOOKING, id_attribute="id_booking"
        )
        if interval is not None:
            candidates.append(interval)
    for item in existing_blocks:
        interval = _as_interval(
            item, field_id=field_id, kind=KIND_BLOCK, id_attribute="id_block"
        )
        if interval is not None:
            candidates.append(interval)

    conflicts = sorted(
        (candidate for candidate in candidates if candidate.overlaps(proposed)),
        key=lambda interval: (interval.start, interval.end),
    )

    if conflicts:
        logger.debug(
            "Field %s: %s conflict(s) for %s - %s",
            field_id,
            len(conflicts),
            proposed.start,
            proposed.end,
        )

    return ConflictResult(conflict=bool(conflicts), conflicting_intervals=conflicts)


__all__ = ["ConflictResult", "KIND_BLOCK", "KIND_BOOKING", "detect"]
