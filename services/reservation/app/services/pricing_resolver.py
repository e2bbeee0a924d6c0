"""Price resolution for a field interval against overlapping promotions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional, Tuple

from app.models.promotion import DiscountType
from app.services.intervals import Interval

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")
_HUNDRED = Decimal(100)
_ZERO = Decimal(0)
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class Quote:
    total_price: Decimal
    applied_promotion_id: Optional[int]
    base_price: Decimal


def _as_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _round(amount: Decimal) -> Decimal:
    return amount.quantize(_CENTS, rounding=ROUND_HALF_UP)


def _promotion_applies(promotion: Any, interval: Interval) -> bool:
    if not promotion.is_active:
        return False
    validity = Interval(promotion.start_date, promotion.end_date)
    return validity.start < validity.end and validity.overlaps(interval)


def _discounted(raw: Decimal, promotion: Any) -> Decimal:
    value = _as_decimal(promotion.discount_value)
    discount_type = (promotion.discount_type or "").strip().lower()

    if discount_type == DiscountType.PERCENTAGE.value:
        return max(_ZERO, raw * (1 - value / _HUNDRED))
    if discount_type == DiscountType.FIXED_AMOUNT.value:
        return max(_ZERO, raw - value)

    logger.warning(
        "Ignoring promotion %s with unknown discount type %r",
        getattr(promotion, "id_promotion", None),
        promotion.discount_type,
    )
    return raw


def _recency(promotion: Any) -> Tuple[datetime, int]:
    created_at = getattr(promotion, "created_at", None) or _OLDEST
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at, getattr(promotion, "id_promotion", None) or 0


def quote(field: Any, interval: Interval, active_promotions: Iterable[Any]) -> Quote:
    """Price ``interval`` on ``field``, applying at most one promotion.

    The candidate giving the lowest price wins; equal prices go to the most
    recently created promotion. Rounding to cents happens once, on the
    final amounts.
    """

    raw = _as_decimal(field.price_per_hour) * interval.duration_hours

    best_price: Optional[Decimal] = None
    best_promotion: Any = None
    for promotion in active_promotions:
        if not _promotion_applies(promotion, interval):
            continue

        price = _discounted(raw, promotion)
        if (
            best_price is None
            or price < best_price
            or (price == best_price and _recency(promotion) > _recency(best_promotion))
        ):
            best_price = price
            best_promotion = promotion

    if best_promotion is None:
        return Quote(total_price=_round(raw), applied_promotion_id=None, base_price=_round(raw))

    return Quote(
        total_price=_round(best_price),
        applied_promotion_id=best_promotion.id_promotion,
        base_price=_round(raw),
    )


__all__ = ["Quote", "quote"]
