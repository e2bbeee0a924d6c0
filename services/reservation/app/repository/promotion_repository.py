"""Read-only access to promotions administered by field managers."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import true
from sqlalchemy.orm import Session

from app.models.promotion import Promotion


def list_active_promotions(
    db: Session,
    *,
    field_id: int,
    start_time: datetime,
    end_time: datetime,
) -> list[Promotion]:
    """Active promotions of a field whose validity intersects the range."""

    return (
        db.query(Promotion)
        .filter(Promotion.id_field == field_id)
        .filter(Promotion.is_active == true())
        .filter(Promotion.start_date < end_time)
        .filter(Promotion.end_date > start_time)
        .order_by(Promotion.created_at.desc(), Promotion.id_promotion.desc())
        .all()
    )


__all__ = ["list_active_promotions"]
