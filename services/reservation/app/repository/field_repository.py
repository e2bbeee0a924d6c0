"""Read access to fields from the reservation service."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from app.models.field import Field


def get_field(db: Session, field_id: int, *, for_update: bool = False) -> Optional[Field]:
    """Fetch a field, optionally locking its row for the rest of the transaction.

    The lock serializes writers of the same field timeline.
    """

    query = db.query(Field).filter(Field.id_field == field_id)
    if for_update:
        query = query.with_for_update()
    return query.first()


__all__ = ["get_field"]
