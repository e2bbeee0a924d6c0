from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from sqlalchemy.orm import Session

from app.models.schedule_block import ScheduleBlock


def get_block(db: Session, block_id: int, *, for_update: bool = False) -> Optional[ScheduleBlock]:
    query = db.query(ScheduleBlock).filter(ScheduleBlock.id_block == block_id)
    if for_update:
        query = query.with_for_update()
    return query.first()


def list_blocks(
    db: Session,
    *,
    field_id: int,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
) -> list[ScheduleBlock]:
    """Return the blocks of a field overlapping the optional range."""

    query = db.query(ScheduleBlock).filter(ScheduleBlock.id_field == field_id)

    if end_time is not None:
        query = query.filter(ScheduleBlock.start_time < end_time)
    if start_time is not None:
        query = query.filter(ScheduleBlock.end_time > start_time)

    return query.order_by(ScheduleBlock.start_time, ScheduleBlock.id_block).all()


def add_block(db: Session, block_data: Dict[str, object]) -> ScheduleBlock:
    block = ScheduleBlock(**block_data)
    db.add(block)
    db.flush()
    return block


def delete_block(db: Session, block: ScheduleBlock) -> None:
    db.delete(block)
    db.flush()


__all__ = ["add_block", "delete_block", "get_block", "list_blocks"]
