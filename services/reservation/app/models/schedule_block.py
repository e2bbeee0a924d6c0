from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Text, func

from app.core.database import Base, IdType, UTCDateTime


class ScheduleBlock(Base):
    """Manager-declared window in which a field cannot be booked."""

    __tablename__ = "schedule_block"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_schedule_block_interval"),
        Index("ix_schedule_block_field_start", "id_field", "start_time"),
    )

    id_block = Column(IdType, primary_key=True, index=True)
    id_field = Column(IdType, ForeignKey("field.id_field"), nullable=False)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)
    reason = Column(Text, nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, server_default=func.now())

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return (
            "<ScheduleBlock(id_block={id}, start_time={start}, end_time={end})>"
        ).format(id=self.id_block, start=self.start_time, end=self.end_time)
