"""ORM model exposing the sports field data read by the reservation engine."""

from sqlalchemy import Column, Numeric, String, Time

from app.core.database import Base, IdType


class Field(Base):
    """A bookable field. Owned by the booking service, read-only here."""

    __tablename__ = "field"

    id_field = Column(IdType, primary_key=True, index=True)
    field_name = Column(String(200), nullable=False)
    price_per_hour = Column(Numeric(10, 2), nullable=False)
    timezone = Column(String(64), nullable=False, default="UTC")
    # Both null means the field has no operating-hours restriction.
    open_time = Column(Time, nullable=True)
    close_time = Column(Time, nullable=True)
    status = Column(String(100), nullable=False, default="active")

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<Field(id_field={self.id_field}, name={self.field_name})>"


__all__ = ["Field"]
