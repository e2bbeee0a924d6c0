"""Promotions attached to a field. Administered by managers elsewhere."""

from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Numeric,
    String,
    Text,
    func,
)

from app.core.database import Base, IdType, UTCDateTime


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


class Promotion(Base):

    __tablename__ = "promotion"
    __table_args__ = (
        CheckConstraint(
            "discount_type IN ('percentage', 'fixed_amount')",
            name="ck_promotion_discount_type",
        ),
        CheckConstraint("discount_value >= 0", name="ck_promotion_discount_value"),
        CheckConstraint(
            "discount_type <> 'percentage' OR discount_value <= 100",
            name="ck_promotion_percentage_max",
        ),
    )

    id_promotion = Column(IdType, primary_key=True, index=True)
    id_field = Column(IdType, ForeignKey("field.id_field"), nullable=False, index=True)
    title = Column(String(200), nullable=False, default="")
    description = Column(Text, nullable=True)
    discount_type = Column(String(20), nullable=False)
    discount_value = Column(Numeric(10, 2), nullable=False)
    start_date = Column(UTCDateTime, nullable=False)
    end_date = Column(UTCDateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, nullable=False, server_default=func.now())

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return (
            f"<Promotion(id_promotion={self.id_promotion}, "
            f"type={self.discount_type}, value={self.discount_value})>"
        )


__all__ = ["DiscountType", "Promotion"]
