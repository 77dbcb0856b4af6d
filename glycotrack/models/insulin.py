"""Insulin dose model."""

import enum
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import (
    Date,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from glycotrack.models.base import Base, TimestampMixin

INSULIN_MIN_UNITS = Decimal("0.1")
INSULIN_MAX_UNITS = Decimal("100")


class InsulinPeriod(str, enum.Enum):
    """Meal/time slot an insulin dose was taken in."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    BEDTIME = "bedtime"


class InsulinType(str, enum.Enum):
    """Kind of insulin administered."""

    RAPID = "rapid"
    LONG = "long"
    MIXED = "mixed"
    OTHER = "other"


LEGACY_INSULIN_PERIOD_MAP = {
    "cafe": InsulinPeriod.BREAKFAST,
    "almoco": InsulinPeriod.LUNCH,
    "jantar": InsulinPeriod.DINNER,
    "deitar": InsulinPeriod.BEDTIME,
}


class InsulinRecord(Base, TimestampMixin):
    """A single insulin dose, unique per (user, date, period)."""

    __tablename__ = "insulin_records"

    __table_args__ = (
        UniqueConstraint(
            "user_id", "date", "period", name="uq_insulin_records_user_date_period"
        ),
        Index("ix_insulin_records_user_date", "user_id", "date"),
        Index("ix_insulin_records_user_period", "user_id", "period"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    record_date: Mapped[date] = mapped_column(
        "date",
        Date,
        nullable=False,
    )

    period: Mapped[InsulinPeriod] = mapped_column(
        Enum(
            InsulinPeriod,
            name="insulinperiod",
            native_enum=False,
            length=32,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
    )

    insulin_type: Mapped[InsulinType] = mapped_column(
        Enum(
            InsulinType,
            name="insulintype",
            native_enum=False,
            length=32,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=InsulinType.RAPID,
    )

    # Units administered, stored with two decimal places
    units: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
    )

    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    user = relationship("User", back_populates="insulin_records")

    def __repr__(self) -> str:
        return (
            f"<InsulinRecord(user_id={self.user_id}, date={self.record_date}, "
            f"period={self.period.value}, units={self.units})>"
        )
