"""Glucose record model.

One finger-stick (or manually entered) glucose value per user, date and
meal/time slot.
"""

import enum
import uuid
from datetime import date

from sqlalchemy import (
    Date,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from glycotrack.models.base import Base, TimestampMixin

GLUCOSE_MIN_VALUE = 20
GLUCOSE_MAX_VALUE = 600
NOTES_MAX_LENGTH = 500


class GlucosePeriod(str, enum.Enum):
    """Meal/time slot a glucose value was taken in."""

    FASTING = "fasting"
    BEFORE_BREAKFAST = "before_breakfast"
    AFTER_BREAKFAST = "after_breakfast"
    BEFORE_LUNCH = "before_lunch"
    AFTER_LUNCH = "after_lunch"
    BEFORE_DINNER = "before_dinner"
    AFTER_DINNER = "after_dinner"
    BEDTIME = "bedtime"


# Slot names written by older exports, accepted on restore
LEGACY_GLUCOSE_PERIOD_MAP = {
    "jejum": GlucosePeriod.FASTING,
    "cafe_antes": GlucosePeriod.BEFORE_BREAKFAST,
    "cafe_depois": GlucosePeriod.AFTER_BREAKFAST,
    "almoco_antes": GlucosePeriod.BEFORE_LUNCH,
    "almoco_depois": GlucosePeriod.AFTER_LUNCH,
    "jantar_antes": GlucosePeriod.BEFORE_DINNER,
    "jantar_depois": GlucosePeriod.AFTER_DINNER,
    "deitar": GlucosePeriod.BEDTIME,
}


class GlucoseRecord(Base, TimestampMixin):
    """A single glucose measurement.

    At most one record exists per (user, date, period). Only the value and
    notes may change after creation.
    """

    __tablename__ = "glucose_records"

    __table_args__ = (
        UniqueConstraint(
            "user_id", "date", "period", name="uq_glucose_records_user_date_period"
        ),
        Index("ix_glucose_records_user_date", "user_id", "date"),
        Index("ix_glucose_records_user_period", "user_id", "period"),
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

    # Calendar day of the measurement; column is "date" in storage and exports
    record_date: Mapped[date] = mapped_column(
        "date",
        Date,
        nullable=False,
    )

    period: Mapped[GlucosePeriod] = mapped_column(
        Enum(
            GlucosePeriod,
            name="glucoseperiod",
            native_enum=False,
            length=32,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
    )

    # Glucose value in mg/dL
    glucose_value: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    user = relationship("User", back_populates="glucose_records")

    def __repr__(self) -> str:
        return (
            f"<GlucoseRecord(user_id={self.user_id}, date={self.record_date}, "
            f"period={self.period.value}, value={self.glucose_value})>"
        )
