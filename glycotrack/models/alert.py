"""Alert model.

Alerts are appended by the threshold evaluator when a glucose record falls
outside the user's target range. After creation only ``read`` changes.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from glycotrack.models.base import Base, utcnow


class AlertType(str, enum.Enum):
    """Type of alert triggered."""

    LOW_GLUCOSE = "low_glucose"
    HIGH_GLUCOSE = "high_glucose"
    MISSED_MEASUREMENT = "missed_measurement"
    MEDICATION_REMINDER = "medication_reminder"


class Alert(Base):
    """Stores alerts shown in the user's alert feed."""

    __tablename__ = "alerts"

    __table_args__ = (
        Index("ix_alerts_user_type", "user_id", "type"),
        Index("ix_alerts_user_read", "user_id", "read"),
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

    alert_type: Mapped[AlertType] = mapped_column(
        "type",
        Enum(
            AlertType,
            name="alerttype",
            native_enum=False,
            length=32,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    message: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    # Glucose value (mg/dL) that triggered the alert, if any
    glucose_value: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )

    read: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    user = relationship("User", back_populates="alerts")

    def __repr__(self) -> str:
        return (
            f"<Alert(type={self.alert_type.value}, "
            f"value={self.glucose_value}, read={self.read})>"
        )
