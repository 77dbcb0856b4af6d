"""User account and profile model.

The core reads the target glucose range from here; everything else on the
profile belongs to the auth/profile endpoints.
"""

import enum
import uuid
from datetime import date

from sqlalchemy import Date, Enum, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from glycotrack.models.base import Base, TimestampMixin

DEFAULT_TARGET_GLUCOSE_MIN = 70
DEFAULT_TARGET_GLUCOSE_MAX = 180


class DiabetesType(str, enum.Enum):
    """Diagnosed diabetes type."""

    TYPE1 = "type1"
    TYPE2 = "type2"
    GESTATIONAL = "gestational"
    OTHER = "other"


class User(Base, TimestampMixin):
    """User account model.

    Attributes:
        id: Unique user identifier (UUID)
        name: Display name
        email: User's email address (unique, used for login)
        hashed_password: Bcrypt-hashed password
        diabetes_type: Diagnosed diabetes type
        date_of_birth: Optional birth date
        diagnosis_date: Optional diagnosis date
        target_glucose_min: Lower bound of the target range (mg/dL)
        target_glucose_max: Upper bound of the target range (mg/dL)
        is_active: False once the account is soft-deleted
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    diabetes_type: Mapped[DiabetesType] = mapped_column(
        Enum(
            DiabetesType,
            name="diabetestype",
            native_enum=False,
            length=32,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=DiabetesType.TYPE1,
    )
    date_of_birth: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )
    diagnosis_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )
    target_glucose_min: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=DEFAULT_TARGET_GLUCOSE_MIN,
    )
    target_glucose_max: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=DEFAULT_TARGET_GLUCOSE_MAX,
    )
    is_active: Mapped[bool] = mapped_column(
        default=True,
    )

    # Relationships
    glucose_records = relationship(
        "GlucoseRecord",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    insulin_records = relationship(
        "InsulinRecord",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    alerts = relationship(
        "Alert",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    settings = relationship(
        "UserSettings",
        back_populates="user",
        cascade="all, delete-orphan",
        uselist=False,
    )
    backups = relationship(
        "Backup",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.diabetes_type.value})>"
