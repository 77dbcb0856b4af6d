"""Backup artifact bookkeeping."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from glycotrack.models.base import Base, utcnow


class BackupStatus(str, enum.Enum):
    """Lifecycle state of a backup artifact."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Backup(Base):
    """A point-in-time JSON export of one user's data.

    Failed exports are recorded too, without a file path or size.
    """

    __tablename__ = "backups"

    __table_args__ = (Index("ix_backups_user_status", "user_id", "status"),)

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

    filename: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    file_path: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    # Size of the written document in bytes
    file_size: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )

    status: Mapped[BackupStatus] = mapped_column(
        Enum(
            BackupStatus,
            name="backupstatus",
            native_enum=False,
            length=16,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=BackupStatus.PENDING,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    user = relationship("User", back_populates="backups")

    def __repr__(self) -> str:
        return f"<Backup(user_id={self.user_id}, status={self.status.value})>"
