# Database Models
from glycotrack.models.alert import Alert, AlertType
from glycotrack.models.backup import Backup, BackupStatus
from glycotrack.models.base import Base, TimestampMixin
from glycotrack.models.glucose import GlucosePeriod, GlucoseRecord
from glycotrack.models.insulin import InsulinPeriod, InsulinRecord, InsulinType
from glycotrack.models.user import DiabetesType, User
from glycotrack.models.user_settings import UserSettings

__all__ = [
    "Alert",
    "AlertType",
    "Backup",
    "BackupStatus",
    "Base",
    "DiabetesType",
    "GlucosePeriod",
    "GlucoseRecord",
    "InsulinPeriod",
    "InsulinRecord",
    "InsulinType",
    "TimestampMixin",
    "User",
    "UserSettings",
]
