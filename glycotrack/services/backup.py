"""Backup and restore of a user's complete data set.

Export gathers profile, measurements, settings and alerts concurrently and
writes them as one JSON document. Restore replaces the user's records from
such a document inside a single transaction.
"""

import asyncio
import json
import time
import uuid
import weakref
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from glycotrack.config import settings
from glycotrack.core.errors import (
    NotFoundError,
    PersistenceError,
    ProvenanceError,
    ValidationError,
)
from glycotrack.database import Database
from glycotrack.logging_config import get_logger
from glycotrack.models.alert import Alert, AlertType
from glycotrack.models.backup import Backup, BackupStatus
from glycotrack.models.base import utcnow
from glycotrack.models.glucose import (
    GLUCOSE_MAX_VALUE,
    GLUCOSE_MIN_VALUE,
    LEGACY_GLUCOSE_PERIOD_MAP,
    NOTES_MAX_LENGTH,
    GlucosePeriod,
    GlucoseRecord,
)
from glycotrack.models.insulin import (
    INSULIN_MAX_UNITS,
    INSULIN_MIN_UNITS,
    LEGACY_INSULIN_PERIOD_MAP,
    InsulinPeriod,
    InsulinRecord,
    InsulinType,
)
from glycotrack.models.user import (
    DEFAULT_TARGET_GLUCOSE_MAX,
    DEFAULT_TARGET_GLUCOSE_MIN,
    DiabetesType,
    User,
)
from glycotrack.models.user_settings import UserSettings
from glycotrack.schemas.backup import BackupDocument
from glycotrack.services.measurement_store import run_in_transaction
from glycotrack.services.user_settings import SETTINGS_FIELDS

logger = get_logger(__name__)

EnumT = TypeVar("EnumT", bound=Enum)

BACKUP_NOT_FOUND = "Backup not found"

_restore_locks: "weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock]" = (
    weakref.WeakValueDictionary()
)


@dataclass
class RestoreSummary:
    glucose_records: int
    insulin_records: int
    settings_restored: bool
    alerts_restored: int


@dataclass
class ParsedBackup:
    """Backup contents converted to unsaved ORM rows."""

    glucose_records: list[GlucoseRecord]
    insulin_records: list[InsulinRecord]
    settings: UserSettings | None
    alerts: list[Alert]
    profile: dict[str, Any]


# ============================================================================
# Serialization
# ============================================================================


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _units(value: Decimal | float | str) -> str:
    return str(Decimal(str(value)).quantize(Decimal("0.01")))


def serialize_user(user: User) -> dict[str, Any]:
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "diabetes_type": user.diabetes_type.value,
        "date_of_birth": _iso(user.date_of_birth),
        "diagnosis_date": _iso(user.diagnosis_date),
        "target_glucose_min": user.target_glucose_min,
        "target_glucose_max": user.target_glucose_max,
        "created_at": _iso(user.created_at),
    }


def serialize_glucose(record: GlucoseRecord) -> dict[str, Any]:
    return {
        "id": str(record.id),
        "user_id": str(record.user_id),
        "date": record.record_date.isoformat(),
        "period": record.period.value,
        "glucose_value": record.glucose_value,
        "notes": record.notes,
        "created_at": _iso(record.created_at),
        "updated_at": _iso(record.updated_at),
    }


def serialize_insulin(record: InsulinRecord) -> dict[str, Any]:
    return {
        "id": str(record.id),
        "user_id": str(record.user_id),
        "date": record.record_date.isoformat(),
        "period": record.period.value,
        "insulin_type": record.insulin_type.value,
        "units": _units(record.units),
        "notes": record.notes,
        "created_at": _iso(record.created_at),
        "updated_at": _iso(record.updated_at),
    }


def serialize_settings(user_settings: UserSettings | None) -> dict[str, Any] | None:
    if user_settings is None:
        return None
    data: dict[str, Any] = {
        "id": str(user_settings.id),
        "user_id": str(user_settings.user_id),
    }
    for field in SETTINGS_FIELDS:
        data[field] = getattr(user_settings, field)
    data["created_at"] = _iso(user_settings.created_at)
    data["updated_at"] = _iso(user_settings.updated_at)
    return data


def serialize_alert(alert: Alert) -> dict[str, Any]:
    return {
        "id": str(alert.id),
        "user_id": str(alert.user_id),
        "type": alert.alert_type.value,
        "title": alert.title,
        "message": alert.message,
        "glucose_value": alert.glucose_value,
        "read": alert.read,
        "created_at": _iso(alert.created_at),
    }


def build_document(
    user: User,
    glucose_records: list[GlucoseRecord],
    insulin_records: list[InsulinRecord],
    user_settings: UserSettings | None,
    alerts: list[Alert],
) -> dict[str, Any]:
    """Assemble the export document in its on-disk shape."""
    return {
        "exportInfo": {
            "exportDate": utcnow().isoformat(),
            "version": settings.backup_format_version,
            "userId": str(user.id),
        },
        "user": serialize_user(user),
        "glucoseRecords": [serialize_glucose(r) for r in glucose_records],
        "insulinRecords": [serialize_insulin(r) for r in insulin_records],
        "settings": serialize_settings(user_settings),
        "alerts": [serialize_alert(a) for a in alerts],
    }


# ============================================================================
# Export
# ============================================================================


async def _read_profile(database: Database, user_id: uuid.UUID) -> User | None:
    async with database.session() as session:
        return await session.get(User, user_id)


async def _read_all(database: Database, stmt) -> list:
    async with database.session() as session:
        result = await session.execute(stmt)
        return list(result.scalars().all())


async def _read_settings(
    database: Database, user_id: uuid.UUID
) -> UserSettings | None:
    async with database.session() as session:
        result = await session.execute(
            select(UserSettings).where(UserSettings.user_id == user_id)
        )
        return result.scalar_one_or_none()


async def gather_snapshot(
    database: Database,
    user_id: uuid.UUID,
) -> tuple[User | None, list, list, UserSettings | None, list]:
    """Read everything a backup contains, five queries in parallel.

    Each read uses its own session. The first failure propagates.
    """
    return await asyncio.gather(
        _read_profile(database, user_id),
        _read_all(
            database,
            select(GlucoseRecord)
            .where(GlucoseRecord.user_id == user_id)
            .order_by(GlucoseRecord.record_date.asc(), GlucoseRecord.created_at.asc()),
        ),
        _read_all(
            database,
            select(InsulinRecord)
            .where(InsulinRecord.user_id == user_id)
            .order_by(InsulinRecord.record_date.asc(), InsulinRecord.created_at.asc()),
        ),
        _read_settings(database, user_id),
        _read_all(
            database,
            select(Alert)
            .where(Alert.user_id == user_id)
            .order_by(Alert.created_at.desc()),
        ),
    )


def _write_document(path: Path, document: dict[str, Any]) -> int:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(document, indent=2).encode("utf-8")
    path.write_bytes(payload)
    return len(payload)


async def _record_failed_backup(user_id: uuid.UUID, db: AsyncSession) -> Backup:
    backup = Backup(
        user_id=user_id,
        filename=f"backup_failed_{int(time.time() * 1000)}",
        status=BackupStatus.FAILED,
    )
    try:
        await db.rollback()
        db.add(backup)
        await db.commit()
        await db.refresh(backup)
    except Exception as e:
        await db.rollback()
        logger.error(
            "Failed to record failed backup",
            user_id=str(user_id),
            error=str(e),
        )
    return backup


async def create_backup(
    user_id: uuid.UUID,
    db: AsyncSession,
    database: Database,
) -> Backup:
    """Export the user's data to a JSON file and record the artifact.

    Never raises for export failures: a ``failed`` Backup is recorded and
    returned instead.
    """
    try:
        profile, glucose, insulin, user_settings, alerts = await gather_snapshot(
            database, user_id
        )
        if profile is None:
            raise NotFoundError("User not found")

        document = build_document(profile, glucose, insulin, user_settings, alerts)
        filename = f"backup_{user_id}_{int(time.time() * 1000)}.json"
        path = Path(settings.backup_path) / filename
        file_size = await asyncio.to_thread(_write_document, path, document)

        backup = Backup(
            user_id=user_id,
            filename=filename,
            file_path=str(path),
            file_size=file_size,
            status=BackupStatus.COMPLETED,
        )
        db.add(backup)
        await db.commit()
        await db.refresh(backup)
    except Exception as e:
        logger.error(
            "Backup creation failed",
            user_id=str(user_id),
            error=str(e),
        )
        return await _record_failed_backup(user_id, db)

    logger.info(
        "Backup created",
        user_id=str(user_id),
        backup_id=str(backup.id),
        glucose_records=len(glucose),
        insulin_records=len(insulin),
        file_size=file_size,
    )
    return backup


async def list_backups(user_id: uuid.UUID, db: AsyncSession) -> list[Backup]:
    """The user's most recent backups, newest first."""
    result = await db.execute(
        select(Backup)
        .where(Backup.user_id == user_id)
        .order_by(Backup.created_at.desc())
        .limit(settings.backup_list_limit)
    )
    return list(result.scalars().all())


async def get_backup_file(
    backup_id: uuid.UUID,
    user_id: uuid.UUID,
    db: AsyncSession,
) -> tuple[Backup, bytes]:
    """Load a completed backup's document for download.

    Raises:
        NotFoundError: If the backup is absent, not owned, not completed,
            or its file is gone.
    """
    result = await db.execute(
        select(Backup).where(
            Backup.id == backup_id,
            Backup.user_id == user_id,
            Backup.status == BackupStatus.COMPLETED,
        )
    )
    backup = result.scalar_one_or_none()
    if backup is None or not backup.file_path:
        raise NotFoundError(BACKUP_NOT_FOUND)

    try:
        content = await asyncio.to_thread(Path(backup.file_path).read_bytes)
    except OSError as e:
        logger.warning(
            "Backup file missing",
            user_id=str(user_id),
            backup_id=str(backup_id),
            error=str(e),
        )
        raise NotFoundError("Backup file not found") from e

    return backup, content


async def delete_backup(
    backup_id: uuid.UUID,
    user_id: uuid.UUID,
    db: AsyncSession,
) -> None:
    """Remove the backup file (best effort) and its row.

    Raises:
        NotFoundError: If the backup is absent or not owned.
    """
    result = await db.execute(
        select(Backup).where(Backup.id == backup_id, Backup.user_id == user_id)
    )
    backup = result.scalar_one_or_none()
    if backup is None:
        raise NotFoundError(BACKUP_NOT_FOUND)

    if backup.file_path:
        try:
            await asyncio.to_thread(Path(backup.file_path).unlink)
        except OSError as e:
            logger.warning(
                "Failed to delete backup file",
                user_id=str(user_id),
                backup_id=str(backup_id),
                error=str(e),
            )

    await db.delete(backup)
    await db.commit()

    logger.info(
        "Backup deleted",
        user_id=str(user_id),
        backup_id=str(backup_id),
    )


# ============================================================================
# Restore
# ============================================================================


def _parse_date(value: Any) -> date | None:
    """Accept YYYY-MM-DD or a full ISO timestamp (first 10 chars)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_enum(
    value: Any,
    enum_cls: type[EnumT],
    legacy: dict[str, EnumT] | None = None,
) -> EnumT:
    if legacy and value in legacy:
        return legacy[value]
    return enum_cls(value)


def _timestamps(raw: dict[str, Any]) -> dict[str, datetime]:
    created_at = _parse_datetime(raw.get("created_at")) or utcnow()
    updated_at = _parse_datetime(raw.get("updated_at")) or created_at
    return {"created_at": created_at, "updated_at": updated_at}


def _required_date(raw: dict[str, Any]) -> date:
    record_date = _parse_date(raw["date"])
    if record_date is None:
        raise ValueError("date is required")
    return record_date


def _checked_notes(raw: dict[str, Any]) -> str | None:
    notes = raw.get("notes")
    if notes is not None and len(notes) > NOTES_MAX_LENGTH:
        raise ValueError(f"notes exceed {NOTES_MAX_LENGTH} characters")
    return notes


def _parse_glucose(raw: dict[str, Any], user_id: uuid.UUID) -> GlucoseRecord:
    glucose_value = int(raw["glucose_value"])
    if not GLUCOSE_MIN_VALUE <= glucose_value <= GLUCOSE_MAX_VALUE:
        raise ValueError(
            f"glucose_value must be between {GLUCOSE_MIN_VALUE} and {GLUCOSE_MAX_VALUE}"
        )
    return GlucoseRecord(
        user_id=user_id,
        record_date=_required_date(raw),
        period=_parse_enum(raw["period"], GlucosePeriod, LEGACY_GLUCOSE_PERIOD_MAP),
        glucose_value=glucose_value,
        notes=_checked_notes(raw),
        **_timestamps(raw),
    )


def _parse_insulin(raw: dict[str, Any], user_id: uuid.UUID) -> InsulinRecord:
    units = Decimal(str(raw["units"]))
    if not INSULIN_MIN_UNITS <= units <= INSULIN_MAX_UNITS:
        raise ValueError(
            f"units must be between {INSULIN_MIN_UNITS} and {INSULIN_MAX_UNITS}"
        )
    return InsulinRecord(
        user_id=user_id,
        record_date=_required_date(raw),
        period=_parse_enum(raw["period"], InsulinPeriod, LEGACY_INSULIN_PERIOD_MAP),
        insulin_type=_parse_enum(raw.get("insulin_type") or "rapid", InsulinType),
        units=units,
        notes=_checked_notes(raw),
        **_timestamps(raw),
    )


def _parse_settings(raw: dict[str, Any], user_id: uuid.UUID) -> UserSettings:
    blobs = {}
    for field in SETTINGS_FIELDS:
        value = raw.get(field) or {}
        # Older exports stored the blobs as JSON text
        blobs[field] = json.loads(value) if isinstance(value, str) else dict(value)
    return UserSettings(user_id=user_id, **blobs, **_timestamps(raw))


def _parse_alert(raw: dict[str, Any], user_id: uuid.UUID) -> Alert:
    glucose_value = raw.get("glucose_value")
    return Alert(
        user_id=user_id,
        alert_type=AlertType(raw["type"]),
        title=raw["title"],
        message=raw.get("message"),
        glucose_value=int(glucose_value) if glucose_value is not None else None,
        read=False,
        created_at=_parse_datetime(raw.get("created_at")) or utcnow(),
    )


def _parse_profile(raw: dict[str, Any]) -> dict[str, Any]:
    """Profile fields a restore may overwrite; email and password never change."""
    profile: dict[str, Any] = {}
    if raw.get("diabetes_type"):
        profile["diabetes_type"] = DiabetesType(raw["diabetes_type"])
    if "date_of_birth" in raw:
        profile["date_of_birth"] = _parse_date(raw["date_of_birth"])
    if "diagnosis_date" in raw:
        profile["diagnosis_date"] = _parse_date(raw["diagnosis_date"])
    for field in ("target_glucose_min", "target_glucose_max"):
        if raw.get(field) is not None:
            profile[field] = int(raw[field])
    return profile


def _parse_each(
    section: str,
    items: list[dict[str, Any]],
    parse: Callable[[dict[str, Any], uuid.UUID], Any],
    user_id: uuid.UUID,
) -> list:
    parsed = []
    for index, raw in enumerate(items):
        try:
            parsed.append(parse(raw, user_id))
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            raise ValidationError(
                "Invalid backup data",
                details=[{"section": section, "index": index, "error": str(e)}],
            ) from e
    return parsed


def _check_unique_slots(section: str, records: list) -> None:
    seen: dict[tuple[date, Enum], int] = {}
    for index, record in enumerate(records):
        slot = (record.record_date, record.period)
        if slot in seen:
            raise ValidationError(
                "Invalid backup data",
                details=[
                    {
                        "section": section,
                        "index": index,
                        "error": (
                            f"duplicate of record {seen[slot]} for "
                            f"{record.record_date.isoformat()} {record.period.value}"
                        ),
                    }
                ],
            )
        seen[slot] = index


def _check_target_range(
    profile: dict[str, Any],
    current_range: tuple[int, int],
) -> None:
    target_min = profile.get("target_glucose_min", current_range[0])
    target_max = profile.get("target_glucose_max", current_range[1])
    if target_min >= target_max:
        raise ValueError("target_glucose_min must be less than target_glucose_max")


def parse_backup(
    document: BackupDocument,
    user_id: uuid.UUID,
    current_range: tuple[int, int] = (
        DEFAULT_TARGET_GLUCOSE_MIN,
        DEFAULT_TARGET_GLUCOSE_MAX,
    ),
) -> ParsedBackup:
    """Convert and check every record in the document before anything is written.

    Original ids are dropped so storage assigns fresh ones. Only unread
    alerts are kept, newest first, up to the restore cap. Target bounds
    missing from the document are taken from ``current_range``.

    Raises:
        ValidationError: If any record is malformed or out of range, two
            records share a (date, period) slot, or the resulting target
            range is not min < max.
    """
    glucose = _parse_each(
        "glucoseRecords", document.glucose_records, _parse_glucose, user_id
    )
    _check_unique_slots("glucoseRecords", glucose)
    insulin = _parse_each(
        "insulinRecords", document.insulin_records, _parse_insulin, user_id
    )
    _check_unique_slots("insulinRecords", insulin)
    unread = [raw for raw in document.alerts if not raw.get("read")]
    alerts = _parse_each("alerts", unread, _parse_alert, user_id)
    alerts.sort(key=lambda a: a.created_at, reverse=True)
    alerts = alerts[: settings.restore_alert_cap]

    user_settings = None
    if document.settings:
        user_settings = _parse_each(
            "settings", [document.settings], _parse_settings, user_id
        )[0]

    try:
        profile = _parse_profile(document.user)
        _check_target_range(profile, current_range)
    except (TypeError, ValueError) as e:
        raise ValidationError(
            "Invalid backup data",
            details=[{"section": "user", "error": str(e)}],
        ) from e

    return ParsedBackup(
        glucose_records=glucose,
        insulin_records=insulin,
        settings=user_settings,
        alerts=alerts,
        profile=profile,
    )


def _restore_lock(user_id: uuid.UUID) -> asyncio.Lock:
    lock = _restore_locks.get(user_id)
    if lock is None:
        lock = asyncio.Lock()
        _restore_locks[user_id] = lock
    return lock


async def restore_backup(
    user_id: uuid.UUID,
    document: BackupDocument,
    db: AsyncSession,
) -> RestoreSummary:
    """Replace the user's records with the contents of a backup document.

    Deletes and inserts run in one transaction: either the whole backup is
    applied or the prior state is left untouched.

    Raises:
        ProvenanceError: If the document was exported by another user.
        ValidationError: If any record in the document is malformed or
            out of range, or two records share a slot.
        PersistenceError: If the transaction fails; nothing is changed.
    """
    if str(document.export_info.user_id) != str(user_id):
        logger.warning(
            "Rejected backup from another user",
            user_id=str(user_id),
        )
        raise ProvenanceError("Backup is invalid or does not belong to this user")

    result = await db.execute(
        select(User.target_glucose_min, User.target_glucose_max).where(
            User.id == user_id
        )
    )
    current_range = result.one_or_none()
    if current_range is None:
        raise NotFoundError("User not found")

    parsed = parse_backup(document, user_id, tuple(current_range))

    async def _replace() -> None:
        for model in (Alert, InsulinRecord, GlucoseRecord, UserSettings):
            await db.execute(delete(model).where(model.user_id == user_id))

        db.add_all(parsed.glucose_records)
        await db.flush()
        db.add_all(parsed.insulin_records)
        await db.flush()
        if parsed.settings is not None:
            db.add(parsed.settings)
            await db.flush()
        db.add_all(parsed.alerts)
        await db.flush()

        if parsed.profile:
            await db.execute(
                update(User)
                .where(User.id == user_id)
                .values(**parsed.profile, updated_at=utcnow())
            )

    async with _restore_lock(user_id):
        try:
            await run_in_transaction(db, _replace)
        except Exception as e:
            logger.error(
                "Backup restore failed",
                user_id=str(user_id),
                error=str(e),
            )
            raise PersistenceError() from e

    summary = RestoreSummary(
        glucose_records=len(parsed.glucose_records),
        insulin_records=len(parsed.insulin_records),
        settings_restored=parsed.settings is not None,
        alerts_restored=len(parsed.alerts),
    )
    logger.info(
        "Backup restored",
        user_id=str(user_id),
        glucose_records=summary.glucose_records,
        insulin_records=summary.insulin_records,
        alerts_restored=summary.alerts_restored,
    )
    return summary
