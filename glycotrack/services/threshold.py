"""Glucose threshold evaluation.

Classifies a new reading against the user's target range and, when it
falls outside, appends a low/high alert to the user's feed.
"""

import enum
import uuid

from glycotrack.database import Database
from glycotrack.logging_config import get_logger
from glycotrack.models.alert import Alert, AlertType
from glycotrack.services.alert_feed import append_alert

logger = get_logger(__name__)


class AlertDecision(str, enum.Enum):
    """Outcome of comparing a reading with the target range."""

    NONE = "none"
    LOW = "low"
    HIGH = "high"


ALERT_TITLES: dict[AlertDecision, str] = {
    AlertDecision.LOW: "Hypoglycemia Detected",
    AlertDecision.HIGH: "Hyperglycemia Detected",
}

ALERT_MESSAGES: dict[AlertDecision, str] = {
    AlertDecision.LOW: "Low glucose recorded: {value} mg/dL",
    AlertDecision.HIGH: "High glucose recorded: {value} mg/dL",
}

ALERT_TYPES: dict[AlertDecision, AlertType] = {
    AlertDecision.LOW: AlertType.LOW_GLUCOSE,
    AlertDecision.HIGH: AlertType.HIGH_GLUCOSE,
}


def evaluate(glucose_value: int, target_min: int, target_max: int) -> AlertDecision:
    """Strict comparison: values equal to a bound are in range."""
    if glucose_value < target_min:
        return AlertDecision.LOW
    if glucose_value > target_max:
        return AlertDecision.HIGH
    return AlertDecision.NONE


def build_alert(
    user_id: uuid.UUID,
    glucose_value: int,
    decision: AlertDecision,
) -> Alert | None:
    """Build an unsaved, unread Alert for a LOW/HIGH decision."""
    if decision == AlertDecision.NONE:
        return None
    return Alert(
        user_id=user_id,
        alert_type=ALERT_TYPES[decision],
        title=ALERT_TITLES[decision],
        message=ALERT_MESSAGES[decision].format(value=glucose_value),
        glucose_value=glucose_value,
        read=False,
    )


async def raise_threshold_alert(
    database: Database,
    user_id: uuid.UUID,
    glucose_value: int,
    target_min: int,
    target_max: int,
) -> Alert | None:
    """Evaluate a committed reading and append an alert if needed.

    Runs in its own session so a failure here never touches the caller's
    measurement. Failures are logged and swallowed: the measurement
    stands whether or not its alert could be written.

    Returns:
        The created Alert, or None when in range or on failure.
    """
    decision = evaluate(glucose_value, target_min, target_max)
    alert = build_alert(user_id, glucose_value, decision)
    if alert is None:
        return None

    try:
        async with database.session() as session:
            return await append_alert(alert, session)
    except Exception as e:
        logger.error(
            "Failed to create glucose alert",
            user_id=str(user_id),
            decision=decision.value,
            error=str(e),
        )
        return None
