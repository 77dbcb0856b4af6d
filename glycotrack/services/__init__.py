# Business Logic Services
from glycotrack.services.alert_feed import (
    append_alert,
    count_unread,
    list_alerts,
    mark_all_read,
    mark_read,
)
from glycotrack.services.measurement_store import MeasurementFilter, MeasurementStore
from glycotrack.services.threshold import AlertDecision, evaluate

__all__ = [
    "AlertDecision",
    "MeasurementFilter",
    "MeasurementStore",
    "append_alert",
    "count_unread",
    "evaluate",
    "list_alerts",
    "mark_all_read",
    "mark_read",
]
