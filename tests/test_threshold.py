"""Tests for glucose threshold evaluation and the alerts it raises."""

import uuid
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from glycotrack.models.alert import AlertType
from glycotrack.services.threshold import (
    AlertDecision,
    build_alert,
    evaluate,
    raise_threshold_alert,
)
from tests.conftest import register_and_login


class TestEvaluate:
    """Strict comparison against the target range."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (69, AlertDecision.LOW),
            (70, AlertDecision.NONE),
            (120, AlertDecision.NONE),
            (180, AlertDecision.NONE),
            (181, AlertDecision.HIGH),
        ],
    )
    def test_boundaries(self, value, expected):
        assert evaluate(value, 70, 180) == expected

    def test_custom_range(self):
        assert evaluate(95, 100, 140) == AlertDecision.LOW
        assert evaluate(141, 100, 140) == AlertDecision.HIGH


class TestBuildAlert:
    def test_none_decision_builds_nothing(self):
        assert build_alert(uuid.uuid4(), 100, AlertDecision.NONE) is None

    def test_low_alert(self):
        user_id = uuid.uuid4()
        alert = build_alert(user_id, 55, AlertDecision.LOW)

        assert alert.user_id == user_id
        assert alert.alert_type == AlertType.LOW_GLUCOSE
        assert alert.title == "Hypoglycemia Detected"
        assert "55" in alert.message
        assert alert.glucose_value == 55
        assert alert.read is False

    def test_high_alert(self):
        alert = build_alert(uuid.uuid4(), 250, AlertDecision.HIGH)

        assert alert.alert_type == AlertType.HIGH_GLUCOSE
        assert alert.title == "Hyperglycemia Detected"


def _fake_database() -> MagicMock:
    session = AsyncMock()

    @asynccontextmanager
    async def _session():
        yield session

    database = MagicMock()
    database.session = _session
    return database


class TestRaiseThresholdAlert:
    async def test_in_range_writes_nothing(self):
        database = _fake_database()
        with patch(
            "glycotrack.services.threshold.append_alert", new_callable=AsyncMock
        ) as mock_append:
            result = await raise_threshold_alert(database, uuid.uuid4(), 100, 70, 180)

        assert result is None
        mock_append.assert_not_called()

    async def test_out_of_range_appends(self):
        database = _fake_database()
        with patch(
            "glycotrack.services.threshold.append_alert", new_callable=AsyncMock
        ) as mock_append:
            mock_append.side_effect = lambda alert, session: alert
            result = await raise_threshold_alert(database, uuid.uuid4(), 300, 70, 180)

        assert result is not None
        assert result.alert_type == AlertType.HIGH_GLUCOSE
        mock_append.assert_awaited_once()

    async def test_failure_is_swallowed(self):
        database = _fake_database()
        with patch(
            "glycotrack.services.threshold.append_alert",
            new_callable=AsyncMock,
            side_effect=RuntimeError("database is locked"),
        ):
            result = await raise_threshold_alert(database, uuid.uuid4(), 40, 70, 180)

        assert result is None


class TestAlertsFromGlucoseEndpoint:
    async def test_low_reading_raises_alert(self, client):
        headers = await register_and_login(client, "low")

        response = await client.post(
            "/api/glucose",
            json={"date": "2026-01-10", "period": "fasting", "glucose_value": 55},
            headers=headers,
        )
        assert response.status_code == 201

        alerts = (await client.get("/api/alerts", headers=headers)).json()
        assert alerts["count"] == 1
        assert alerts["unread_count"] == 1
        assert alerts["alerts"][0]["type"] == "low_glucose"
        assert alerts["alerts"][0]["glucose_value"] == 55

    async def test_boundary_readings_raise_nothing(self, client):
        headers = await register_and_login(client, "bounds")

        for period, value in (("fasting", 70), ("bedtime", 180)):
            response = await client.post(
                "/api/glucose",
                json={"date": "2026-01-10", "period": period, "glucose_value": value},
                headers=headers,
            )
            assert response.status_code == 201

        alerts = (await client.get("/api/alerts", headers=headers)).json()
        assert alerts["count"] == 0

    async def test_uses_profile_target_range(self, client):
        headers = await register_and_login(client, "custom")
        await client.put(
            "/api/users/profile",
            json={"target_glucose_min": 100, "target_glucose_max": 140},
            headers=headers,
        )

        await client.post(
            "/api/glucose",
            json={"date": "2026-01-10", "period": "after_lunch", "glucose_value": 150},
            headers=headers,
        )

        alerts = (await client.get("/api/alerts", headers=headers)).json()
        assert [a["type"] for a in alerts["alerts"]] == ["high_glucose"]

    async def test_alert_failure_keeps_measurement(self, client):
        headers = await register_and_login(client, "besteffort")

        with patch(
            "glycotrack.services.threshold.append_alert",
            new_callable=AsyncMock,
            side_effect=RuntimeError("alert store unavailable"),
        ):
            response = await client.post(
                "/api/glucose",
                json={"date": "2026-01-10", "period": "bedtime", "glucose_value": 320},
                headers=headers,
            )

        assert response.status_code == 201
        listing = (await client.get("/api/glucose", headers=headers)).json()
        assert listing["pagination"]["total"] == 1
        alerts = (await client.get("/api/alerts", headers=headers)).json()
        assert alerts["count"] == 0

    async def test_duplicate_raises_no_second_alert(self, client):
        headers = await register_and_login(client, "dupalert")
        body = {"date": "2026-01-10", "period": "fasting", "glucose_value": 300}

        first = await client.post("/api/glucose", json=body, headers=headers)
        second = await client.post("/api/glucose", json=body, headers=headers)

        assert first.status_code == 201
        assert second.status_code == 409
        alerts = (await client.get("/api/alerts", headers=headers)).json()
        assert alerts["count"] == 1
