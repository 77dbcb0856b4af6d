"""Tests for the user settings endpoints and service."""

from glycotrack.services.user_settings import (
    DEFAULT_SETTINGS,
    get_or_create_settings,
    get_settings,
    update_settings,
)


class TestSettingsService:
    async def test_created_lazily_with_defaults(self, db_session, user):
        user_id = user.id
        assert await get_settings(user_id, db_session) is None

        created = await get_or_create_settings(user_id, db_session)

        assert created.notification_settings == DEFAULT_SETTINGS["notification_settings"]
        assert created.reminder_times["breakfast"] == "07:00"
        again = await get_or_create_settings(user_id, db_session)
        assert again.id == created.id

    async def test_update_replaces_only_given_blobs(self, db_session, user):
        user_id = user.id

        updated = await update_settings(
            user_id,
            {"data_settings": {"autoBackup": False}},
            db_session,
        )

        assert updated.data_settings == {"autoBackup": False}
        assert updated.privacy_settings == DEFAULT_SETTINGS["privacy_settings"]

    async def test_defaults_are_not_shared(self, db_session, user):
        created = await get_or_create_settings(user.id, db_session)
        created.reminder_times["breakfast"] = "06:30"

        assert DEFAULT_SETTINGS["reminder_times"]["breakfast"] == "07:00"


class TestSettingsEndpoints:
    async def test_registration_creates_defaults(self, client, auth_headers):
        response = await client.get("/api/settings", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["privacy_settings"] == {
            "shareWithDoctor": False,
            "anonymousAnalytics": True,
            "dataExport": True,
        }
        assert data["data_settings"]["dataRetention"] == "2years"
        assert data["notification_settings"]["weeklyReports"] is True

    async def test_partial_update(self, client, auth_headers):
        response = await client.put(
            "/api/settings",
            json={"reminder_times": {"breakfast": "06:45", "dinner": "19:00"}},
            headers=auth_headers,
        )

        assert response.status_code == 200
        settings = response.json()["settings"]
        assert settings["reminder_times"] == {"breakfast": "06:45", "dinner": "19:00"}
        assert settings["notification_settings"]["lowGlucoseAlerts"] is True

        fetched = (await client.get("/api/settings", headers=auth_headers)).json()
        assert fetched["reminder_times"]["breakfast"] == "06:45"

    async def test_requires_auth(self, client):
        assert (await client.get("/api/settings")).status_code == 401
