"""Tests for the glucose record endpoints."""

from httpx import ASGITransport, AsyncClient

from glycotrack.main import app
from tests.conftest import register_and_login


async def _create(client, headers, date="2026-01-05", period="fasting", value=100):
    return await client.post(
        "/api/glucose",
        json={"date": date, "period": period, "glucose_value": value},
        headers=headers,
    )


class TestGlucoseAuth:
    async def test_requires_auth(self):
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            response = await client.get("/api/glucose")

        assert response.status_code == 401


class TestCreateGlucose:
    async def test_create_record(self, client, auth_headers):
        response = await client.post(
            "/api/glucose",
            json={
                "date": "2026-01-05",
                "period": "before_lunch",
                "glucose_value": 112,
                "notes": "after a walk",
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Record created successfully"
        assert data["record"]["date"] == "2026-01-05"
        assert data["record"]["period"] == "before_lunch"
        assert data["record"]["glucose_value"] == 112
        assert data["record"]["notes"] == "after a walk"

    async def test_duplicate_slot_returns_409(self, client, auth_headers):
        assert (await _create(client, auth_headers)).status_code == 201

        response = await _create(client, auth_headers, value=140)

        assert response.status_code == 409
        assert response.json()["code"] == "conflict"

    async def test_value_out_of_bounds_rejected(self, client, auth_headers):
        assert (await _create(client, auth_headers, value=19)).status_code == 422
        assert (await _create(client, auth_headers, value=601)).status_code == 422

    async def test_bounds_accepted(self, client, auth_headers):
        assert (await _create(client, auth_headers, value=20)).status_code == 201
        response = await _create(client, auth_headers, period="bedtime", value=600)
        assert response.status_code == 201

    async def test_unknown_period_rejected(self, client, auth_headers):
        response = await _create(client, auth_headers, period="brunch")
        assert response.status_code == 422

    async def test_notes_too_long_rejected(self, client, auth_headers):
        response = await client.post(
            "/api/glucose",
            json={
                "date": "2026-01-05",
                "period": "fasting",
                "glucose_value": 100,
                "notes": "x" * 501,
            },
            headers=auth_headers,
        )
        assert response.status_code == 422


class TestListGlucose:
    async def test_list_with_stats_and_pagination(self, client, auth_headers):
        for day, value in (("2026-01-05", 90), ("2026-01-06", 120), ("2026-01-07", 151)):
            await _create(client, auth_headers, date=day, value=value)

        response = await client.get(
            "/api/glucose", params={"limit": 2}, headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert [r["date"] for r in data["records"]] == ["2026-01-07", "2026-01-06"]
        assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}
        # Stats cover the whole filtered set, not just the page
        assert data["stats"] == {
            "average": 120,
            "minimum": 90,
            "maximum": 151,
            "count": 3,
        }

    async def test_filters(self, client, auth_headers):
        await _create(client, auth_headers, date="2026-01-05", value=90)
        await _create(client, auth_headers, date="2026-01-06", value=120)
        await _create(client, auth_headers, date="2026-01-06", period="bedtime", value=200)

        response = await client.get(
            "/api/glucose",
            params={"start_date": "2026-01-06", "period": "fasting"},
            headers=auth_headers,
        )

        data = response.json()
        assert [r["glucose_value"] for r in data["records"]] == [120]
        assert data["stats"]["count"] == 1

    async def test_empty_list_has_zero_stats(self, client, auth_headers):
        data = (await client.get("/api/glucose", headers=auth_headers)).json()

        assert data["records"] == []
        assert data["pagination"]["pages"] == 0
        assert data["stats"] == {"average": 0, "minimum": 0, "maximum": 0, "count": 0}

    async def test_users_see_only_their_records(self, client, auth_headers):
        await _create(client, auth_headers)
        other = await register_and_login(client, "other")

        data = (await client.get("/api/glucose", headers=other)).json()
        assert data["records"] == []


class TestUpdateDeleteGlucose:
    async def test_update_value_and_notes(self, client, auth_headers):
        record_id = (await _create(client, auth_headers)).json()["record"]["id"]

        response = await client.put(
            f"/api/glucose/{record_id}",
            json={"glucose_value": 145, "notes": "rechecked"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        record = response.json()["record"]
        assert record["glucose_value"] == 145
        assert record["notes"] == "rechecked"
        assert record["date"] == "2026-01-05"

    async def test_update_out_of_bounds_rejected(self, client, auth_headers):
        record_id = (await _create(client, auth_headers)).json()["record"]["id"]

        response = await client.put(
            f"/api/glucose/{record_id}",
            json={"glucose_value": 700},
            headers=auth_headers,
        )
        assert response.status_code == 422

    async def test_other_users_record_is_not_found(self, client, auth_headers):
        record_id = (await _create(client, auth_headers)).json()["record"]["id"]
        other = await register_and_login(client, "intruder")

        update = await client.put(
            f"/api/glucose/{record_id}", json={"notes": "mine"}, headers=other
        )
        delete = await client.delete(f"/api/glucose/{record_id}", headers=other)

        assert update.status_code == 404
        assert delete.status_code == 404

    async def test_delete(self, client, auth_headers):
        record_id = (await _create(client, auth_headers)).json()["record"]["id"]

        response = await client.delete(f"/api/glucose/{record_id}", headers=auth_headers)
        assert response.status_code == 200

        again = await client.delete(f"/api/glucose/{record_id}", headers=auth_headers)
        assert again.status_code == 404

    async def test_slot_is_free_after_delete(self, client, auth_headers):
        record_id = (await _create(client, auth_headers)).json()["record"]["id"]
        await client.delete(f"/api/glucose/{record_id}", headers=auth_headers)

        assert (await _create(client, auth_headers)).status_code == 201
