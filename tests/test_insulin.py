"""Tests for the insulin record endpoints."""

from tests.conftest import register_and_login


async def _create(client, headers, date="2026-01-05", period="breakfast", units="4.5"):
    return await client.post(
        "/api/insulin",
        json={"date": date, "period": period, "units": units},
        headers=headers,
    )


class TestCreateInsulin:
    async def test_create_defaults_to_rapid(self, client, auth_headers):
        response = await _create(client, auth_headers)

        assert response.status_code == 201
        record = response.json()["record"]
        assert record["insulin_type"] == "rapid"
        assert record["units"] == 4.5
        assert record["period"] == "breakfast"

    async def test_duplicate_slot_returns_409(self, client, auth_headers):
        await _create(client, auth_headers)

        response = await _create(client, auth_headers, units="8")
        assert response.status_code == 409

    async def test_units_bounds(self, client, auth_headers):
        assert (await _create(client, auth_headers, units="0.05")).status_code == 422
        assert (await _create(client, auth_headers, units="100.5")).status_code == 422
        assert (await _create(client, auth_headers, units="0.1")).status_code == 201
        response = await _create(client, auth_headers, period="dinner", units="100")
        assert response.status_code == 201

    async def test_too_many_decimals_rejected(self, client, auth_headers):
        response = await _create(client, auth_headers, units="1.234")
        assert response.status_code == 422

    async def test_glucose_period_not_accepted(self, client, auth_headers):
        response = await _create(client, auth_headers, period="fasting")
        assert response.status_code == 422


class TestListInsulin:
    async def test_stats_include_total(self, client, auth_headers):
        await _create(client, auth_headers, period="breakfast", units="4.5")
        await _create(client, auth_headers, period="lunch", units="6")
        await _create(client, auth_headers, period="bedtime", units="12.25")

        data = (await client.get("/api/insulin", headers=auth_headers)).json()

        assert data["pagination"]["total"] == 3
        assert data["stats"]["total"] == 22.75
        assert data["stats"]["minimum"] == 4.5
        assert data["stats"]["maximum"] == 12.25
        assert data["stats"]["count"] == 3

    async def test_period_filter(self, client, auth_headers):
        await _create(client, auth_headers, date="2026-01-05", period="lunch")
        await _create(client, auth_headers, date="2026-01-06", period="lunch")
        await _create(client, auth_headers, date="2026-01-06", period="dinner")

        data = (
            await client.get(
                "/api/insulin", params={"period": "lunch"}, headers=auth_headers
            )
        ).json()

        assert [r["date"] for r in data["records"]] == ["2026-01-06", "2026-01-05"]


class TestUpdateDeleteInsulin:
    async def test_update_units_and_type(self, client, auth_headers):
        record_id = (await _create(client, auth_headers)).json()["record"]["id"]

        response = await client.put(
            f"/api/insulin/{record_id}",
            json={"units": "5.25", "insulin_type": "mixed"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        record = response.json()["record"]
        assert record["units"] == 5.25
        assert record["insulin_type"] == "mixed"

    async def test_null_units_keeps_value(self, client, auth_headers):
        record_id = (await _create(client, auth_headers)).json()["record"]["id"]

        response = await client.put(
            f"/api/insulin/{record_id}",
            json={"units": None, "notes": "with snack"},
            headers=auth_headers,
        )

        record = response.json()["record"]
        assert record["units"] == 4.5
        assert record["notes"] == "with snack"

    async def test_other_user_cannot_delete(self, client, auth_headers):
        record_id = (await _create(client, auth_headers)).json()["record"]["id"]
        other = await register_and_login(client, "other_insulin")

        response = await client.delete(f"/api/insulin/{record_id}", headers=other)
        assert response.status_code == 404

        mine = await client.delete(f"/api/insulin/{record_id}", headers=auth_headers)
        assert mine.status_code == 200
