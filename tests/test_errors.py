"""Tests for the domain error hierarchy and its HTTP mapping."""

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from glycotrack.core.errors import (
    GENERIC_SERVER_ERROR,
    ConflictError,
    GlycoTrackError,
    NotFoundError,
    PersistenceError,
    ValidationError,
    register_exception_handlers,
)


def _app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/conflict")
    async def conflict():
        raise ConflictError("A record already exists for this date and period")

    @app.get("/invalid")
    async def invalid():
        raise ValidationError(
            "Invalid backup data", details=[{"section": "alerts", "index": 2}]
        )

    @app.get("/missing")
    async def missing():
        raise NotFoundError("Record not found")

    @app.get("/storage")
    async def storage():
        raise OperationalError("SELECT 1", {}, Exception("password=hunter2"))

    return app


async def _get(path: str):
    async with AsyncClient(
        transport=ASGITransport(app=_app()), base_url="http://test"
    ) as client:
        return await client.get(path)


class TestErrorHierarchy:
    def test_all_errors_share_a_base(self):
        for cls in (ConflictError, NotFoundError, PersistenceError, ValidationError):
            assert issubclass(cls, GlycoTrackError)

    def test_persistence_message_is_generic(self):
        assert PersistenceError().message == GENERIC_SERVER_ERROR


class TestErrorResponses:
    async def test_conflict(self):
        response = await _get("/conflict")

        assert response.status_code == 409
        assert response.json()["code"] == "conflict"

    async def test_validation_details(self):
        response = await _get("/invalid")

        assert response.status_code == 400
        assert response.json()["details"] == [{"section": "alerts", "index": 2}]

    async def test_not_found(self):
        response = await _get("/missing")
        assert response.status_code == 404

    async def test_database_error_is_generic_500(self):
        response = await _get("/storage")

        assert response.status_code == 500
        assert response.json()["detail"] == GENERIC_SERVER_ERROR
        assert "hunter2" not in response.text
