"""Tests for registration, login, and token handling."""

import uuid
from datetime import timedelta

import pytest

from glycotrack.config import settings
from glycotrack.core.security import (
    TokenData,
    create_access_token,
    decode_access_token,
    hash_password,
    validate_password_strength,
    verify_password,
)
from tests.conftest import TEST_PASSWORD, unique_email


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password(TEST_PASSWORD)

        assert hashed != TEST_PASSWORD
        assert verify_password(TEST_PASSWORD, hashed)
        assert not verify_password("WrongPass123", hashed)

    @pytest.mark.parametrize(
        "password", ["Short1A", "alllowercase1", "ALLUPPERCASE1", "NoDigitsHere"]
    )
    def test_policy_rejects_weak_passwords(self, password):
        with pytest.raises(ValueError):
            validate_password_strength(password)

    def test_policy_accepts_strong_password(self):
        assert validate_password_strength(TEST_PASSWORD) == TEST_PASSWORD


class TestTokens:
    def test_round_trip(self):
        user_id = uuid.uuid4()
        token = create_access_token(user_id, "a@example.com")

        data = TokenData(decode_access_token(token))
        assert data.user_id == user_id
        assert data.email == "a@example.com"

    def test_expired_token_rejected(self):
        token = create_access_token(
            uuid.uuid4(), "a@example.com", expires_delta=timedelta(seconds=-1)
        )
        assert decode_access_token(token) is None

    def test_garbage_token_rejected(self):
        assert decode_access_token("not-a-jwt") is None


class TestRegister:
    async def test_register_returns_token_and_cookie(self, client):
        response = await client.post(
            "/api/auth/register",
            json={
                "name": "New User",
                "email": unique_email("register"),
                "password": TEST_PASSWORD,
                "diabetes_type": "type2",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["user"]["diabetes_type"] == "type2"
        assert data["user"]["target_glucose_min"] == 70
        assert data["user"]["target_glucose_max"] == 180
        assert data["token_type"] == "bearer"
        assert settings.jwt_cookie_name in response.headers["set-cookie"]
        assert "httponly" in response.headers["set-cookie"].lower()

    async def test_email_is_case_insensitive_unique(self, client):
        email = unique_email("dupe")
        body = {"name": "Dupe", "email": email, "password": TEST_PASSWORD}

        first = await client.post("/api/auth/register", json=body)
        second = await client.post(
            "/api/auth/register", json={**body, "email": email.upper()}
        )

        assert first.status_code == 201
        assert second.status_code == 409

    async def test_weak_password_rejected(self, client):
        response = await client.post(
            "/api/auth/register",
            json={"name": "Weak", "email": unique_email("weak"), "password": "password"},
        )
        assert response.status_code == 422


class TestLogin:
    async def test_login_and_me(self, client):
        email = unique_email("login")
        await client.post(
            "/api/auth/register",
            json={"name": "Login User", "email": email, "password": TEST_PASSWORD},
        )

        response = await client.post(
            "/api/auth/login", json={"email": email, "password": TEST_PASSWORD}
        )

        assert response.status_code == 200
        token = response.json()["access_token"]
        me = await client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )
        assert me.status_code == 200
        assert me.json()["email"] == email

    async def test_wrong_password(self, client):
        email = unique_email("wrongpw")
        await client.post(
            "/api/auth/register",
            json={"name": "Wrong Pw", "email": email, "password": TEST_PASSWORD},
        )

        response = await client.post(
            "/api/auth/login", json={"email": email, "password": "WrongPass123"}
        )
        assert response.status_code == 401

    async def test_unknown_email(self, client):
        response = await client.post(
            "/api/auth/login",
            json={"email": unique_email("ghost"), "password": TEST_PASSWORD},
        )
        assert response.status_code == 401

    async def test_token_for_unknown_user_rejected(self, client):
        token = create_access_token(uuid.uuid4(), "ghost@example.com")
        response = await client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401
