"""Integration tests for the stateless calculation endpoints and token checks."""
import pytest
from datetime import timedelta


@pytest.mark.asyncio
class TestRunwayEndpoints:
    """Tests for runway calculations."""

    async def test_runway(self, app_client):
        """Test a finite runway."""
        response = await app_client.post(
            "/calculations/runway",
            json={"cash_balance": 500000, "monthly_burn": 50000, "today": "2025-06-02"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["months"] == {"kind": "bounded", "value": 10.0}
        assert data["end_date"] == "2026-04-02"
        assert data["status"] == "healthy"

    async def test_runway_profitable(self, app_client):
        """Test revenue above burn is unbounded."""
        response = await app_client.post(
            "/calculations/runway",
            json={"cash_balance": 1000, "monthly_burn": 500, "monthly_revenue": 800, "today": "2025-06-02"},
        )

        data = response.json()
        assert data["months"] == {"kind": "unbounded"}
        assert data["end_date"] == "2099-12-31"

    async def test_runway_rejects_negative_cash(self, app_client):
        """Test negative inputs are rejected."""
        response = await app_client.post(
            "/calculations/runway",
            json={"cash_balance": -1, "monthly_burn": 500},
        )

        assert response.status_code == 422

    async def test_scenario(self, app_client):
        """Test a what-if scenario."""
        response = await app_client.post(
            "/calculations/runway/scenario",
            json={
                "cash_balance": 50000,
                "monthly_burn": 10000,
                "today": "2025-06-02",
                "scenario": {"additional_cash": 10000, "burn_change_percent": 20},
            },
        )

        assert response.status_code == 200
        assert response.json()["months"]["value"] == pytest.approx(5)
        assert response.json()["status"] == "caution"


@pytest.mark.asyncio
class TestTrendAndPaceEndpoints:
    """Tests for trend and pace calculations."""

    async def test_trend(self, app_client):
        """Test an upward trend."""
        response = await app_client.post("/calculations/trend", json={"current": 120, "previous": 100})

        assert response.status_code == 200
        assert response.json() == {"direction": "up", "change": 20.0, "percentage": 20.0}

    async def test_pace_deadline_today(self, app_client):
        """Test work due today is at risk with an unbounded pace."""
        response = await app_client.post(
            "/calculations/pace",
            json={
                "remaining_minutes": 30,
                "deadline": "2025-06-02",
                "today": "2025-06-02",
                "daily_hours_available": 6,
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["required_hours_per_day"] == {"kind": "unbounded"}
        assert data["is_at_risk"] is True


@pytest.mark.asyncio
class TestTokenVerification:
    """Tests for bearer token handling."""

    async def test_missing_token(self, anonymous_client):
        """Test requests without a token are rejected."""
        response = await anonymous_client.post("/calculations/trend", json={"current": 1, "previous": 1})

        assert response.status_code == 401

    async def test_valid_token(self, anonymous_client):
        """Test a token signed with the shared secret is accepted."""
        from app.utils.auth import create_access_token

        token = create_access_token("user123")

        response = await anonymous_client.post(
            "/calculations/trend",
            json={"current": 1, "previous": 1},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 200
        assert response.json()["direction"] == "flat"

    async def test_expired_token(self, anonymous_client):
        """Test expired tokens are rejected."""
        from app.utils.auth import create_access_token

        token = create_access_token("user123", expires_delta=timedelta(minutes=-5))

        response = await anonymous_client.post(
            "/calculations/trend",
            json={"current": 1, "previous": 1},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401

    async def test_garbage_token(self, anonymous_client):
        """Test malformed tokens are rejected."""
        response = await anonymous_client.get(
            "/users/me",
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401

    async def test_health_is_public(self, anonymous_client):
        """Test the health check needs no token."""
        response = await anonymous_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
