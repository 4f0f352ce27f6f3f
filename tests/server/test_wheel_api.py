"""Integration tests for wealth wheel API endpoints."""

from decimal import Decimal

import pytest
from fastapi import status
from fastapi.testclient import TestClient


@pytest.fixture
def portfolio(client: TestClient) -> dict:
    """$5,000 cash and 100 XYZ bought at $50."""
    account_id = client.post("/api/v1/accounts", json={"name": "Wheel"}).json()["id"]
    client.post(f"/api/v1/accounts/{account_id}/deposits", json={"amount": "10000.00"})
    stock = client.post(
        f"/api/v1/accounts/{account_id}/trades/stock",
        json={"symbol": "XYZ", "action": "BUY", "quantity": "100", "price": "50"},
    ).json()
    return {"account_id": account_id, "underlying_id": stock["underlying_id"]}


def put_targets(client: TestClient, account_id: str, targets: list):
    return client.put(f"/api/v1/accounts/{account_id}/wheel/targets", json={"targets": targets})


class TestTargetsEndpoint:
    """Tests for /api/v1/accounts/{account_id}/wheel/targets."""

    def test_replace_targets(self, client: TestClient, portfolio: dict) -> None:
        account_id = portfolio["account_id"]
        put_targets(client, account_id, [{"category": "CORE", "target_pct": "100"}])

        response = put_targets(
            client,
            account_id,
            [
                {"category": "FREE_CAPITAL", "target_pct": "40"},
                {"category": "CORE", "target_pct": "60"},
            ],
        )

        assert response.status_code == status.HTTP_200_OK
        targets = client.get(f"/api/v1/accounts/{account_id}/wheel/targets").json()
        assert [(t["category"], Decimal(t["target_pct"])) for t in targets] == [
            ("CORE", Decimal("60")),
            ("FREE_CAPITAL", Decimal("40")),
        ]

    def test_rounding_tolerance(self, client: TestClient, portfolio: dict) -> None:
        response = put_targets(
            client,
            portfolio["account_id"],
            [
                {"category": "CORE", "target_pct": "33.33"},
                {"category": "MAD_MONEY", "target_pct": "33.33"},
                {"category": "RISK_MGMT", "target_pct": "33.33"},
            ],
        )
        assert response.status_code == status.HTTP_200_OK

    @pytest.mark.parametrize(
        "targets",
        [
            [{"category": "CORE", "target_pct": "60"}, {"category": "FREE_CAPITAL", "target_pct": "30"}],
            [{"category": "CORE", "target_pct": "50"}, {"category": "CORE", "target_pct": "50"}],
            [{"category": "CORE", "target_pct": "101"}],
            [{"category": "SPECULATION", "target_pct": "100"}],
            [],
        ],
    )
    def test_invalid_targets(self, client: TestClient, portfolio: dict, targets: list) -> None:
        response = put_targets(client, portfolio["account_id"], targets)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestClassificationsEndpoint:
    """Tests for /api/v1/accounts/{account_id}/wheel/classifications."""

    def test_classify_and_reclassify(self, client: TestClient, portfolio: dict) -> None:
        account_id = portfolio["account_id"]
        url = f"/api/v1/accounts/{account_id}/wheel/classifications"
        body = {"underlying_id": portfolio["underlying_id"], "category": "CORE"}

        assert client.put(url, json=body).status_code == status.HTTP_200_OK
        response = client.put(url, json={**body, "category": "MAD_MONEY"})

        assert response.status_code == status.HTTP_200_OK
        assert client.get(url).json() == [
            {"underlying_id": portfolio["underlying_id"], "category": "MAD_MONEY"}
        ]

    def test_unknown_underlying(self, client: TestClient, portfolio: dict) -> None:
        response = client.put(
            f"/api/v1/accounts/{portfolio['account_id']}/wheel/classifications",
            json={"underlying_id": 9999, "category": "CORE"},
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestCalculateWheelEndpoint:
    """Tests for GET /api/v1/accounts/{account_id}/wheel."""

    def test_allocation_formatted(self, client: TestClient, portfolio: dict) -> None:
        account_id = portfolio["account_id"]
        client.put(
            f"/api/v1/accounts/{account_id}/wheel/classifications",
            json={"underlying_id": portfolio["underlying_id"], "category": "CORE"},
        )
        put_targets(
            client,
            account_id,
            [
                {"category": "CORE", "target_pct": "60"},
                {"category": "FREE_CAPITAL", "target_pct": "40"},
            ],
        )

        response = client.get(f"/api/v1/accounts/{account_id}/wheel")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total_value"] == "10000.00"
        assert data["cash_balance"] == "5000.00"
        slices = {s["category"]: s for s in data["slices"]}
        assert slices["CORE"] == {
            "category": "CORE",
            "current_value": "5000.00",
            "target_pct": "60.00",
            "actual_pct": "50.00",
            "delta": "10.00",
        }
        assert slices["FREE_CAPITAL"]["actual_pct"] == "0.00"
        assert slices["FREE_CAPITAL"]["delta"] == "40.00"

    def test_no_targets(self, client: TestClient, portfolio: dict) -> None:
        data = client.get(f"/api/v1/accounts/{portfolio['account_id']}/wheel").json()

        assert data["slices"] == []
        assert data["total_value"] == "10000.00"

    def test_unknown_account(self, client: TestClient) -> None:
        response = client.get("/api/v1/accounts/missing/wheel")
        assert response.status_code == status.HTTP_404_NOT_FOUND
