"""Integration tests for Account API endpoints."""

from decimal import Decimal

import pytest
from fastapi import status
from fastapi.testclient import TestClient


@pytest.fixture
def account(client: TestClient) -> dict:
    """Create a test account through the API."""
    response = client.post(
        "/api/v1/accounts",
        json={"name": "Roth IRA", "cashflow_reserve": "2000.00"},
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


class TestAccountCrud:
    """Tests for account create, read, update and delete."""

    def test_create_account(self, account: dict) -> None:
        assert account["name"] == "Roth IRA"
        assert Decimal(account["cash_balance"]) == Decimal("0")
        assert Decimal(account["cashflow_reserve"]) == Decimal("2000.00")
        assert account["default_policy"] == "REINVEST_ON_CLOSE"
        assert "id" in account

    def test_create_account_blank_name(self, client: TestClient) -> None:
        response = client.post("/api/v1/accounts", json={"name": "   "})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_create_account_negative_reserve(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/accounts", json={"name": "X", "cashflow_reserve": "-1"}
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_list_accounts(self, client: TestClient, account: dict) -> None:
        response = client.get("/api/v1/accounts")
        assert response.status_code == status.HTTP_200_OK
        assert [a["id"] for a in response.json()] == [account["id"]]

    def test_get_account(self, client: TestClient, account: dict) -> None:
        response = client.get(f"/api/v1/accounts/{account['id']}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == "Roth IRA"

    def test_get_missing_account(self, client: TestClient) -> None:
        """Unknown accounts map to 404 with the error envelope."""
        response = client.get("/api/v1/accounts/does-not-exist")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        data = response.json()
        assert data["error"] == "not_found"
        assert "does-not-exist" in data["message"]
        assert "timestamp" in data

    def test_update_account(self, client: TestClient, account: dict) -> None:
        response = client.patch(
            f"/api/v1/accounts/{account['id']}",
            json={"default_policy": "CASHFLOW", "notes": "Long-term"},
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["default_policy"] == "CASHFLOW"
        assert data["notes"] == "Long-term"
        assert data["name"] == "Roth IRA"

    def test_delete_account(self, client: TestClient, account: dict) -> None:
        response = client.delete(f"/api/v1/accounts/{account['id']}")
        assert response.status_code == status.HTTP_204_NO_CONTENT

        response = client.get(f"/api/v1/accounts/{account['id']}")
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestAccountViews:
    """Tests for ledger, lots, underlyings and reconcile views."""

    def test_ledger_and_reconcile(self, client: TestClient, account: dict) -> None:
        account_id = account["id"]
        client.post(f"/api/v1/accounts/{account_id}/deposits", json={"amount": "1000.00"})

        response = client.get(f"/api/v1/accounts/{account_id}/ledger")
        assert response.status_code == status.HTTP_200_OK
        entries = response.json()
        assert len(entries) == 1
        assert entries[0]["type"] == "CASH_DEPOSIT"
        assert Decimal(entries[0]["amount"]) == Decimal("1000.00")

        response = client.get(f"/api/v1/accounts/{account_id}/reconcile")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["reconciled"] is True
        assert Decimal(data["cash_balance"]) == Decimal("1000.00")

    def test_lots_and_underlyings(self, client: TestClient, account: dict) -> None:
        account_id = account["id"]
        client.post(f"/api/v1/accounts/{account_id}/deposits", json={"amount": "5000.00"})
        client.post(
            f"/api/v1/accounts/{account_id}/trades/stock",
            json={"symbol": "xyz", "action": "BUY", "quantity": "10", "price": "50"},
        )

        lots = client.get(f"/api/v1/accounts/{account_id}/lots").json()
        assert len(lots) == 1
        assert Decimal(lots[0]["remaining"]) == Decimal("10")

        underlyings = client.get(f"/api/v1/accounts/{account_id}/underlyings").json()
        assert [u["symbol"] for u in underlyings] == ["XYZ"]
        assert underlyings[0]["current_price"] is None

    def test_set_underlying_policy(self, client: TestClient, account: dict) -> None:
        account_id = account["id"]
        client.post(f"/api/v1/accounts/{account_id}/deposits", json={"amount": "500.00"})
        created = client.post(
            f"/api/v1/accounts/{account_id}/trades/stock",
            json={"symbol": "XYZ", "action": "BUY", "quantity": "1", "price": "50"},
        ).json()

        response = client.patch(
            f"/api/v1/accounts/{account_id}/underlyings/{created['underlying_id']}",
            json={"premium_policy": "BASIS_REDUCTION"},
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["premium_policy"] == "BASIS_REDUCTION"

        response = client.patch(
            f"/api/v1/accounts/{account_id}/underlyings/{created['underlying_id']}",
            json={"premium_policy": None},
        )
        assert response.json()["premium_policy"] is None

    def test_unknown_underlying(self, client: TestClient, account: dict) -> None:
        response = client.patch(
            f"/api/v1/accounts/{account['id']}/underlyings/999",
            json={"premium_policy": "CASHFLOW"},
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND
