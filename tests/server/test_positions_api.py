"""Integration tests for the position and statement API endpoints."""

from decimal import Decimal

import pytest
from fastapi import status
from fastapi.testclient import TestClient


@pytest.fixture
def account_id(client: TestClient) -> str:
    account_id = client.post("/api/v1/accounts", json={"name": "Positions"}).json()["id"]
    client.post(f"/api/v1/accounts/{account_id}/deposits", json={"amount": "10000.00"})
    for symbol, quantity, price in (("XYZ", "100", "40"), ("ABC", "20", "10")):
        client.post(
            f"/api/v1/accounts/{account_id}/trades/stock",
            json={"symbol": symbol, "action": "BUY", "quantity": quantity, "price": price},
        )
    client.post(
        f"/api/v1/accounts/{account_id}/trades/stock",
        json={"symbol": "ABC", "action": "SELL", "quantity": "20", "price": "12"},
    )
    return account_id


def test_get_positions(client: TestClient, account_id: str) -> None:
    response = client.get(f"/api/v1/accounts/{account_id}/positions")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["account_id"] == account_id
    assert [p["symbol"] for p in data["positions"]] == ["XYZ"]
    assert Decimal(data["positions"][0]["cost_basis"]) == Decimal("4000.00")
    assert data["positions"][0]["current_price"] is None
    assert data["summary"]["position_count"] == 1
    assert Decimal(data["summary"]["cash_balance"]) == Decimal("6040.00")


def test_get_statement(client: TestClient, account_id: str) -> None:
    response = client.get(f"/api/v1/accounts/{account_id}/statement")

    assert response.status_code == status.HTTP_200_OK
    lines = {line["symbol"]: line for line in response.json()["lines"]}
    assert set(lines) == {"ABC", "XYZ"}
    assert Decimal(lines["ABC"]["realized_stock_pnl"]) == Decimal("40.00")
    assert Decimal(lines["XYZ"]["unrealized_pnl"]) == Decimal("0.00")


@pytest.mark.parametrize("path", ["positions", "statement"])
def test_unknown_account(client: TestClient, path: str) -> None:
    response = client.get(f"/api/v1/accounts/missing/{path}")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"] == "not_found"
