# tests/routers/test_transactions_api.py
"""
Integration tests for the ledger endpoints.

Trades (/transactions/buy, /sell) answer {success, data} and fail through
the global handlers; ledger CRUD answers {code, message, data}.
"""

from datetime import date

import pytest

from tests.conftest import create_price, post


@pytest.fixture
def priced_stock(db, stock):
    create_price(db, stock, date(2024, 1, 2), "10.00")
    create_price(db, stock, date(2024, 1, 3), "12.00")
    return stock


# =============================================================================
# TRADES
# =============================================================================

class TestBuyApi:

    def test_buy(self, client, funded_cash, priced_stock):
        response = client.post(
            "/transactions/buy",
            json={"asset_id": priced_stock.id, "quantity": "100", "date": "2024-01-02"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["total_cost"] == 1000.0
        assert body["data"]["remaining_cash"] == 9000.0

        txn = body["data"]["transaction"]
        assert txn["transaction_type"] == "IN"
        assert txn["price"] == 10.0
        assert txn["holding"] == 100.0
        assert txn["total_value"] == 1000.0

    def test_buy_without_price(self, client, funded_cash, priced_stock):
        response = client.post(
            "/transactions/buy",
            json={"asset_id": priced_stock.id, "quantity": "1", "date": "2024-01-05"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "PriceNotFoundError"

    def test_insufficient_funds(self, client, funded_cash, priced_stock):
        response = client.post(
            "/transactions/buy",
            json={"asset_id": priced_stock.id, "quantity": "1001", "date": "2024-01-02"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "InsufficientFundsError"
        assert body["details"]["available"] == "10000.00"

    def test_unknown_asset(self, client, funded_cash):
        response = client.post(
            "/transactions/buy",
            json={"asset_id": 999, "quantity": "1", "date": "2024-01-02"},
        )

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_malformed_body(self, client):
        response = client.post(
            "/transactions/buy",
            json={"asset_id": 1, "quantity": "-5", "date": "2024-01-02"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "ValidationError"
        assert body["details"][0]["field"] == "body.quantity"


class TestSellApi:

    def test_sell(self, client, db, funded_cash, priced_stock):
        post(db, priced_stock, "100", date(2024, 1, 2), price="10")

        response = client.post(
            "/transactions/sell",
            json={"asset_id": priced_stock.id, "quantity": "40", "date": "2024-01-03"},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["total_received"] == 480.0
        assert data["new_cash_balance"] == 10480.0
        assert data["transaction"]["holding"] == 60.0

    def test_insufficient_holding(self, client, funded_cash, priced_stock):
        response = client.post(
            "/transactions/sell",
            json={"asset_id": priced_stock.id, "quantity": "1", "date": "2024-01-03"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "InsufficientHoldingError"


# =============================================================================
# LEDGER CRUD
# =============================================================================

class TestLedgerApi:

    def test_create_manual_entry(self, client, stock):
        response = client.post(
            "/transactions",
            json={
                "asset_id": stock.id,
                "transaction_type": "IN",
                "quantity": "5",
                "price": "20",
                "transaction_date": "2024-01-01",
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["code"] == 201
        assert body["data"]["holding"] == 5.0

        asset = client.get(f"/assets/{stock.id}").json()["data"]
        assert asset["quantity"] == 5.0

    def test_out_exceeding_holding(self, client, stock):
        response = client.post(
            "/transactions",
            json={
                "asset_id": stock.id,
                "transaction_type": "OUT",
                "quantity": "5",
                "price": "20",
                "transaction_date": "2024-01-01",
            },
        )

        assert response.status_code == 400
        assert response.json()["code"] == 400
        assert response.json()["data"] is None

    def test_list_in_ledger_order(self, client, db, stock):
        post(db, stock, "1", date(2024, 1, 3))
        post(db, stock, "2", date(2024, 1, 1))

        body = client.get("/transactions", params={"asset_id": stock.id}).json()

        assert [t["transaction_date"] for t in body["data"]["items"]] == ["2024-01-01", "2024-01-03"]
        assert [t["holding"] for t in body["data"]["items"]] == [2.0, 3.0]
        assert body["data"]["pagination"]["total"] == 2

    def test_get_missing(self, client):
        response = client.get("/transactions/999")

        assert response.status_code == 404
        assert response.json() == {
            "code": 404,
            "message": "Transaction with id 999 not found",
            "data": None,
        }

    def test_delete_latest(self, client, db, stock):
        post(db, stock, "10", date(2024, 1, 1))
        latest = post(db, stock, "5", date(2024, 1, 2))

        response = client.delete(f"/transactions/{latest.id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["was_latest"] is True
        assert data["asset_quantity"] == 10.0
        assert data["recomputed_transactions"] == 0

    def test_delete_conflict(self, client, db, stock):
        first = post(db, stock, "10", date(2024, 1, 1))
        post(db, stock, "8", date(2024, 1, 2), transaction_type="OUT")

        response = client.delete(f"/transactions/{first.id}")

        assert response.status_code == 409
        assert response.json()["code"] == 409
        assert client.get(f"/transactions/{first.id}").status_code == 200
