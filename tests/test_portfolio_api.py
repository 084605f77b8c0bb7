"""API tests for portfolio valuation, balances, transactions and notifications."""

from conftest import AGENT_ID, BOB


def place(client, headers, side, amount, price=None):
    body = {"agent_id": AGENT_ID, "type": "limit" if price else "market", "side": side, "amount": amount}
    if price:
        body["price"] = price
    response = client.post("/orders", json=body, headers=headers)
    assert response.status_code == 200, response.json()
    return response.json()


def test_portfolio_is_marked_to_market(client, funded_alice, alice_headers):
    place(client, alice_headers, "buy", 10)
    response = client.post(
        "/prices", json={"agent_id": AGENT_ID, "value": 60, "timestamp": "2026-01-01T00:00:00"}
    )
    assert response.status_code == 200

    portfolio = client.get("/portfolio", headers=alice_headers).json()

    assert len(portfolio["holdings"]) == 1
    holding = portfolio["holdings"][0]
    assert holding["agent_symbol"] == "AGX"
    assert holding["quantity"] == 10.0
    assert holding["average_price"] == 50.0
    assert holding["current_price"] == 60.0
    assert holding["current_value"] == 600.0
    assert holding["unrealized_pnl"] == 100.0
    assert portfolio["total_invested"] == 500.0
    assert portfolio["total_value"] == 600.0
    assert portfolio["unrealized_pnl"] == 100.0
    assert portfolio["realized_pnl"] == 0.0


def test_partial_sell_keeps_average_price_and_books_realized_pnl(client, funded_alice, alice_headers):
    place(client, alice_headers, "buy", 10)
    place(client, alice_headers, "sell", 4, price=60)

    holding = client.get("/portfolio", headers=alice_headers).json()["holdings"][0]

    assert holding["quantity"] == 6.0
    assert holding["average_price"] == 50.0
    assert holding["total_invested"] == 300.0
    assert holding["realized_pnl"] == 40.0


def test_empty_portfolio(client, funded_alice, bob_headers):
    portfolio = client.get("/portfolio", headers=bob_headers).json()
    assert portfolio == {
        "holdings": [], "total_invested": 0.0, "total_value": 0.0, "unrealized_pnl": 0.0, "realized_pnl": 0.0
    }


def test_balances(client, funded_alice, alice_headers):
    place(client, alice_headers, "buy", 10)

    balances = client.get("/balances", headers=alice_headers).json()

    assert len(balances) == 1
    assert balances[0]["currency"] == "USD"
    assert balances[0]["available"] == 499.5


def test_transactions_reference_orders(client, funded_alice, alice_headers):
    order = place(client, alice_headers, "buy", 10)["order"]

    transactions = client.get("/transactions", headers=alice_headers).json()

    assert len(transactions) == 1
    transaction = transactions[0]
    assert transaction["order_id"] == order["id"]
    assert transaction["type"] == "buy"
    assert transaction["total_amount"] == 500.0
    assert transaction["fees"] == 0.5
    assert transaction["status"] == "completed"
    assert transaction["metadata"] == {"order_type": "market", "time_in_force": "GTC"}


def test_fill_notification(client, funded_alice, alice_headers, bob_headers):
    order = place(client, alice_headers, "buy", 10)["order"]

    notifications = client.get("/notifications", headers=alice_headers).json()

    assert len(notifications) == 1
    assert notifications[0]["title"] == "Order Filled"
    assert notifications[0]["message"] == "Your buy order for 10 units has been filled at $50.0000"
    assert notifications[0]["data"]["order_id"] == order["id"]
    assert notifications[0]["read"] is False
    assert client.get("/notifications", headers=bob_headers).json() == []


def test_ledger_endpoints_require_auth(client):
    for path in ("/portfolio", "/balances", "/transactions", "/notifications", "/orders"):
        response = client.get(path)
        assert response.status_code == 401, path


def test_other_users_see_nothing(client, funded_alice, alice_headers, bob_headers):
    place(client, alice_headers, "buy", 10)

    assert client.get("/transactions", headers=bob_headers).json() == []
    assert client.get("/balances", headers=bob_headers).json() == []
    assert BOB not in {o["user_id"] for o in client.get("/orders", headers=alice_headers).json()}
