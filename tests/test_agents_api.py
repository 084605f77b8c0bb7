"""API tests for the agent registry, price feed and trend detector endpoints."""
from datetime import datetime, timedelta

from conftest import AGENT_ID
from tradedesk.config import Settings, get_settings
from tradedesk.main import app
from tradedesk.models import Price, TrendAnalysis


def test_root_and_health(client):
    assert client.get("/").status_code == 200
    assert client.get("/health").json() == {"status": "healthy"}


def test_register_and_fetch_agent(client):
    response = client.post("/agents", json={"name": "Alpha Sentinel", "symbol": "alpha", "price": 12.5})

    assert response.status_code == 200
    agent = response.json()
    assert agent["symbol"] == "ALPHA"
    assert agent["price"] == 12.5

    fetched = client.get(f"/agents/{agent['id']}").json()
    assert fetched["name"] == "Alpha Sentinel"
    assert [a["id"] for a in client.get("/agents").json()] == [agent["id"]]


def test_unknown_agent_is_404(client):
    response = client.get("/agents/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Agent not found", "agent_id": "nope"}


def test_latest_price_updates_quote(client, agent):
    client.post("/prices", json={"agent_id": AGENT_ID, "value": 55, "timestamp": "2026-01-02T00:00:00"})
    # an older point is stored but does not move the quote
    client.post("/prices", json={"agent_id": AGENT_ID, "value": 40, "timestamp": "2026-01-01T00:00:00"})

    assert client.get(f"/agents/{AGENT_ID}").json()["price"] == 55.0

    prices = client.get(f"/prices?agent_id={AGENT_ID}").json()
    assert [p["value"] for p in prices] == [40.0, 55.0]


def test_quote_follows_utc_order_across_offsets(client, agent):
    # 05:00Z, then 06:00Z written with a smaller wall-clock value
    client.post("/prices", json={"agent_id": AGENT_ID, "value": 55, "timestamp": "2026-01-01T10:00:00+05:00"})
    client.post("/prices", json={"agent_id": AGENT_ID, "value": 70, "timestamp": "2026-01-01T06:00:00+00:00"})
    assert client.get(f"/agents/{AGENT_ID}").json()["price"] == 70.0

    # 04:00Z is older than both
    client.post("/prices", json={"agent_id": AGENT_ID, "value": 30, "timestamp": "2025-12-31T23:00:00-05:00"})
    assert client.get(f"/agents/{AGENT_ID}").json()["price"] == 70.0

    prices = client.get(f"/prices?agent_id={AGENT_ID}").json()
    assert [p["value"] for p in prices] == [30.0, 55.0, 70.0]


def test_price_for_unknown_agent(client):
    response = client.post("/prices", json={"agent_id": "nope", "value": 1, "timestamp": "2026-01-01T00:00:00"})
    assert response.status_code == 404


def test_clear_prices(client, agent):
    client.post("/prices", json={"agent_id": AGENT_ID, "value": 55, "timestamp": "2026-01-02T00:00:00"})

    response = client.delete("/prices/clear")

    assert response.status_code == 200
    assert response.json()["message"] == "All price records have been cleared. Total deleted: 1"
    assert client.get("/prices").json() == []


def test_service_key_guards_registry_writes(client):
    app.dependency_overrides[get_settings] = lambda: Settings(database_url="sqlite://", service_api_key="s3cret")

    payload = {"name": "Guarded", "symbol": "GRD", "price": 1}
    assert client.post("/agents", json=payload).status_code == 403
    assert client.post("/agents", json=payload, headers={"X-Service-Key": "wrong"}).status_code == 403
    assert client.post("/agents", json=payload, headers={"X-Service-Key": "s3cret"}).status_code == 200
    # reads stay open
    assert client.get("/agents").status_code == 200


def seed_history(db, values):
    start = datetime(2026, 1, 1)
    for i, value in enumerate(values):
        db.add(Price(agent_id=AGENT_ID, value=value, volume=100.0, timestamp=start + timedelta(hours=i)))
    db.commit()


def test_trend_analysis_is_persisted(client, db, agent):
    seed_history(db, [float(v) for v in range(1, 251)])

    response = client.post(f"/agents/{AGENT_ID}/trend")

    assert response.status_code == 200
    analysis = response.json()
    assert analysis["trend_direction"] == "bullish"
    assert analysis["predicted_direction"] == "up"
    assert analysis["detected_patterns"] == ["ascending_triangle"]
    assert analysis["volume_trend"] == "stable"
    assert analysis["moving_avg_200"] is not None
    db.expire_all()
    assert db.query(TrendAnalysis).filter_by(agent_id=AGENT_ID).count() == 1


def test_trend_analysis_needs_history(client, db, agent):
    seed_history(db, [50.0] * 10)

    response = client.post(f"/agents/{AGENT_ID}/trend")

    assert response.status_code == 400
    assert response.json() == {
        "error": "Insufficient price history for trend analysis", "required": 50, "available": 10
    }
