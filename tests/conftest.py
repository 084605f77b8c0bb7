"""Pytest fixtures for the trading API test-suite."""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("SERVICE_API_KEY", None)

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from tradedesk import models  # noqa: F401
from tradedesk.auth import AuthenticatedUser, get_auth_client
from tradedesk.database import Base, SessionLocal, engine
from tradedesk.main import app
from tradedesk.models import Agent, Balance

ALICE = "user-alice"
BOB = "user-bob"
AGENT_ID = "agent-x"


class FakeAuthClient:
    """Stands in for the auth provider: a fixed token to user mapping."""

    users = {
        "token-alice": AuthenticatedUser(id=ALICE, email="alice@example.com"),
        "token-bob": AuthenticatedUser(id=BOB, email="bob@example.com"),
    }

    def get_user(self, token):
        return self.users.get(token)


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    app.dependency_overrides[get_auth_client] = lambda: FakeAuthClient()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def alice_headers():
    return {"Authorization": "Bearer token-alice"}


@pytest.fixture
def bob_headers():
    return {"Authorization": "Bearer token-bob"}


@pytest.fixture
def agent(db):
    """Agent X quoted at $50."""
    db.add(Agent(id=AGENT_ID, name="Agent X", symbol="AGX", price=Decimal("50")))
    db.commit()
    return AGENT_ID


def fund(db, user_id, amount, currency="USD"):
    db.add(Balance(user_id=user_id, currency=currency, available=Decimal(amount)))
    db.commit()


@pytest.fixture
def funded_alice(db, agent):
    fund(db, ALICE, "1000")
    return ALICE
