# tradedesk/crud.py

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session
from tradedesk.errors import NotFoundError
from tradedesk.models import Agent, Balance, Holding, Notification, Order, Price, Transaction
from tradedesk.schemas import AgentCreate, PriceCreate


def create_agent(db: Session, agent: AgentCreate) -> Agent:
    """
    Registers a new tradable agent.

    Args:
        db (Session): SQLAlchemy session.
        agent (AgentCreate): Agent data.

    Returns:
        Agent: The created agent.
    """
    agent_record = Agent(
        name=agent.name,
        symbol=agent.symbol.upper(),
        price=agent.price
    )
    db.add(agent_record)
    db.commit()
    db.refresh(agent_record)
    return agent_record


def get_agent(db: Session, agent_id: str) -> Agent:
    agent = db.get(Agent, agent_id)
    if agent is None:
        raise NotFoundError("Agent not found", agent_id=agent_id)
    return agent


def get_all_agents(db: Session) -> List[Agent]:
    return db.query(Agent).order_by(Agent.symbol).all()


def create_price(db: Session, price: PriceCreate) -> Price:
    """
    Appends a price point and moves the agent's quote to it when it is the newest one.

    Args:
        db (Session): SQLAlchemy session.
        price (PriceCreate): Price data.

    Returns:
        Price: The created price record.
    """
    agent = get_agent(db, price.agent_id)
    timestamp = as_utc(price.timestamp)
    latest = (
        db.query(Price)
        .filter(Price.agent_id == agent.id)
        .order_by(Price.timestamp.desc())
        .first()
    )

    price_record = Price(
        agent_id=agent.id,
        value=price.value,
        volume=price.volume,
        timestamp=timestamp
    )
    db.add(price_record)
    if latest is None or timestamp >= as_utc(latest.timestamp):
        agent.price = Decimal(str(price.value))
    db.commit()
    db.refresh(price_record)
    return price_record


def as_utc(timestamp: datetime) -> datetime:
    # naive timestamps are taken to be UTC already
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


def get_prices(db: Session, agent_id: Optional[str] = None) -> List[Price]:
    """
    Retrieves price records, oldest first.

    Args:
        db (Session): SQLAlchemy session.
        agent_id (Optional[str]): Restrict to one agent.

    Returns:
        list[Price]: List of price records.
    """
    query = db.query(Price)
    if agent_id:
        query = query.filter(Price.agent_id == agent_id)
    return query.order_by(Price.timestamp).all()


def clear_all_prices(db: Session) -> int:
    """
    Deletes all price records from the database.

    Returns:
        int: Number of records deleted.
    """
    deleted = db.query(Price).delete()
    db.commit()
    return deleted


def get_user_orders(db: Session, user_id: str, status: Optional[str] = None) -> List[Order]:
    query = db.query(Order).filter(Order.user_id == user_id)
    if status:
        query = query.filter(Order.status == status)
    return query.order_by(Order.created_at.desc()).all()


def get_user_balances(db: Session, user_id: str) -> List[Balance]:
    return db.query(Balance).filter(Balance.user_id == user_id).order_by(Balance.currency).all()


def get_user_holdings(db: Session, user_id: str) -> List[tuple]:
    """
    Retrieves the user's holdings together with their agents.

    Returns:
        list[tuple[Holding, Agent]]: Holding and agent pairs.
    """
    return (
        db.query(Holding, Agent)
        .join(Agent, Agent.id == Holding.agent_id)
        .filter(Holding.user_id == user_id)
        .order_by(Agent.symbol)
        .all()
    )


def get_user_transactions(db: Session, user_id: str) -> List[Transaction]:
    return (
        db.query(Transaction)
        .filter(Transaction.user_id == user_id)
        .order_by(Transaction.created_at.desc())
        .all()
    )


def get_user_notifications(db: Session, user_id: str) -> List[Notification]:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )


def get_portfolio(db: Session, user_id: str) -> dict:
    """
    Marks the user's holdings to the agents' current quotes.

    Returns:
        dict: Holdings with current value and unrealized P&L, plus totals.
    """
    holdings = []
    total_invested = Decimal(0)
    total_value = Decimal(0)
    realized_pnl = Decimal(0)

    for holding, agent in get_user_holdings(db, user_id):
        quantity = Decimal(holding.quantity)
        invested = Decimal(holding.total_invested)
        current_value = quantity * Decimal(agent.price)

        holdings.append({
            "agent_id": agent.id,
            "agent_name": agent.name,
            "agent_symbol": agent.symbol,
            "quantity": quantity,
            "average_price": holding.average_price,
            "total_invested": invested,
            "realized_pnl": holding.realized_pnl,
            "current_price": agent.price,
            "current_value": current_value,
            "unrealized_pnl": current_value - invested,
        })
        total_invested += invested
        total_value += current_value
        realized_pnl += Decimal(holding.realized_pnl)

    return {
        "holdings": holdings,
        "total_invested": total_invested,
        "total_value": total_value,
        "unrealized_pnl": total_value - total_invested,
        "realized_pnl": realized_pnl,
    }
