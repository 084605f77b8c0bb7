# tradedesk/models.py

import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, Integer, JSON, Numeric, String,
    UniqueConstraint,
)
from tradedesk.database import Base

# Monetary and quantity columns; returned as decimal.Decimal
Amount = Numeric(28, 10)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class Agent(Base):
    """Tradable instrument (an AI agent token) and its current quote."""
    __tablename__ = "agents"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    symbol = Column(String, nullable=False, index=True)
    price = Column(Amount, nullable=False)  # Latest quoted price
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("price > 0", name="check_agent_price_positive"),
    )


class Price(Base):
    __tablename__ = "prices"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    agent_id = Column(String, ForeignKey("agents.id"), nullable=False, index=True)
    value = Column(Float, nullable=False)  # Close price
    volume = Column(Float, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)


class Balance(Base):
    __tablename__ = "balances"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    currency = Column(String, nullable=False, default="USD")
    available = Column(Amount, nullable=False, default=0)
    version = Column(Integer, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "currency", name="uq_balance_user_currency"),
        CheckConstraint("available >= 0", name="check_balance_non_negative"),
    )
    __mapper_args__ = {"version_id_col": version}


class Holding(Base):
    __tablename__ = "holdings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    agent_id = Column(String, ForeignKey("agents.id"), nullable=False)
    quantity = Column(Amount, nullable=False)
    average_price = Column(Amount, nullable=False)
    total_invested = Column(Amount, nullable=False)
    realized_pnl = Column(Amount, nullable=False, default=0)
    version = Column(Integer, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "agent_id", name="uq_holding_user_agent"),
        CheckConstraint("quantity >= 0", name="check_holding_quantity_non_negative"),
    )
    __mapper_args__ = {"version_id_col": version}


class Order(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True, default=new_id)
    user_id = Column(String, nullable=False, index=True)
    agent_id = Column(String, ForeignKey("agents.id"), nullable=False)
    type = Column(String, nullable=False)  # market, limit, stop_loss, take_profit
    side = Column(String, nullable=False)  # "buy" or "sell"
    amount = Column(Amount, nullable=False)
    price = Column(Amount, nullable=True)
    status = Column(String, nullable=False, default="pending")
    filled_amount = Column(Amount, nullable=False, default=0)
    average_fill_price = Column(Amount, nullable=True)
    fees = Column(Amount, nullable=False, default=0)
    time_in_force = Column(String, nullable=False, default="GTC")
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("amount > 0", name="check_order_amount_positive"),
        CheckConstraint("filled_amount <= amount", name="check_order_filled_within_amount"),
    )


class Transaction(Base):
    """Append-only audit record, one per filled order."""
    __tablename__ = "transactions"

    id = Column(String, primary_key=True, default=new_id)
    user_id = Column(String, nullable=False, index=True)
    agent_id = Column(String, ForeignKey("agents.id"), nullable=False)
    order_id = Column(String, ForeignKey("orders.id"), nullable=False, unique=True)
    type = Column(String, nullable=False)  # "buy" or "sell"
    quantity = Column(Amount, nullable=False)
    price = Column(Amount, nullable=False)
    total_amount = Column(Amount, nullable=False)
    fees = Column(Amount, nullable=False)
    status = Column(String, nullable=False, default="completed")
    # "metadata" is reserved on declarative classes
    transaction_metadata = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    type = Column(String, nullable=False)
    category = Column(String, nullable=False, default="trading")
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class TrendAnalysis(Base):
    __tablename__ = "trend_analysis"

    id = Column(Integer, primary_key=True, autoincrement=True)
    agent_id = Column(String, ForeignKey("agents.id"), nullable=False, index=True)
    trend_direction = Column(String, nullable=False)
    trend_strength = Column(Float, nullable=False)
    trend_duration_hours = Column(Integer, nullable=False)
    support_levels = Column(JSON, nullable=False, default=list)
    resistance_levels = Column(JSON, nullable=False, default=list)
    detected_patterns = Column(JSON, nullable=False, default=list)
    pattern_confidence = Column(Float, nullable=False, default=0)
    rsi = Column(Float, nullable=False)
    macd = Column(Float, nullable=False)
    moving_avg_50 = Column(Float, nullable=False)
    moving_avg_200 = Column(Float, nullable=True)
    volume_trend = Column(String, nullable=False)
    predicted_price_24h = Column(Float, nullable=False)
    predicted_direction = Column(String, nullable=False)
    confidence_score = Column(Float, nullable=False)
    analysis_timestamp = Column(DateTime(timezone=True), default=utcnow)
