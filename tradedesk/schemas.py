# tradedesk/schemas.py

from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Literal

OrderType = Literal["market", "limit", "stop_loss", "take_profit"]
OrderSide = Literal["buy", "sell"]
TimeInForce = Literal["GTC", "IOC", "FOK", "DAY"]


class OrderRequest(BaseModel):
    agent_id: str = Field(min_length=1)
    type: OrderType = "market"
    side: OrderSide
    amount: Decimal = Field(gt=0, max_digits=28, decimal_places=10)
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=28, decimal_places=10)
    time_in_force: TimeInForce = "GTC"

    class Config:
        json_schema_extra = {
            "example": {
                "agent_id": "0b6f8a52-6c1e-4c1b-9d2e-5a1f0f8e7c11",
                "type": "market",
                "side": "buy",
                "amount": 10,
                "time_in_force": "GTC"
            }
        }


class OrderResponse(BaseModel):
    id: str
    user_id: str
    agent_id: str
    type: str
    side: str
    amount: float
    price: Optional[float]
    status: str
    filled_amount: float
    average_fill_price: Optional[float]
    fees: float
    time_in_force: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class OrderResult(BaseModel):
    success: bool = True
    order: OrderResponse
    execution_price: float
    fees: float
    net_amount: float


class HoldingResponse(BaseModel):
    agent_id: str
    agent_name: Optional[str] = None
    agent_symbol: Optional[str] = None
    quantity: float
    average_price: float
    total_invested: float
    realized_pnl: float
    current_price: Optional[float] = None
    current_value: Optional[float] = None
    unrealized_pnl: Optional[float] = None


class PortfolioResponse(BaseModel):
    holdings: List[HoldingResponse]
    total_invested: float
    total_value: float
    unrealized_pnl: float
    realized_pnl: float


class BalanceResponse(BaseModel):
    currency: str
    available: float
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class TransactionResponse(BaseModel):
    id: str
    agent_id: str
    order_id: str
    type: str
    quantity: float
    price: float
    total_amount: float
    fees: float
    status: str
    metadata: dict = Field(validation_alias="transaction_metadata")
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class NotificationResponse(BaseModel):
    id: int
    type: str
    category: str
    title: str
    message: str
    data: dict
    read: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class AgentCreate(BaseModel):
    name: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    price: Decimal = Field(gt=0)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Alpha Sentinel",
                "symbol": "ALPHA",
                "price": 50.0
            }
        }


class AgentResponse(BaseModel):
    id: str
    name: str
    symbol: str
    price: float
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class PriceCreate(BaseModel):
    agent_id: str
    value: float = Field(gt=0)
    volume: Optional[float] = Field(default=None, ge=0)
    timestamp: datetime

    class Config:
        json_schema_extra = {
            "example": {
                "agent_id": "0b6f8a52-6c1e-4c1b-9d2e-5a1f0f8e7c11",
                "value": 50.25,
                "volume": 1200.0,
                "timestamp": "2024-12-04T15:30:00"
            }
        }


class PriceResponse(BaseModel):
    id: int
    agent_id: str
    value: float
    volume: Optional[float]
    timestamp: datetime

    class Config:
        from_attributes = True


class TrendAnalysisResponse(BaseModel):
    id: int
    agent_id: str
    trend_direction: str
    trend_strength: float
    trend_duration_hours: int
    support_levels: List[float]
    resistance_levels: List[float]
    detected_patterns: List[str]
    pattern_confidence: float
    rsi: float
    macd: float
    moving_avg_50: float
    moving_avg_200: Optional[float]
    volume_trend: str
    predicted_price_24h: float
    predicted_direction: str
    confidence_score: float
    analysis_timestamp: Optional[datetime]

    class Config:
        from_attributes = True


class APIResponse(BaseModel):
    status: str
    data: Optional[dict] = None
    message: Optional[str] = None
    error: Optional[str] = None
