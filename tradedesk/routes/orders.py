# tradedesk/routes/orders.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from tradedesk import schemas, crud
from tradedesk.auth import AuthenticatedUser, get_current_user
from tradedesk.config import Settings, get_settings
from tradedesk.database import get_db
from tradedesk.settlement import OrderSettlementService, SettlementConfig
from logger import logger

router = APIRouter(
    prefix="/orders",
    tags=["orders"]
)


def get_settlement_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> OrderSettlementService:
    config = SettlementConfig(fee_rate=settings.fee_rate, currency=settings.settlement_currency)
    return OrderSettlementService(db, config)


@router.post("", response_model=schemas.OrderResult)
def place_order(
    order: schemas.OrderRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: OrderSettlementService = Depends(get_settlement_service),
):
    """
    Prices, validates and settles an order for the authenticated user.
    """
    logger.info(f"Received Order Data from user {user.id}: {order}")
    order_record, execution = service.place_order(user.id, order)
    return {
        "success": True,
        "order": order_record,
        "execution_price": execution.price,
        "fees": execution.fee,
        "net_amount": execution.net_amount
    }


@router.get("", response_model=List[schemas.OrderResponse])
def get_orders(
    status: Optional[str] = None,
    user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Retrieves the caller's orders, newest first.
    """
    logger.info(f"Fetching orders for user {user.id}.")
    return crud.get_user_orders(db, user.id, status)


@router.post("/{order_id}/cancel", response_model=schemas.OrderResponse)
def cancel_order(
    order_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: OrderSettlementService = Depends(get_settlement_service),
):
    """
    Cancels a pending order owned by the caller.
    """
    logger.info(f"User {user.id} cancelling order {order_id}")
    return service.cancel_order(user.id, order_id)
