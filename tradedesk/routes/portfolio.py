# tradedesk/routes/portfolio.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from tradedesk import schemas, crud
from tradedesk.auth import AuthenticatedUser, get_current_user
from tradedesk.database import get_db
from logger import logger

router = APIRouter(tags=["portfolio"])


@router.get("/portfolio", response_model=schemas.PortfolioResponse)
def get_portfolio(user: AuthenticatedUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    Retrieves the caller's holdings marked to the current agent prices.
    """
    logger.info(f"Valuing portfolio for user {user.id}.")
    return crud.get_portfolio(db, user.id)


@router.get("/balances", response_model=List[schemas.BalanceResponse])
def get_balances(user: AuthenticatedUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return crud.get_user_balances(db, user.id)


@router.get("/transactions", response_model=List[schemas.TransactionResponse])
def get_transactions(user: AuthenticatedUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    Retrieves the caller's settled trades, newest first.
    """
    logger.info(f"Fetching transactions for user {user.id}.")
    return crud.get_user_transactions(db, user.id)


@router.get("/notifications", response_model=List[schemas.NotificationResponse])
def get_notifications(user: AuthenticatedUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return crud.get_user_notifications(db, user.id)
