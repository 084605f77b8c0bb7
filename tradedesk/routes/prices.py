# tradedesk/routes/prices.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from tradedesk import schemas, crud
from tradedesk.auth import require_service_key
from tradedesk.database import get_db
from logger import logger

router = APIRouter(
    prefix="/prices",
    tags=["prices"]
)


@router.post("", response_model=schemas.PriceResponse, dependencies=[Depends(require_service_key)])
def add_price(price: schemas.PriceCreate, db: Session = Depends(get_db)):
    """
    Adds a new price record and refreshes the agent's quote.
    """
    logger.info(f"Received Price Data: {price}")
    return crud.create_price(db, price)


@router.get("", response_model=List[schemas.PriceResponse])
def get_prices(agent_id: Optional[str] = None, db: Session = Depends(get_db)):
    """
    Retrieves price records, optionally for a single agent.
    """
    logger.info("Fetching price records.")
    return crud.get_prices(db, agent_id)


@router.delete("/clear", response_model=schemas.APIResponse, dependencies=[Depends(require_service_key)])
def clear_prices(db: Session = Depends(get_db)):
    """
    Deletes all price records from the database.
    """
    logger.info("Clearing all price records.")
    deleted = crud.clear_all_prices(db)
    logger.info(f"All price records have been cleared. Total deleted: {deleted}")
    return {
        "status": "success",
        "message": f"All price records have been cleared. Total deleted: {deleted}"
    }
