# tradedesk/routes/agents.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from tradedesk import schemas, crud, logic
from tradedesk.auth import require_service_key
from tradedesk.database import get_db
from logger import logger

router = APIRouter(
    prefix="/agents",
    tags=["agents"]
)


@router.post("", response_model=schemas.AgentResponse, dependencies=[Depends(require_service_key)])
def add_agent(agent: schemas.AgentCreate, db: Session = Depends(get_db)):
    """
    Registers a tradable agent with its initial price.
    """
    logger.info(f"Received Agent Data: {agent}")
    return crud.create_agent(db, agent)


@router.get("", response_model=List[schemas.AgentResponse])
def get_agents(db: Session = Depends(get_db)):
    return crud.get_all_agents(db)


@router.get("/{agent_id}", response_model=schemas.AgentResponse)
def get_agent(agent_id: str, db: Session = Depends(get_db)):
    return crud.get_agent(db, agent_id)


@router.post(
    "/{agent_id}/trend",
    response_model=schemas.TrendAnalysisResponse,
    dependencies=[Depends(require_service_key)],
)
def analyze_agent_trend(agent_id: str, db: Session = Depends(get_db)):
    """
    Runs the trend detector over the agent's stored price history.
    """
    crud.get_agent(db, agent_id)
    return logic.run_trend_analysis(agent_id, db)
