# tradedesk/database.py

import time
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool
from tradedesk.config import get_settings
from logger import logger


def build_engine(database_url: str) -> Engine:
    """
    Creates the SQLAlchemy engine for the configured database.

    SQLite (used by the test-suite) gets a single shared connection so that an
    in-memory database survives across sessions; every other backend gets a
    regular connection pool.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, pool_size=10, max_overflow=20, pool_pre_ping=True)


# SQLAlchemy setup
Base = declarative_base()
engine = build_engine(get_settings().database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """
    Waits for the database to accept connections and creates missing tables.

    Raises:
        OperationalError: If the database is still unreachable after the
            configured number of attempts.
    """
    from tradedesk import models  # noqa: F401  (registers tables on Base.metadata)

    settings = get_settings()
    for attempt in range(settings.db_max_retries):
        try:
            Base.metadata.create_all(bind=engine)
            logger.info("Database connected and tables created successfully.")
            return
        except OperationalError as oe:
            if attempt < settings.db_max_retries - 1:
                logger.warning(
                    f"Database connection failed on attempt {attempt + 1}. "
                    f"Retrying in {settings.db_retry_interval} seconds..."
                )
                time.sleep(settings.db_retry_interval)
            else:
                logger.error("Max retries reached. Exiting.")
                raise oe


# Dependency to get database session
def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
