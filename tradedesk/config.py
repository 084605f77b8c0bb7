# tradedesk/config.py

import os
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from typing import Optional


@dataclass(frozen=True)
class Settings:
    database_url: str
    fee_rate: Decimal = Decimal("0.001")
    settlement_currency: str = "USD"
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    auth_timeout: float = 10.0
    service_api_key: Optional[str] = None
    db_max_retries: int = 5
    db_retry_interval: int = 5  # seconds
    port: int = 8000


def normalize_database_url(url: str) -> str:
    """
    Rewrites Heroku-style 'postgres://' URLs into the scheme SQLAlchemy expects.

    Args:
        url (str): Raw database URL.

    Returns:
        str: URL usable by create_engine.
    """
    if url.startswith('postgres://'):
        return url.replace('postgres://', 'postgresql://', 1)
    return url


@lru_cache()
def get_settings() -> Settings:
    """
    Builds the application settings from environment variables.

    Returns:
        Settings: The process-wide settings.
    """
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise RuntimeError("DATABASE_URL is not set. Please set it in your environment.")

    return Settings(
        database_url=normalize_database_url(database_url),
        fee_rate=Decimal(os.getenv("FEE_RATE", "0.001")),
        settlement_currency=os.getenv("SETTLEMENT_CURRENCY", "USD").upper(),
        supabase_url=os.getenv("SUPABASE_URL"),
        supabase_anon_key=os.getenv("SUPABASE_ANON_KEY"),
        auth_timeout=float(os.getenv("AUTH_TIMEOUT", "10")),
        service_api_key=os.getenv("SERVICE_API_KEY") or None,
        db_max_retries=int(os.getenv("DB_MAX_RETRIES", "5")),
        db_retry_interval=int(os.getenv("DB_RETRY_INTERVAL", "5")),
        port=int(os.getenv('PORT', 8000)),
    )
