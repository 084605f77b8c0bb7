# tradedesk/auth.py

from dataclasses import dataclass
from typing import Optional

import requests
from fastapi import Depends, Header

from tradedesk.config import Settings, get_settings
from tradedesk.errors import AuthenticationError, ForbiddenError
from logger import logger


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: Optional[str] = None


class SupabaseAuthClient:
    """
    Resolves bearer tokens to users through the managed auth provider.

    Uses the provider's ``GET /auth/v1/user`` endpoint, which answers 200 with
    the user record for a valid access token and 401/403 otherwise.
    """

    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_user(self, token: str) -> Optional[AuthenticatedUser]:
        try:
            response = self.session.get(
                f"{self.base_url}/auth/v1/user",
                headers={"Authorization": f"Bearer {token}", "apikey": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Auth provider unreachable: {e}")
            return None

        if response.status_code != 200:
            logger.info(f"Token rejected by auth provider (status {response.status_code})")
            return None

        payload = response.json()
        user_id = payload.get("id")
        if not user_id:
            return None
        return AuthenticatedUser(id=user_id, email=payload.get("email"))


_auth_client: Optional[SupabaseAuthClient] = None


def get_auth_client(settings: Settings = Depends(get_settings)) -> SupabaseAuthClient:
    global _auth_client
    if _auth_client is None:
        if not settings.supabase_url or not settings.supabase_anon_key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_ANON_KEY must be set to authenticate users.")
        _auth_client = SupabaseAuthClient(
            settings.supabase_url, settings.supabase_anon_key, timeout=settings.auth_timeout
        )
    return _auth_client


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
) -> AuthenticatedUser:
    """
    FastAPI dependency returning the caller identified by the bearer token.

    Raises:
        AuthenticationError: Missing header or token rejected by the provider.
    """
    if not authorization:
        raise AuthenticationError("No authorization header")

    token = authorization.replace("Bearer ", "", 1).strip()
    if not token:
        raise AuthenticationError("Unauthorized")

    user = auth_client.get_user(token)
    if user is None:
        raise AuthenticationError("Unauthorized")
    return user


def require_service_key(
    x_service_key: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Guards registry and price-feed endpoints when SERVICE_API_KEY is configured."""
    if settings.service_api_key and x_service_key != settings.service_api_key:
        raise ForbiddenError("Invalid service key")
