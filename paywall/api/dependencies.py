"""Shared dependencies for API routes.

Identity: the upstream identity provider verifies the caller's token and
forwards the account id in ``X-User-ID``. No header means unauthenticated.

Services are built once in the application lifespan and read from
``app.state``; tests swap them with ``app.dependency_overrides``.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from paywall.constants import ADMIN_ROLE
from paywall.core.access import AccessService, Identity
from paywall.core.billing import SubscriptionSync
from paywall.db import DatabaseManager
from paywall.db.repositories import Repositories
from paywall.utils.env_utils import parse_bool_env

logger = logging.getLogger(__name__)


# =============================================================================
# Identity
# =============================================================================

async def get_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-ID")
) -> Optional[str]:
    """Extract the verified account id from the request header."""
    if x_user_id is None:
        return None
    return x_user_id.strip() or None


async def get_identity(
    user_id: Optional[str] = Depends(get_user_id),
) -> Optional[Identity]:
    """Caller identity, or None when unauthenticated."""
    if user_id is None:
        return None
    return Identity(account_id=user_id)


def get_request_time() -> datetime:
    """Timestamp used for usage periods (UTC)."""
    return datetime.now(timezone.utc)


# =============================================================================
# Service Dependencies (built in the lifespan handler)
# =============================================================================

def get_database(request: Request) -> Optional[DatabaseManager]:
    """Database manager for health checks."""
    return getattr(request.app.state, "db", None)


def get_repositories(request: Request) -> Repositories:
    """Repositories bound to this application."""
    return request.app.state.repositories


def get_access_service(request: Request) -> AccessService:
    """Access decision service bound to this application."""
    return request.app.state.access_service


def get_subscription_sync(request: Request) -> SubscriptionSync:
    """Billing event handler bound to this application."""
    return request.app.state.subscription_sync


# =============================================================================
# Authorization
# =============================================================================

async def require_identity(
    identity: Optional[Identity] = Depends(get_identity),
) -> Identity:
    """Require an authenticated caller (401 otherwise)."""
    if identity is None:
        raise HTTPException(
            status_code=401,
            detail="Authentication required. Provide X-User-ID header."
        )
    return identity


async def require_admin(
    identity: Identity = Depends(require_identity),
    service: AccessService = Depends(get_access_service),
) -> Identity:
    """
    Require a caller whose stored role is admin (403 otherwise).

    Admin text in the subscription tier grants unlimited viewing only, never
    the admin console.
    """
    account = await service.load_account(identity)
    role = account.role if account else None
    if role != ADMIN_ROLE:
        logger.warning(f"Admin access refused for {identity.account_id} (role={role})")
        raise HTTPException(
            status_code=403,
            detail="Admin role required"
        )
    return identity


# =============================================================================
# Optional API Key Authentication
# =============================================================================

def get_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key")
) -> Optional[str]:
    """
    Optional API key authentication.

    If API_KEY_REQUIRED is set to 'true' in environment, validates the key.
    Otherwise, returns the key for logging purposes.
    """
    api_key_required = parse_bool_env("API_KEY_REQUIRED", False)
    expected_key = os.getenv("API_KEY", "")

    if api_key_required:
        if not x_api_key:
            raise HTTPException(
                status_code=401,
                detail="API key required. Provide X-API-Key header."
            )
        if x_api_key != expected_key:
            raise HTTPException(
                status_code=403,
                detail="Invalid API key"
            )

    return x_api_key


def require_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key")
) -> str:
    """
    Mandatory API key for relay-only endpoints, regardless of API_KEY_REQUIRED.

    An unset API_KEY rejects every request.
    """
    expected_key = os.getenv("API_KEY", "")

    if not x_api_key:
        raise HTTPException(
            status_code=401,
            detail="API key required. Provide X-API-Key header."
        )
    if not expected_key or x_api_key != expected_key:
        raise HTTPException(
            status_code=403,
            detail="Invalid API key"
        )

    return x_api_key
