"""FastAPI application factory."""

import json
import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Any, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi

from paywall import __version__
from paywall.constants import DEFAULT_API_PREFIX, DOCS_URL, OPENAPI_URL, REDOC_URL
from paywall.core.access import AccessService
from paywall.core.billing import SubscriptionSync
from paywall.db import DatabaseManager
from paywall.db.repositories import Repositories, build_repositories
from paywall.utils.env_utils import parse_bool_env

from .middleware import add_middleware, register_exception_handlers
from .routers import (
    health_router,
    access_router,
    accounts_router,
    strategies_router,
    admin_router,
    billing_router,
)

logger = logging.getLogger(__name__)

# =============================================================================
# OpenAPI Configuration
# =============================================================================

OPENAPI_TAGS = [
    {
        "name": "Health",
        "description": "Service health checks",
    },
    {
        "name": "Access",
        "description": "Access decisions and monthly view allowance",
    },
    {
        "name": "Accounts",
        "description": "The caller's own account record",
    },
    {
        "name": "Strategies",
        "description": "Strategy list (public), gated strategy details and saved strategies",
    },
    {
        "name": "Admin",
        "description": "Account and strategy maintenance (admin role only)",
    },
    {
        "name": "Billing",
        "description": "Subscription events forwarded by the billing relay",
    },
]

API_DESCRIPTION = """
Access control for paywalled trading strategies.

## Tiers
- **Curious Retail**: 3 distinct strategy views per calendar month (UTC)
- **Active Trader** / **Quant Edge**: unlimited
- **Admin**: unlimited, plus the admin console

---

## Authentication

### Headers
- `X-User-ID`: account id verified by the upstream identity provider (absent means unauthenticated)
- `X-API-Key`: API key (required if `API_KEY_REQUIRED=true`; always required for billing events)

---

## Response Format
- `success`: Boolean indicating operation success
- `error`: Error message (only present on failure)
- Gated strategy reads answer 401 (sign-in prompt) or 402 (upgrade prompt) when denied
"""


async def _startup(app: FastAPI) -> None:
    """Build the database manager, repositories and services on app.state."""
    if getattr(app.state, "repositories", None) is None:
        db = DatabaseManager()
        if db.enabled and not await db.test_connection():
            logger.warning("Database connection test failed; requests may fail closed")
        app.state.db = db
        app.state.repositories = build_repositories(db)

    repos: Repositories = app.state.repositories
    app.state.access_service = AccessService(repos.accounts, repos.usage)
    app.state.subscription_sync = SubscriptionSync(repos.accounts)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown events."""
    logger.info("Starting Strategy Paywall API...")

    await _startup(app)
    backend = "postgresql" if app.state.db is not None and app.state.db.enabled else "memory"
    logger.info(f"Access service ready (storage backend: {backend})")

    yield

    logger.info("Shutting down Strategy Paywall API...")

    if app.state.db is not None:
        try:
            await app.state.db.close()
        except Exception as e:
            logger.warning(f"Database cleanup error: {e}")

    logger.info("Shutdown complete")


def custom_openapi(app: FastAPI) -> Dict[str, Any]:
    """Generate custom OpenAPI schema with security schemes."""
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
        tags=OPENAPI_TAGS,
    )

    if "components" not in openapi_schema:
        openapi_schema["components"] = {}

    openapi_schema["components"]["securitySchemes"] = {
        "UserId": {
            "type": "apiKey",
            "in": "header",
            "name": "X-User-ID",
            "description": "Verified account id forwarded by the identity provider",
        },
        "ApiKey": {
            "type": "apiKey",
            "in": "header",
            "name": "X-API-Key",
            "description": "API key (required if API_KEY_REQUIRED=true, and for billing events)",
        },
    }

    app.openapi_schema = openapi_schema
    return app.openapi_schema


def _cors_origins() -> list:
    raw = os.getenv("CORS_ORIGINS", '["*"]')
    try:
        origins = json.loads(raw)
    except ValueError:
        logger.warning(f"Invalid CORS_ORIGINS value {raw!r}, allowing all origins")
        return ["*"]
    return origins if isinstance(origins, list) else [str(origins)]


def create_app(repositories: Optional[Repositories] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        repositories: Pre-built repositories. When omitted, the lifespan
            handler builds them from the database settings.
    """
    api_prefix = os.getenv("API_PREFIX", DEFAULT_API_PREFIX)
    debug = parse_bool_env("DEBUG", False)

    app = FastAPI(
        title="Strategy Paywall",
        description=API_DESCRIPTION,
        version=__version__,
        docs_url=DOCS_URL,
        redoc_url=REDOC_URL,
        openapi_url=OPENAPI_URL,
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        debug=debug,
    )
    app.state.db = None
    app.state.repositories = repositories

    app.openapi = lambda: custom_openapi(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Logging and error handling
    add_middleware(app)

    register_exception_handlers(app)

    app.include_router(
        health_router,
        tags=["Health"],
    )

    app.include_router(
        access_router,
        prefix=f"{api_prefix}/access",
        tags=["Access"],
    )

    app.include_router(
        accounts_router,
        prefix=f"{api_prefix}/accounts",
        tags=["Accounts"],
    )

    app.include_router(
        strategies_router,
        prefix=f"{api_prefix}/strategies",
        tags=["Strategies"],
    )

    app.include_router(
        admin_router,
        prefix=f"{api_prefix}/admin",
        tags=["Admin"],
    )

    app.include_router(
        billing_router,
        prefix=f"{api_prefix}/billing",
        tags=["Billing"],
    )

    return app
