"""API routers package."""

from .health import router as health_router
from .access import router as access_router
from .accounts import router as accounts_router
from .strategies import router as strategies_router
from .admin import router as admin_router
from .billing import router as billing_router

__all__ = [
    "health_router",
    "access_router",
    "accounts_router",
    "strategies_router",
    "admin_router",
    "billing_router",
]
