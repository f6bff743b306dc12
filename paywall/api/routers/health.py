"""Health check API endpoint."""

import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from fastapi import APIRouter, Depends

from paywall import __version__
from paywall.db import DatabaseManager

from ..dependencies import get_database
from ..schemas.common import HealthStatus

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get(
    "/health",
    response_model=HealthStatus,
    operation_id="getHealth",
    summary="Check service health",
)
async def health_check(db: Optional[DatabaseManager] = Depends(get_database)):
    """
    Check the health of the service's storage.

    **No authentication required.**

    With DATABASE_ENABLED=false the service runs on the in-memory store and
    the database component reports "disabled".
    """
    components: Dict[str, Dict[str, Any]] = {}

    if db is None or not db.enabled:
        components["database"] = {
            "status": "disabled",
            "message": "In-memory store"
        }
    elif await db.test_connection(timeout=5.0):
        components["database"] = {
            "status": "healthy",
            "message": "Connected"
        }
    else:
        components["database"] = {
            "status": "unhealthy",
            "message": "Connection test failed"
        }

    unhealthy = any(
        c.get("status") == "unhealthy"
        for c in components.values()
    )

    return HealthStatus(
        status="unhealthy" if unhealthy else "healthy",
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        components=components,
    )
