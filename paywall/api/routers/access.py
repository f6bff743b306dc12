"""Access decision and usage status endpoints."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends

from paywall.core.access import AccessService, Identity

from ..dependencies import get_access_service, get_identity, get_request_time
from ..schemas.access import (
    AccessDecisionRequest,
    AccessDecisionResponse,
    UsageStatusResponse,
)
from ..schemas.errors import BASE_ERROR_RESPONSES

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/decide",
    response_model=AccessDecisionResponse,
    responses=BASE_ERROR_RESPONSES,
    operation_id="decideAccess",
    summary="Decide access to a strategy",
)
async def decide_access(
    request: AccessDecisionRequest,
    identity: Optional[Identity] = Depends(get_identity),
    service: AccessService = Depends(get_access_service),
    now: datetime = Depends(get_request_time),
):
    """
    Decide whether the caller may view a strategy.

    A granted decision for a Curious Retail caller records the view against
    the current month. Denials come back as a normal response with
    ``granted=false`` and a ``reason`` of ``unauthenticated`` or
    ``quota_exceeded``.
    """
    decision = await service.decide_access(identity, request.resource_id, now)

    return AccessDecisionResponse(
        resource_id=request.resource_id,
        granted=decision.granted,
        reason=decision.reason,
        tier=decision.tier,
    )


@router.get(
    "/usage",
    response_model=UsageStatusResponse,
    operation_id="getUsageStatus",
    summary="Get the caller's monthly view allowance",
)
async def get_usage_status(
    identity: Optional[Identity] = Depends(get_identity),
    service: AccessService = Depends(get_access_service),
    now: datetime = Depends(get_request_time),
):
    """Report tier, period, and views used/remaining. Records nothing."""
    status = await service.get_usage_status(identity, now)

    return UsageStatusResponse(
        tier=status.tier,
        period_key=status.period_key,
        views_used=status.views_used,
        limit=status.limit,
        remaining=status.remaining,
        viewed_resource_ids=status.viewed_resource_ids,
        degraded=status.degraded,
    )
