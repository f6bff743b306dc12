"""Billing relay endpoint.

The relay verifies payment-processor signatures and forwards events here
with the service API key.
"""

import logging

from fastapi import APIRouter, Depends

from paywall.core.billing import SubscriptionEvent, SubscriptionSync

from ..dependencies import get_subscription_sync, require_api_key
from ..schemas.billing import SubscriptionEventResponse
from ..schemas.errors import BILLING_ERROR_RESPONSES

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(require_api_key)])


@router.post(
    "/subscription-events",
    response_model=SubscriptionEventResponse,
    responses=BILLING_ERROR_RESPONSES,
    operation_id="applySubscriptionEvent",
    summary="Apply a verified subscription event",
)
async def apply_subscription_event(
    event: SubscriptionEvent,
    sync: SubscriptionSync = Depends(get_subscription_sync),
):
    """
    Apply a checkout or subscription lifecycle event to account records.

    Unknown event types are acknowledged with ``handled=false`` so the relay
    does not retry them.
    """
    logger.info(f"Received billing event {event.id or '-'}: {event.type}")
    result = await sync.apply_event(event)

    return SubscriptionEventResponse(
        event_type=result.event_type,
        handled=result.handled,
        tier=result.tier,
        account_ids=result.account_ids,
    )
