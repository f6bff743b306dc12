"""
SubscriptionSync - applies payment-processor subscription events to accounts.

Events arrive already verified by the billing relay (signature checks are
the relay's job). This module only maps event contents onto account
records; the access core later reads the resulting ``subscription_tier``.

Handled event types:
- checkout.session.completed: link customer/subscription ids to an account
- customer.subscription.created / updated: write the plan's tier
- customer.subscription.deleted: downgrade to free
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from paywall.constants import (
    EVENT_CHECKOUT_COMPLETED,
    EVENT_SUBSCRIPTION_CREATED,
    EVENT_SUBSCRIPTION_DELETED,
    EVENT_SUBSCRIPTION_UPDATED,
    STRIPE_STATUS_CANCELED,
    TIER_NAME_ACTIVE,
    TIER_NAME_CURIOUS,
    TIER_NAME_FREE,
    TIER_NAME_QUANT,
)
from paywall.core.access.schemas import AccountUpdate
from paywall.db.repositories.base import AccountRepository
from paywall.utils.env_utils import parse_str_env

logger = logging.getLogger(__name__)


def default_price_tiers() -> Dict[str, str]:
    """Price id -> tier name map from STRIPE_PRICE_* settings."""
    mapping = {
        parse_str_env("STRIPE_PRICE_CURIOUS", "price_1STvdFDATCpMStKark5BCxZ5"): TIER_NAME_CURIOUS,
        parse_str_env("STRIPE_PRICE_ACTIVE", "price_1STvdmDATCpMStKax7SvIXGp"): TIER_NAME_ACTIVE,
        parse_str_env("STRIPE_PRICE_QUANT", "price_1STveGDATCpMStKaynj3Y0N6"): TIER_NAME_QUANT,
    }
    return {price: tier for price, tier in mapping.items() if price}


class SubscriptionEvent(BaseModel):
    """Relay-verified payment-processor event."""
    id: Optional[str] = None
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)

    @property
    def object(self) -> Dict[str, Any]:
        return self.data.get("object") or {}


class SyncResult(BaseModel):
    """Outcome of applying one event."""
    event_type: str
    handled: bool = False
    tier: Optional[str] = None
    account_ids: List[str] = Field(default_factory=list)


def _first_item(subscription: Dict[str, Any]) -> Dict[str, Any]:
    items = (subscription.get("items") or {}).get("data") or []
    return items[0] if items else {}


def _period_end(subscription: Dict[str, Any]) -> Optional[datetime]:
    raw = subscription.get("current_period_end") or _first_item(subscription).get(
        "current_period_end"
    )
    if raw is None:
        return None
    return datetime.fromtimestamp(int(raw), tz=timezone.utc)


class SubscriptionSync:
    """Maps subscription events onto account records."""

    def __init__(
        self,
        accounts: AccountRepository,
        price_tiers: Optional[Dict[str, str]] = None,
    ):
        self._accounts = accounts
        self._price_tiers = price_tiers if price_tiers is not None else default_price_tiers()

    def tier_for_price(self, price_id: Optional[str]) -> str:
        """Tier name for a price id; unknown prices map to free."""
        return self._price_tiers.get(price_id or "", TIER_NAME_FREE)

    async def apply_event(self, event: SubscriptionEvent) -> SyncResult:
        """
        Apply one event.

        Returns:
            SyncResult; ``handled`` is False for ignored event types or
            events that match no account
        """
        if event.type == EVENT_CHECKOUT_COMPLETED:
            return await self._link_checkout(event)
        if event.type in (EVENT_SUBSCRIPTION_CREATED, EVENT_SUBSCRIPTION_UPDATED):
            return await self._sync_subscription(event, force_cancel=False)
        if event.type == EVENT_SUBSCRIPTION_DELETED:
            return await self._sync_subscription(event, force_cancel=True)

        logger.debug(f"Ignoring billing event type {event.type}")
        return SyncResult(event_type=event.type)

    async def _link_checkout(self, event: SubscriptionEvent) -> SyncResult:
        session = event.object
        customer_id = session.get("customer")
        subscription_id = session.get("subscription")
        uid = (session.get("metadata") or {}).get("firebaseUid")
        email = (session.get("customer_details") or {}).get("email")

        update = AccountUpdate(
            stripe_customer_id=customer_id,
            stripe_subscription_id=subscription_id,
        )

        account_ids: List[str] = []
        if uid:
            if await self._accounts.update_account(uid, update):
                account_ids.append(uid)
        elif email:
            for account in await self._accounts.find_by_email(email):
                await self._accounts.update_account(account.id, update)
                account_ids.append(account.id)

        if not account_ids:
            logger.warning(
                f"Checkout {session.get('id')} matched no account "
                f"(uid={uid}, email={email})"
            )
            return SyncResult(event_type=event.type)

        logger.info(f"Linked customer {customer_id} to accounts {account_ids}")
        return SyncResult(event_type=event.type, handled=True, account_ids=account_ids)

    async def _sync_subscription(self, event: SubscriptionEvent, force_cancel: bool) -> SyncResult:
        subscription = event.object
        customer_id = subscription.get("customer")
        price_id = (_first_item(subscription).get("price") or {}).get("id")

        if not customer_id or not price_id:
            logger.error(f"Subscription {subscription.get('id')} has no customer or price id")
            return SyncResult(event_type=event.type)

        status = subscription.get("status")
        tier = self.tier_for_price(price_id)
        if force_cancel or status == STRIPE_STATUS_CANCELED:
            tier = TIER_NAME_FREE

        accounts = await self._accounts.find_by_customer_id(customer_id)
        if not accounts:
            logger.info(f"No account found for customer {customer_id}")
            return SyncResult(event_type=event.type, tier=tier)

        update = AccountUpdate(
            subscription_tier=tier,
            stripe_subscription_id=subscription.get("id"),
            stripe_status=status,
            current_period_end=_period_end(subscription),
        )
        for account in accounts:
            await self._accounts.update_account(account.id, update)

        account_ids = [account.id for account in accounts]
        logger.info(f"Synced subscription for customer {customer_id} to tier: {tier}")
        return SyncResult(event_type=event.type, handled=True, tier=tier, account_ids=account_ids)
