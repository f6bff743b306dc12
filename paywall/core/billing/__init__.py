"""Billing integration: applies subscription events to account records."""

from .subscription_sync import (
    SubscriptionEvent,
    SubscriptionSync,
    SyncResult,
    default_price_tiers,
)

__all__ = [
    "SubscriptionEvent",
    "SubscriptionSync",
    "SyncResult",
    "default_price_tiers",
]
