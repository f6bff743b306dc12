"""
Tier resolution for account records.

Account records carry a free-text ``subscription_tier`` written over time by
the admin console, the checkout sync and the billing webhooks, so the same
plan shows up as "Active Trader", "active trader" or the legacy "active".
All of that string matching lives in ``resolve_tier`` and nowhere else.
"""

from enum import Enum
from typing import Any, Optional

from paywall.constants import ADMIN_ROLE


class Tier(str, Enum):
    """Normalized access tier."""
    NONE = "none"
    CURIOUS = "curious"
    ACTIVE = "active"
    QUANT = "quant"
    ADMIN = "admin"


class DenialReason(str, Enum):
    """User-facing reason attached to a denied decision."""
    UNAUTHENTICATED = "unauthenticated"
    QUOTA_EXCEEDED = "quota_exceeded"


# Tiers with a bounded monthly allowance of distinct strategy views
QUOTA_BOUND_TIERS = frozenset({Tier.CURIOUS})


def resolve_tier(account: Optional[Any]) -> Tier:
    """
    Map raw account data to a normalized tier.

    First match wins:
    absent account -> NONE, admin role -> ADMIN, then substring checks on the
    lower-cased tier text for "admin", "quant", "active" and "curious".
    Anything else (null, empty, unknown, non-string) resolves to NONE.

    Args:
        account: An ``Account`` (or any object with ``role`` and
            ``subscription_tier`` attributes), or None when unauthenticated

    Returns:
        The resolved Tier. Never raises.
    """
    if account is None:
        return Tier.NONE

    role = getattr(account, "role", None)
    if role == ADMIN_ROLE:
        return Tier.ADMIN

    raw_tier = getattr(account, "subscription_tier", None)
    if not isinstance(raw_tier, str):
        return Tier.NONE

    tier_text = raw_tier.lower()

    if "admin" in tier_text:
        return Tier.ADMIN
    if "quant" in tier_text:
        return Tier.QUANT
    if "active" in tier_text:
        return Tier.ACTIVE
    if "curious" in tier_text:
        return Tier.CURIOUS

    return Tier.NONE


def is_quota_bound(tier: Tier) -> bool:
    """Return True if the tier is metered by the monthly view quota."""
    return tier in QUOTA_BOUND_TIERS
