"""
Pydantic schemas for access control and usage metering.

Provides the account snapshot, usage period and decision models shared by
the access core, the repositories and the API layer.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, Set

from pydantic import BaseModel, ConfigDict, Field

from .tiers import DenialReason, Tier


@dataclass(frozen=True)
class Identity:
    """Verified caller identity forwarded by the identity provider."""
    account_id: str
    email: Optional[str] = None


class Account(BaseModel):
    """Registered user as stored in the accounts table."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    role: Optional[str] = None
    subscription_tier: Optional[str] = None

    # Billing linkage (written by subscription sync)
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    stripe_status: Optional[str] = None
    current_period_end: Optional[datetime] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AccountUpdate(BaseModel):
    """Partial account update applied by admins or billing sync."""
    email: Optional[str] = None
    role: Optional[str] = None
    subscription_tier: Optional[str] = None
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    stripe_status: Optional[str] = None
    current_period_end: Optional[datetime] = None


class UsagePeriod(BaseModel):
    """One account's strategy views for one calendar month."""
    account_id: str
    period_key: str
    viewed_resource_ids: Set[str] = Field(default_factory=set)
    updated_at: Optional[datetime] = None


class AccessDecision(BaseModel):
    """
    Tagged access result: granted, or denied with a reason.

    Use ``AccessDecision.grant()`` / ``AccessDecision.deny()`` rather than
    building one directly.
    """
    model_config = ConfigDict(frozen=True)

    granted: bool
    reason: Optional[DenialReason] = None
    tier: Tier = Tier.NONE

    @classmethod
    def grant(cls, tier: Tier) -> "AccessDecision":
        return cls(granted=True, tier=tier)

    @classmethod
    def deny(cls, reason: DenialReason, tier: Tier = Tier.NONE) -> "AccessDecision":
        return cls(granted=False, reason=reason, tier=tier)


class UsageStatus(BaseModel):
    """Current-period view allowance for an account."""
    account_id: Optional[str] = None
    tier: Tier = Tier.NONE
    period_key: str
    views_used: int = 0
    limit: Optional[int] = None  # None means unlimited
    remaining: Optional[int] = None
    viewed_resource_ids: List[str] = Field(default_factory=list)
    degraded: bool = False  # usage could not be read; remaining forced to 0
