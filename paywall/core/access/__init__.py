"""
Access control and usage metering module.

Resolves account tiers, meters the free-tier monthly strategy views and
composes both into a single access decision.
"""

from .tiers import (
    Tier,
    DenialReason,
    QUOTA_BOUND_TIERS,
    resolve_tier,
    is_quota_bound,
)
from .period import period_key, to_utc
from .schemas import (
    Identity,
    Account,
    AccountUpdate,
    UsagePeriod,
    UsageStatus,
    AccessDecision,
)
from .exceptions import (
    AccessControlError,
    StorageUnavailableError,
    AccessDeniedError,
    AccountNotFoundError,
    StrategyNotFoundError,
)
from .quota_gate import QuotaGate, apply_view
from .service import AccessService

__all__ = [
    # Tiers
    "Tier",
    "DenialReason",
    "QUOTA_BOUND_TIERS",
    "resolve_tier",
    "is_quota_bound",
    # Periods
    "period_key",
    "to_utc",
    # Schemas
    "Identity",
    "Account",
    "AccountUpdate",
    "UsagePeriod",
    "UsageStatus",
    "AccessDecision",
    # Exceptions
    "AccessControlError",
    "StorageUnavailableError",
    "AccessDeniedError",
    "AccountNotFoundError",
    "StrategyNotFoundError",
    # Quota Gate
    "QuotaGate",
    "apply_view",
    # Service
    "AccessService",
]
