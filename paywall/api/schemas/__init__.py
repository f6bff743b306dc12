"""API request/response schemas."""

from .common import (
    HealthStatusEnum,
    ErrorResponse,
    AccessDeniedResponse,
    SuccessResponse,
    HealthStatus,
)
from .access import (
    AccessDecisionRequest,
    AccessDecisionResponse,
    UsageStatusResponse,
)
from .strategies import (
    StrategyListResponse,
    StrategyResponse,
    SavedStrategyResponse,
    SavedStrategyListResponse,
)
from .admin import (
    AccountCreateRequest,
    AccountRegisterRequest,
    AccountUpdateRequest,
    AccountResponse,
    AccountListResponse,
    DeleteResponse,
)
from .billing import SubscriptionEventResponse

__all__ = [
    # Common
    "HealthStatusEnum",
    "ErrorResponse",
    "AccessDeniedResponse",
    "SuccessResponse",
    "HealthStatus",
    # Access
    "AccessDecisionRequest",
    "AccessDecisionResponse",
    "UsageStatusResponse",
    # Strategies
    "StrategyListResponse",
    "StrategyResponse",
    "SavedStrategyResponse",
    "SavedStrategyListResponse",
    # Admin
    "AccountCreateRequest",
    "AccountRegisterRequest",
    "AccountUpdateRequest",
    "AccountResponse",
    "AccountListResponse",
    "DeleteResponse",
    # Billing
    "SubscriptionEventResponse",
]
