"""
Custom exceptions for access control and usage metering.
"""

from typing import Optional, Dict, Any

from paywall.constants import LOGIN_URL, TIER_NAME_ACTIVE, UPGRADE_URL

from .tiers import DenialReason


class AccessControlError(Exception):
    """Base exception for access control errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class StorageUnavailableError(AccessControlError):
    """
    Raised when a store read or usage transaction cannot complete.

    QuotaGate converts it into a denial and usage status reports it as a
    degraded allowance. Elsewhere the API answers 503 with a generic message,
    so storage state is never surfaced to end users.
    """

    def __init__(self, message: str, account_id: Optional[str] = None):
        super().__init__(
            message=message,
            details={"account_id": account_id} if account_id else {},
        )


class AccessDeniedError(AccessControlError):
    """
    Raised by request handlers when a decision denies access.

    Carries what the caller needs to render a login prompt (401) or an
    upgrade prompt (402).
    """

    def __init__(self, reason: DenialReason, resource_id: Optional[str] = None):
        self.reason = reason
        self.resource_id = resource_id

        if reason is DenialReason.UNAUTHENTICATED:
            message = "Sign in with an active subscription to view this strategy"
        else:
            message = "Monthly strategy view limit reached"

        super().__init__(
            message=message,
            details={"reason": reason.value, "resource_id": resource_id},
        )

    @property
    def status_code(self) -> int:
        """HTTP status matching the denial reason."""
        return 401 if self.reason is DenialReason.UNAUTHENTICATED else 402

    def to_response_dict(self) -> Dict[str, Any]:
        """Convert to HTTP 401/402 response body."""
        response: Dict[str, Any] = {
            "error": self.reason.value,
            "message": self.message,
            "resource_id": self.resource_id,
        }

        if self.reason is DenialReason.UNAUTHENTICATED:
            response["login_url"] = LOGIN_URL
        else:
            response["upgrade"] = {
                "tier": TIER_NAME_ACTIVE,
                "message": f"Upgrade to {TIER_NAME_ACTIVE} for unlimited strategies",
                "url": UPGRADE_URL,
            }

        return response


class AccountNotFoundError(AccessControlError):
    """Raised when an account record does not exist."""

    def __init__(self, account_id: str):
        super().__init__(
            message=f"Account not found: {account_id}",
            details={"account_id": account_id},
        )


class StrategyNotFoundError(AccessControlError):
    """Raised when a strategy record does not exist."""

    def __init__(self, strategy_id: str):
        super().__init__(
            message=f"Strategy not found: {strategy_id}",
            details={"strategy_id": strategy_id},
        )


__all__ = [
    "AccessControlError",
    "StorageUnavailableError",
    "AccessDeniedError",
    "AccountNotFoundError",
    "StrategyNotFoundError",
]
