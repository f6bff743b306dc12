"""Request/response schemas for access decisions and usage status."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from paywall.core.access import DenialReason, Tier

from .validators import validate_identifier as _validate_identifier


class AccessDecisionRequest(BaseModel):
    """Request to decide access to one strategy."""
    resource_id: str = Field(..., min_length=1, description="Strategy id", examples=["abc123"])

    @field_validator('resource_id')
    @classmethod
    def validate_resource_id(cls, v: str) -> str:
        return _validate_identifier(v)


class AccessDecisionResponse(BaseModel):
    """Access decision for the caller."""
    success: bool = True
    resource_id: str
    granted: bool
    reason: Optional[DenialReason] = None
    tier: Tier


class UsageStatusResponse(BaseModel):
    """Caller's allowance for the current month."""
    success: bool = True
    tier: Tier
    period_key: str = Field(..., examples=["2025-01"])
    views_used: int = 0
    limit: Optional[int] = Field(None, description="None means unlimited")
    remaining: Optional[int] = Field(None, description="None means unlimited")
    viewed_resource_ids: List[str] = Field(default_factory=list)
    degraded: bool = Field(False, description="Usage could not be read; remaining is reported as 0")
