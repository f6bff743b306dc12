"""Response schemas for strategy endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from paywall.core.access import Tier
from paywall.core.strategies import Strategy, StrategySummary


class StrategyListResponse(BaseModel):
    """Public strategy list."""
    success: bool
    strategies: List[StrategySummary] = Field(default_factory=list)
    total: int = 0
    error: Optional[str] = None


class StrategyResponse(BaseModel):
    """A single strategy."""
    success: bool = True
    strategy: Strategy
    tier: Optional[Tier] = Field(None, description="Caller tier that was granted access")


class SavedStrategyResponse(BaseModel):
    """Saved state of one strategy for the caller."""
    success: bool = True
    strategy_id: str
    saved: bool
    saved_at: Optional[datetime] = None


class SavedStrategyListResponse(BaseModel):
    """The caller's saved strategies, most recently saved first."""
    success: bool = True
    strategies: List[StrategySummary] = Field(default_factory=list)
    total: int = 0
