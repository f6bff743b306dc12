"""
Strategy records: the paywalled content unit.

The access core only ever sees a strategy id. These schemas serve the
strategy read path and the admin console.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from paywall.constants import DEFAULT_STRATEGY_STATUS, DEFAULT_STRATEGY_TIER


class StrategyInput(BaseModel):
    """Admin-editable strategy fields."""
    name: str = Field(..., min_length=1, description="Strategy name")
    description: str = ""
    win_rate: float = Field(0.0, description="Win rate as a fraction")
    profit_factor: float = 0.0
    max_drawdown: float = Field(0.0, description="Max drawdown as a fraction")
    trades: int = 0
    tier: str = DEFAULT_STRATEGY_TIER
    status: str = DEFAULT_STRATEGY_STATUS
    market: str = ""
    timeframe: str = ""
    asset_class: str = ""
    risk_reward: float = 0.0
    expectancy: float = 0.0
    duration_months: int = 0
    image_url: str = ""
    video_url: str = ""
    detailed_report_url: str = ""


class Strategy(StrategyInput):
    """Stored strategy record."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SavedStrategy(BaseModel):
    """A strategy bookmarked by an account."""
    model_config = ConfigDict(from_attributes=True)

    account_id: str
    strategy_id: str
    saved_at: Optional[datetime] = None


class StrategySummary(BaseModel):
    """Public list view of a strategy (never gated)."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    tier: str
    status: str
    market: str = ""
    asset_class: str = ""
    win_rate: float = 0.0
    profit_factor: float = 0.0


def normalize_strategy(strategy_id: str, data: Dict[str, Any]) -> Strategy:
    """
    Build a Strategy from a raw record, filling gaps with defaults.

    Older records were entered by hand and may miss fields or hold nulls;
    those read back as empty strings, zeros, tier "Curious Retail" and
    status "active".
    """
    cleaned = {key: value for key, value in data.items() if value is not None}
    cleaned.pop("id", None)
    cleaned.setdefault("name", "")
    if not cleaned["name"]:
        cleaned["name"] = strategy_id
    return Strategy(id=strategy_id, **cleaned)
