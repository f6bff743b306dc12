"""Response schema for billing event ingestion."""

from typing import List, Optional

from pydantic import BaseModel, Field


class SubscriptionEventResponse(BaseModel):
    """Outcome of applying a subscription event."""
    success: bool = True
    event_type: str
    handled: bool
    tier: Optional[str] = None
    account_ids: List[str] = Field(default_factory=list)
