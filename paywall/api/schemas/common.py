"""Common schema models shared across API endpoints."""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, List

from pydantic import BaseModel, Field


# =============================================================================
# Enums for Type Safety
# =============================================================================

class HealthStatusEnum(str, Enum):
    """Health status values for service components."""
    healthy = "healthy"
    unhealthy = "unhealthy"
    disabled = "disabled"


# =============================================================================
# Common Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = Field(default=False, examples=[False])
    error: str = Field(..., examples=["Strategy not found"])
    message: Optional[str] = Field(default=None, examples=["Strategy not found: abc123"])
    details: Optional[List[Dict[str, Any]]] = None
    request_id: Optional[str] = Field(default=None, examples=["3f2a9c1d"])


class AccessDeniedResponse(BaseModel):
    """Login (401) or upgrade (402) prompt."""
    success: bool = False
    error: str = Field(..., examples=["quota_exceeded"])
    message: str
    resource_id: Optional[str] = None
    login_url: Optional[str] = None
    upgrade: Optional[Dict[str, str]] = None
    status_code: int
    request_id: Optional[str] = None


class SuccessResponse(BaseModel):
    """Standard success response."""
    success: bool = True
    message: Optional[str] = None


class HealthStatus(BaseModel):
    """Service health status."""
    status: HealthStatusEnum
    version: str
    timestamp: datetime
    components: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
