"""Request/response schemas for admin and account endpoints."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from paywall.core.access import Account

from .validators import validate_email as _validate_email
from .validators import validate_identifier as _validate_identifier


class AccountCreateRequest(BaseModel):
    """Admin request to create an account record."""
    id: str = Field(..., min_length=1, description="Identity provider uid")
    email: Optional[str] = None
    role: Optional[str] = None
    subscription_tier: Optional[str] = Field(None, examples=["Curious Retail"])

    @field_validator('id')
    @classmethod
    def validate_id(cls, v: str) -> str:
        return _validate_identifier(v)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _validate_email(v)


class AccountRegisterRequest(BaseModel):
    """First sign-in registration for the calling identity."""
    email: Optional[str] = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _validate_email(v)


class AccountUpdateRequest(BaseModel):
    """Admin edit of an account's email, role or tier. Omitted fields are kept."""
    email: Optional[str] = None
    role: Optional[str] = None
    subscription_tier: Optional[str] = Field(None, examples=["Active Trader"])

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _validate_email(v)


class AccountResponse(BaseModel):
    """A single account."""
    success: bool = True
    account: Account


class AccountListResponse(BaseModel):
    """Page of accounts, newest first."""
    success: bool = True
    accounts: List[Account] = Field(default_factory=list)
    limit: int
    offset: int


class DeleteResponse(BaseModel):
    """Result of a delete."""
    success: bool = True
    id: str
    message: Optional[str] = None
