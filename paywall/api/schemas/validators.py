"""Shared validators for Pydantic schemas."""

from typing import Optional


def validate_email(v: Optional[str]) -> Optional[str]:
    """Validate an optional email address.

    Raises:
        ValueError: If the address has no "@".
    """
    if v is None:
        return v
    v = v.strip()
    if "@" not in v:
        raise ValueError("Invalid email address")
    return v


def validate_identifier(v: str) -> str:
    """Strip an identifier and reject blanks."""
    v = v.strip()
    if not v:
        raise ValueError("Identifier cannot be empty")
    return v
