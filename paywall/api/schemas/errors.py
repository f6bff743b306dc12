"""Shared error response definitions for OpenAPI documentation.

Use these in route definitions for consistent error documentation.
"""

from .common import AccessDeniedResponse, ErrorResponse

# =============================================================================
# Base Error Responses
# =============================================================================

BASE_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request parameters"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}

# =============================================================================
# API-Specific Error Responses
# =============================================================================

STRATEGY_ERROR_RESPONSES = {
    **BASE_ERROR_RESPONSES,
    401: {"model": AccessDeniedResponse, "description": "Sign-in required"},
    402: {"model": AccessDeniedResponse, "description": "Monthly view limit reached"},
    404: {"model": ErrorResponse, "description": "Strategy not found"},
}

ADMIN_ERROR_RESPONSES = {
    **BASE_ERROR_RESPONSES,
    401: {"model": ErrorResponse, "description": "Authentication required"},
    403: {"model": ErrorResponse, "description": "Admin role required"},
    404: {"model": ErrorResponse, "description": "Account or strategy not found"},
}

BILLING_ERROR_RESPONSES = {
    **BASE_ERROR_RESPONSES,
    401: {"model": ErrorResponse, "description": "API key required but not provided"},
    403: {"model": ErrorResponse, "description": "Invalid API key"},
}

SAVED_STRATEGY_ERROR_RESPONSES = {
    **BASE_ERROR_RESPONSES,
    401: {"model": ErrorResponse, "description": "Authentication required"},
    404: {"model": ErrorResponse, "description": "Strategy not found"},
    503: {"model": ErrorResponse, "description": "Storage temporarily unavailable"},
}
