"""Application-wide constants and configuration defaults.

This module centralizes magic values, default configurations, and constants
that are used across the codebase to improve maintainability.
"""

from paywall.utils.env_utils import parse_float_env, parse_int_env

# =============================================================================
# Subscription Tier Names (as stored on account records)
# =============================================================================
TIER_NAME_CURIOUS = "Curious Retail"
TIER_NAME_ACTIVE = "Active Trader"
TIER_NAME_QUANT = "Quant Edge"
TIER_NAME_FREE = "free"
ADMIN_ROLE = "admin"

# =============================================================================
# Monthly View Quota (Curious Retail)
# =============================================================================
QUOTA_LIMIT = 3
CURIOUS_MONTHLY_VIEW_LIMIT = parse_int_env("CURIOUS_MONTHLY_VIEW_LIMIT", QUOTA_LIMIT)
PERIOD_KEY_FORMAT = "%Y-%m"

# =============================================================================
# Store Transaction Timeouts
# =============================================================================
DEFAULT_QUOTA_TIMEOUT_SECONDS = 5.0
QUOTA_TIMEOUT_SECONDS = parse_float_env("QUOTA_TIMEOUT_SECONDS", DEFAULT_QUOTA_TIMEOUT_SECONDS)

# =============================================================================
# Database Pool Configuration
# =============================================================================
DEFAULT_DB_POOL_SIZE = 5
DEFAULT_DB_MAX_OVERFLOW = 10
DEFAULT_DB_POOL_TIMEOUT = 30
DEFAULT_DB_POOL_RECYCLE = 1800  # 30 minutes in seconds

# =============================================================================
# Strategy Defaults
# =============================================================================
DEFAULT_STRATEGY_TIER = TIER_NAME_CURIOUS
DEFAULT_STRATEGY_STATUS = "active"
SAVED_STRATEGIES_LIMIT = 30

# =============================================================================
# Billing Events
# =============================================================================
EVENT_CHECKOUT_COMPLETED = "checkout.session.completed"
EVENT_SUBSCRIPTION_CREATED = "customer.subscription.created"
EVENT_SUBSCRIPTION_UPDATED = "customer.subscription.updated"
EVENT_SUBSCRIPTION_DELETED = "customer.subscription.deleted"
STRIPE_STATUS_CANCELED = "canceled"

# =============================================================================
# API Configuration
# =============================================================================
DOCS_URL = "/docs"
REDOC_URL = "/redoc"
OPENAPI_URL = "/openapi.json"
DEFAULT_API_PREFIX = "/api/v1"
UPGRADE_URL = "/dashboard?upgrade=active-trader"
LOGIN_URL = "/login"
