"""Environment variable utilities.

Typed parsing of settings read from the process environment (populated
from `.env` by python-dotenv at startup). Invalid values fall back to the
supplied default instead of raising.
"""

import os
from typing import Optional


def parse_bool_env(key: str, default: bool = True) -> bool:
    """Parse a boolean value from an environment variable.

    Args:
        key: The environment variable name.
        default: Default value if the environment variable is not set.

    Returns:
        True if the value is 'true' (case-insensitive), False otherwise.
        Returns the default if the environment variable is not set.

    Examples:
        >>> os.environ["DATABASE_ENABLED"] = "false"
        >>> parse_bool_env("DATABASE_ENABLED")
        False
        >>> parse_bool_env("UNSET_VAR", default=False)
        False
    """
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() == "true"


def parse_int_env(key: str, default: int) -> int:
    """Parse an integer value from an environment variable.

    Args:
        key: The environment variable name.
        default: Default value if the environment variable is not set or invalid.

    Returns:
        The integer value from the environment variable, or the default.
    """
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def parse_float_env(key: str, default: float) -> float:
    """Parse a float value from an environment variable, or return the default."""
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def parse_str_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Parse a string value from an environment variable.

    Args:
        key: The environment variable name.
        default: Default value if the environment variable is not set.

    Returns:
        The string value from the environment variable, or the default.
    """
    return os.getenv(key, default)
