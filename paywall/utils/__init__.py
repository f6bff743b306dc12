"""Utility modules for the strategy paywall service."""

from .env_utils import parse_bool_env, parse_int_env, parse_float_env, parse_str_env
from .timer_utils import elapsed_ms

__all__ = [
    # Environment parsing
    "parse_bool_env",
    "parse_int_env",
    "parse_float_env",
    "parse_str_env",
    # Timing
    "elapsed_ms",
]
