"""Timing helpers for request and transaction logging."""

import time


def elapsed_ms(start_time: float) -> float:
    """
    Calculate elapsed time in milliseconds since start_time.

    Args:
        start_time: Start time from time.time()

    Returns:
        Elapsed time in milliseconds
    """
    return (time.time() - start_time) * 1000
