"""HTTP API for the strategy paywall."""

from .app import create_app

__all__ = ["create_app"]
