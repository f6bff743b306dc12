"""Database package: connection management, models and repositories."""

from .connection import DatabaseConfig, DatabaseManager

__all__ = ["DatabaseConfig", "DatabaseManager"]
