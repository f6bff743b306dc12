"""
Repository layer for database operations.

Provides:
- account_repository: account records (role, tier, billing linkage)
- usage_repository: monthly usage periods with transactional view recording
- strategy_repository: paywalled strategy records
- saved_strategy_repository: per-account strategy bookmarks
- memory: in-memory implementations for running without PostgreSQL
"""

from dataclasses import dataclass

from .base import (
    AccountRepository,
    SavedStrategyRepository,
    StrategyRepository,
    UsageRepository,
    UsageUpdate,
)
from .account_repository import SqlAccountRepository
from .usage_repository import SqlUsageRepository
from .strategy_repository import SqlStrategyRepository
from .saved_strategy_repository import SqlSavedStrategyRepository
from .memory import (
    InMemoryStore,
    MemoryAccountRepository,
    MemorySavedStrategyRepository,
    MemoryStrategyRepository,
    MemoryUsageRepository,
)


@dataclass
class Repositories:
    """The repositories one application instance works with."""
    accounts: AccountRepository
    usage: UsageRepository
    strategies: StrategyRepository
    saved: SavedStrategyRepository


def build_repositories(db) -> Repositories:
    """
    Build repositories for a DatabaseManager.

    Falls back to the in-memory backend when the database is disabled.
    """
    if db is None or not db.enabled:
        store = InMemoryStore()
        return Repositories(
            accounts=MemoryAccountRepository(store),
            usage=MemoryUsageRepository(store),
            strategies=MemoryStrategyRepository(store),
            saved=MemorySavedStrategyRepository(store),
        )

    return Repositories(
        accounts=SqlAccountRepository(db),
        usage=SqlUsageRepository(db),
        strategies=SqlStrategyRepository(db),
        saved=SqlSavedStrategyRepository(db),
    )


__all__ = [
    "AccountRepository",
    "UsageRepository",
    "StrategyRepository",
    "SavedStrategyRepository",
    "UsageUpdate",
    "SqlAccountRepository",
    "SqlUsageRepository",
    "SqlStrategyRepository",
    "SqlSavedStrategyRepository",
    "InMemoryStore",
    "MemoryAccountRepository",
    "MemoryUsageRepository",
    "MemoryStrategyRepository",
    "MemorySavedStrategyRepository",
    "Repositories",
    "build_repositories",
]
