"""In-memory repositories, used when DATABASE_ENABLED=false.

Same interfaces as the PostgreSQL repositories. Usage transactions hold a
per-(account_id, period_key) asyncio lock for the whole read-modify-write,
which gives the same serialization the row lock gives in PostgreSQL.
State lives for the life of one process only.
"""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncIterator, Dict, List, Optional, Set, Tuple

from paywall.core.access.schemas import Account, AccountUpdate, UsagePeriod
from paywall.core.strategies import SavedStrategy, Strategy, StrategyInput, normalize_strategy

from .base import (
    AccountRepository,
    SavedStrategyRepository,
    StrategyRepository,
    T,
    UsageRepository,
    UsageUpdate,
)

logger = logging.getLogger(__name__)

PeriodId = Tuple[str, str]


@dataclass
class _PeriodLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class InMemoryStore:
    """Shared state for the in-memory repositories of one application."""

    def __init__(self):
        self.accounts: Dict[str, Account] = {}
        self.usage: Dict[PeriodId, UsagePeriod] = {}
        self.strategies: Dict[str, Strategy] = {}
        self.saved: Dict[str, Dict[str, SavedStrategy]] = {}
        self._locks: Dict[PeriodId, _PeriodLock] = {}

    @property
    def lock_count(self) -> int:
        """Number of period locks currently held or awaited."""
        return len(self._locks)

    @asynccontextmanager
    async def period_lock(self, key: PeriodId) -> AsyncIterator[None]:
        """
        Serialize transactions on one usage period.

        The lock is dropped once its last holder or waiter leaves, so idle
        periods keep no state.
        """
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = _PeriodLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[key]


class MemoryAccountRepository(AccountRepository):

    def __init__(self, store: InMemoryStore):
        self._store = store

    async def get_account(self, account_id: str) -> Optional[Account]:
        return self._store.accounts.get(account_id)

    async def list_accounts(self, limit: int = 50, offset: int = 0) -> List[Account]:
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        accounts = sorted(
            self._store.accounts.values(),
            key=lambda a: a.created_at or epoch,
            reverse=True,
        )
        return accounts[offset:offset + limit]

    async def find_by_email(self, email: str) -> List[Account]:
        return [a for a in self._store.accounts.values() if a.email == email]

    async def find_by_customer_id(self, customer_id: str) -> List[Account]:
        return [
            a for a in self._store.accounts.values()
            if a.stripe_customer_id == customer_id
        ]

    async def create_account(self, account: Account) -> Account:
        existing = self._store.accounts.get(account.id)
        if existing is not None:
            return existing

        now = datetime.now(timezone.utc)
        created = account.model_copy(
            update={"created_at": account.created_at or now, "updated_at": now}
        )
        self._store.accounts[account.id] = created
        logger.info(f"Created account {account.id}")
        return created

    async def update_account(self, account_id: str, update: AccountUpdate) -> Optional[Account]:
        account = self._store.accounts.get(account_id)
        if account is None:
            return None

        changes = update.model_dump(exclude_unset=True)
        changes["updated_at"] = datetime.now(timezone.utc)
        updated = account.model_copy(update=changes)
        self._store.accounts[account_id] = updated
        logger.info(f"Updated account {account_id}: {sorted(update.model_fields_set)}")
        return updated

    async def delete_account(self, account_id: str) -> bool:
        if self._store.accounts.pop(account_id, None) is None:
            return False

        for key in [k for k in self._store.usage if k[0] == account_id]:
            del self._store.usage[key]
        self._store.saved.pop(account_id, None)
        logger.info(f"Deleted account {account_id} with its usage periods and saved strategies")
        return True


class MemoryUsageRepository(UsageRepository):

    def __init__(self, store: InMemoryStore):
        self._store = store

    async def run_usage_transaction(
        self,
        account_id: str,
        period_key: str,
        update: UsageUpdate[T],
        now: datetime,
    ) -> T:
        key = (account_id, period_key)
        async with self._store.period_lock(key):
            period = self._store.usage.get(key)
            viewed = frozenset(period.viewed_resource_ids) if period else frozenset()

            # Yield between read and write, as a networked store would
            await asyncio.sleep(0)

            outcome, updated = update(viewed)
            if updated is not None:
                self._store.usage[key] = UsagePeriod(
                    account_id=account_id,
                    period_key=period_key,
                    viewed_resource_ids=set(updated),
                    updated_at=now,
                )
            return outcome

    async def get_usage_period(self, account_id: str, period_key: str) -> Optional[UsagePeriod]:
        period = self._store.usage.get((account_id, period_key))
        return period.model_copy(deep=True) if period else None


class MemoryStrategyRepository(StrategyRepository):

    def __init__(self, store: InMemoryStore):
        self._store = store

    async def get_strategy(self, strategy_id: str) -> Optional[Strategy]:
        return self._store.strategies.get(strategy_id)

    async def list_strategies(self, status: Optional[str] = None) -> List[Strategy]:
        strategies = list(self._store.strategies.values())
        if status:
            strategies = [s for s in strategies if s.status == status]
        return strategies

    async def create_strategy(self, data: StrategyInput) -> Strategy:
        now = datetime.now(timezone.utc)
        strategy_id = uuid.uuid4().hex
        strategy = normalize_strategy(
            strategy_id, {**data.model_dump(), "created_at": now, "updated_at": now}
        )
        self._store.strategies[strategy_id] = strategy
        logger.info(f"Created strategy {strategy_id} '{strategy.name}'")
        return strategy

    async def update_strategy(self, strategy_id: str, data: StrategyInput) -> Optional[Strategy]:
        existing = self._store.strategies.get(strategy_id)
        if existing is None:
            return None

        strategy = normalize_strategy(
            strategy_id,
            {
                **data.model_dump(),
                "created_at": existing.created_at,
                "updated_at": datetime.now(timezone.utc),
            },
        )
        self._store.strategies[strategy_id] = strategy
        return strategy

    async def get_strategies(self, strategy_ids: List[str]) -> List[Strategy]:
        return [
            self._store.strategies[sid] for sid in strategy_ids if sid in self._store.strategies
        ]

    async def delete_strategy(self, strategy_id: str) -> bool:
        if self._store.strategies.pop(strategy_id, None) is None:
            return False

        for bookmarks in self._store.saved.values():
            bookmarks.pop(strategy_id, None)
        return True


class MemorySavedStrategyRepository(SavedStrategyRepository):

    def __init__(self, store: InMemoryStore):
        self._store = store

    async def save_strategy(self, account_id: str, strategy_id: str, now: datetime) -> SavedStrategy:
        bookmarks = self._store.saved.setdefault(account_id, {})
        saved = bookmarks.get(strategy_id)
        if saved is None:
            saved = bookmarks[strategy_id] = SavedStrategy(
                account_id=account_id, strategy_id=strategy_id, saved_at=now
            )
            logger.info(f"Account {account_id} saved strategy {strategy_id}")
        return saved

    async def remove_saved_strategy(self, account_id: str, strategy_id: str) -> bool:
        removed = self._store.saved.get(account_id, {}).pop(strategy_id, None) is not None
        if removed:
            logger.info(f"Account {account_id} unsaved strategy {strategy_id}")
        return removed

    async def list_saved_strategies(self, account_id: str, limit: int) -> List[SavedStrategy]:
        bookmarks = sorted(
            self._store.saved.get(account_id, {}).values(),
            key=lambda s: s.saved_at,
            reverse=True,
        )
        return bookmarks[:limit]


__all__ = [
    "InMemoryStore",
    "MemoryAccountRepository",
    "MemoryUsageRepository",
    "MemoryStrategyRepository",
    "MemorySavedStrategyRepository",
]
