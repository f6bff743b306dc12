"""Abstract repository interfaces shared by the PostgreSQL and in-memory backends."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, FrozenSet, List, Optional, Tuple, TypeVar

from paywall.core.access.schemas import Account, AccountUpdate, UsagePeriod
from paywall.core.strategies import SavedStrategy, Strategy, StrategyInput

T = TypeVar("T")

# Receives the current viewed ids; returns (result, ids to persist or None for no write)
UsageUpdate = Callable[[FrozenSet[str]], Tuple[T, Optional[FrozenSet[str]]]]


class AccountRepository(ABC):
    """Account records keyed by identity-provider uid."""

    @abstractmethod
    async def get_account(self, account_id: str) -> Optional[Account]:
        """
        Point read of an account.

        Args:
            account_id: Identity-provider uid

        Returns:
            Account snapshot, or None if not found

        Raises:
            StorageUnavailableError: If the store cannot be read
        """
        pass

    @abstractmethod
    async def list_accounts(self, limit: int = 50, offset: int = 0) -> List[Account]:
        """List accounts ordered by creation time."""
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> List[Account]:
        """Find accounts with the given email."""
        pass

    @abstractmethod
    async def find_by_customer_id(self, customer_id: str) -> List[Account]:
        """Find accounts linked to a payment-processor customer id."""
        pass

    @abstractmethod
    async def create_account(self, account: Account) -> Account:
        """Create an account record (no-op if the id already exists)."""
        pass

    @abstractmethod
    async def update_account(self, account_id: str, update: AccountUpdate) -> Optional[Account]:
        """
        Apply the fields set on ``update`` to an account.

        Returns:
            Updated account, or None if not found
        """
        pass

    @abstractmethod
    async def delete_account(self, account_id: str) -> bool:
        """
        Delete an account and its usage periods.

        Returns:
            True if deleted, False if not found
        """
        pass


class UsageRepository(ABC):
    """Per-account, per-month usage periods."""

    @abstractmethod
    async def run_usage_transaction(
        self,
        account_id: str,
        period_key: str,
        update: UsageUpdate[T],
        now: datetime,
    ) -> T:
        """
        Atomic read-modify-write of one usage period.

        Reads the period's viewed ids (empty when the period is new), calls
        ``update`` with them and persists the ids it returns, all as one
        transaction. Transactions on the same (account_id, period_key)
        are serialized.

        Args:
            account_id: Account uid
            period_key: ``YYYY-MM`` period key
            update: Decision callback, see ``UsageUpdate``
            now: Timestamp recorded on write

        Returns:
            The result returned by ``update``

        Raises:
            StorageUnavailableError: If the transaction cannot complete
        """
        pass

    @abstractmethod
    async def get_usage_period(self, account_id: str, period_key: str) -> Optional[UsagePeriod]:
        """Read a usage period without creating it."""
        pass


class StrategyRepository(ABC):
    """Strategy records."""

    @abstractmethod
    async def get_strategy(self, strategy_id: str) -> Optional[Strategy]:
        """Get a strategy by id with defaults filled in, or None."""
        pass

    @abstractmethod
    async def list_strategies(self, status: Optional[str] = None) -> List[Strategy]:
        """List strategies, optionally filtered by status."""
        pass

    @abstractmethod
    async def get_strategies(self, strategy_ids: List[str]) -> List[Strategy]:
        """Get the strategies that exist among ``strategy_ids``, in the given order."""
        pass

    @abstractmethod
    async def create_strategy(self, data: StrategyInput) -> Strategy:
        """Create a strategy with a generated id."""
        pass

    @abstractmethod
    async def update_strategy(self, strategy_id: str, data: StrategyInput) -> Optional[Strategy]:
        """Replace a strategy's fields. Returns None if not found."""
        pass

    @abstractmethod
    async def delete_strategy(self, strategy_id: str) -> bool:
        """Delete a strategy. Returns False if not found."""
        pass


class SavedStrategyRepository(ABC):
    """Per-account bookmarks of strategies."""

    @abstractmethod
    async def save_strategy(self, account_id: str, strategy_id: str, now: datetime) -> SavedStrategy:
        """
        Bookmark a strategy for an account.

        Saving an already saved strategy keeps the original ``saved_at``.
        """
        pass

    @abstractmethod
    async def remove_saved_strategy(self, account_id: str, strategy_id: str) -> bool:
        """Remove a bookmark. Returns False if it was not saved."""
        pass

    @abstractmethod
    async def list_saved_strategies(self, account_id: str, limit: int) -> List[SavedStrategy]:
        """List an account's bookmarks, most recently saved first."""
        pass


__all__ = [
    "AccountRepository",
    "UsageRepository",
    "StrategyRepository",
    "SavedStrategyRepository",
    "UsageUpdate",
]
