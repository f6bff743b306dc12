"""
Monthly view quota enforcement for metered tiers.

Provides QuotaGate, which checks and records a strategy view against the
account's current usage period in a single store transaction.
"""

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING, FrozenSet, Optional, Tuple

from paywall.constants import CURIOUS_MONTHLY_VIEW_LIMIT, QUOTA_TIMEOUT_SECONDS

from .period import period_key
from .tiers import Tier, is_quota_bound

if TYPE_CHECKING:
    from paywall.db.repositories.base import UsageRepository

logger = logging.getLogger(__name__)


def apply_view(
    viewed: FrozenSet[str], resource_id: str, limit: int
) -> Tuple[bool, Optional[FrozenSet[str]]]:
    """
    Decide one view against a period's viewed ids.

    Returns:
        (allowed, ids to persist). The ids are None when nothing changes:
        re-views of a member and views past the limit never write.
    """
    if resource_id in viewed:
        return True, None
    if len(viewed) >= limit:
        return False, None
    return True, viewed | {resource_id}


class QuotaGate:
    """
    Enforces "at most N distinct strategies per account per calendar month".

    Only quota-bound tiers touch storage; every other tier passes straight
    through. Any failure to complete the transaction denies the view.
    """

    def __init__(
        self,
        usage_repository: "UsageRepository",
        limit: int = CURIOUS_MONTHLY_VIEW_LIMIT,
        timeout_seconds: float = QUOTA_TIMEOUT_SECONDS,
    ):
        """
        Initialize QuotaGate.

        Args:
            usage_repository: Store providing the usage transaction
            limit: Distinct views allowed per period
            timeout_seconds: Upper bound on one transaction, retries included
        """
        self._usage = usage_repository
        self.limit = limit
        self._timeout = timeout_seconds

    async def check_and_record(
        self,
        account_id: str,
        resource_id: str,
        tier: Tier,
        now: datetime,
    ) -> bool:
        """
        Check the quota and record the view if allowed.

        Args:
            account_id: Account uid
            resource_id: Strategy id being viewed
            tier: Already-resolved tier of the account
            now: Timestamp of the access attempt

        Returns:
            True if the view is allowed
        """
        if not is_quota_bound(tier):
            return True

        key = period_key(now)
        limit = self.limit

        def _update(viewed: FrozenSet[str]) -> Tuple[bool, Optional[FrozenSet[str]]]:
            return apply_view(viewed, resource_id, limit)

        try:
            allowed = await asyncio.wait_for(
                self._usage.run_usage_transaction(account_id, key, _update, now),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Usage transaction timed out after {self._timeout}s "
                f"for account {account_id} period {key}, denying"
            )
            return False
        except Exception as e:
            logger.error(
                f"Usage transaction failed for account {account_id} period {key}, "
                f"denying: {e}"
            )
            return False

        if not allowed:
            logger.info(
                f"Account {account_id} reached {limit} strategy views for {key}, "
                f"denied {resource_id}"
            )

        return allowed
