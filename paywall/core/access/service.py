"""
AccessService - single entry point for strategy access decisions.

Composes the pieces of the access core:
- resolve_tier: account record -> normalized Tier
- QuotaGate: monthly view metering for quota-bound tiers

Repositories are passed in explicitly; the service holds no connection
state of its own.
"""

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Optional, assert_never

from .exceptions import StorageUnavailableError
from .period import period_key
from .quota_gate import QuotaGate
from .schemas import AccessDecision, Account, Identity, UsageStatus
from .tiers import DenialReason, Tier, is_quota_bound, resolve_tier

if TYPE_CHECKING:
    from paywall.db.repositories.base import AccountRepository, UsageRepository

logger = logging.getLogger(__name__)


class AccessService:
    """Decides whether an identity may view a strategy."""

    def __init__(
        self,
        accounts: "AccountRepository",
        usage: "UsageRepository",
        quota_gate: Optional[QuotaGate] = None,
    ):
        self._accounts = accounts
        self._usage = usage
        self.quota_gate = quota_gate or QuotaGate(usage)

    async def load_account(self, identity: Optional[Identity]) -> Optional[Account]:
        """
        Load the account behind a verified identity.

        A failed read is treated like a missing account so callers resolve
        it to the most restrictive tier.
        """
        if identity is None:
            return None

        try:
            account = await self._accounts.get_account(identity.account_id)
        except Exception as e:
            logger.error(f"Account lookup failed for {identity.account_id}: {e}")
            return None

        if account is None:
            logger.debug(f"No account record for {identity.account_id}")
        return account

    async def resolve_identity_tier(self, identity: Optional[Identity]) -> Tier:
        """Resolve the tier for an identity (NONE when unauthenticated)."""
        return resolve_tier(await self.load_account(identity))

    async def decide_access(
        self,
        identity: Optional[Identity],
        resource_id: str,
        now: datetime,
    ) -> AccessDecision:
        """
        Decide whether ``identity`` may view ``resource_id``.

        Args:
            identity: Verified caller identity, or None if unauthenticated
            resource_id: Strategy id
            now: Timestamp of the request (drives the usage period)

        Returns:
            AccessDecision: granted, or denied with UNAUTHENTICATED /
            QUOTA_EXCEEDED
        """
        if identity is None:
            return AccessDecision.deny(DenialReason.UNAUTHENTICATED)

        tier = await self.resolve_identity_tier(identity)

        if tier is Tier.NONE:
            return AccessDecision.deny(DenialReason.UNAUTHENTICATED, tier)
        elif tier is Tier.ADMIN or tier is Tier.ACTIVE or tier is Tier.QUANT:
            return AccessDecision.grant(tier)
        elif tier is Tier.CURIOUS:
            allowed = await self.quota_gate.check_and_record(
                identity.account_id, resource_id, tier, now
            )
            if allowed:
                return AccessDecision.grant(tier)
            return AccessDecision.deny(DenialReason.QUOTA_EXCEEDED, tier)
        else:
            assert_never(tier)

    async def get_usage_status(
        self,
        identity: Optional[Identity],
        now: datetime,
    ) -> UsageStatus:
        """
        Report the current period's allowance without recording anything.

        Unlimited tiers report ``limit`` and ``remaining`` as None. When the
        usage period cannot be read the status fails closed: ``remaining`` is
        0 and ``degraded`` is set.
        """
        key = period_key(now)
        tier = await self.resolve_identity_tier(identity)

        if identity is None or tier is Tier.NONE:
            return UsageStatus(
                account_id=identity.account_id if identity else None,
                tier=tier,
                period_key=key,
                limit=0,
                remaining=0,
            )

        if not is_quota_bound(tier):
            return UsageStatus(account_id=identity.account_id, tier=tier, period_key=key)

        limit = self.quota_gate.limit
        try:
            period = await self._usage.get_usage_period(identity.account_id, key)
        except StorageUnavailableError as e:
            logger.error(f"Usage read failed for {identity.account_id} in {key}: {e.message}")
            return UsageStatus(
                account_id=identity.account_id,
                tier=tier,
                period_key=key,
                limit=limit,
                remaining=0,
                degraded=True,
            )

        viewed = sorted(period.viewed_resource_ids) if period else []

        return UsageStatus(
            account_id=identity.account_id,
            tier=tier,
            period_key=key,
            views_used=len(viewed),
            limit=limit,
            remaining=max(0, limit - len(viewed)),
            viewed_resource_ids=viewed,
        )
