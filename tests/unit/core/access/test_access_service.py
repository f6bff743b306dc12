"""Unit tests for AccessService decisions and usage status."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from paywall.core.access import (
    AccessDecision,
    AccessService,
    Account,
    DenialReason,
    Identity,
    QuotaGate,
    StorageUnavailableError,
    Tier,
)

CURIOUS = "Curious Retail"


@pytest.fixture
def mock_accounts():
    accounts = MagicMock()
    accounts.get_account = AsyncMock(return_value=None)
    return accounts


@pytest.fixture
def mock_usage():
    usage = MagicMock()
    usage.run_usage_transaction = AsyncMock(return_value=True)
    usage.get_usage_period = AsyncMock(return_value=None)
    return usage


class TestDecideAccessScenarios:
    """End-to-end decision scenarios on the in-memory store."""

    @pytest.mark.asyncio
    async def test_legacy_active_account_granted_without_write(
        self, access_service, add_account, memory_store, now
    ):
        """Legacy "active" tier is unlimited and writes nothing."""
        add_account("user-1", subscription_tier="active")

        for rid in ("r1", "r2", "r3", "r4", "r5"):
            decision = await access_service.decide_access(Identity("user-1"), rid, now)
            assert decision.granted is True
            assert decision.tier is Tier.ACTIVE

        assert memory_store.usage == {}

    @pytest.mark.asyncio
    async def test_curious_progression(self, access_service, add_account, repositories, now):
        """First view, re-view, fill the quota, then deny."""
        add_account("user-1", subscription_tier=CURIOUS)
        identity = Identity("user-1")

        async def viewed():
            period = await repositories.usage.get_usage_period("user-1", "2025-01")
            return period.viewed_resource_ids if period else set()

        # First view creates the period
        assert await viewed() == set()
        decision = await access_service.decide_access(identity, "r1", now)
        assert decision == AccessDecision.grant(Tier.CURIOUS)
        assert await viewed() == {"r1"}

        # Re-viewing is free
        decision = await access_service.decide_access(identity, "r1", now)
        assert decision.granted is True
        assert await viewed() == {"r1"}

        # Fill the quota
        assert (await access_service.decide_access(identity, "r2", now)).granted is True
        assert (await access_service.decide_access(identity, "r3", now)).granted is True
        assert await viewed() == {"r1", "r2", "r3"}

        # New id over the limit
        decision = await access_service.decide_access(identity, "r4", now)
        assert decision.granted is False
        assert decision.reason is DenialReason.QUOTA_EXCEEDED
        assert decision.tier is Tier.CURIOUS
        assert await viewed() == {"r1", "r2", "r3"}

    @pytest.mark.asyncio
    async def test_unauthenticated_touches_no_storage(self, mock_accounts, mock_usage, now):
        """No identity means no account read and no transaction."""
        service = AccessService(mock_accounts, mock_usage)

        decision = await service.decide_access(None, "r1", now)

        assert decision.granted is False
        assert decision.reason is DenialReason.UNAUTHENTICATED
        mock_accounts.get_account.assert_not_called()
        mock_usage.run_usage_transaction.assert_not_called()


class TestDecideAccessProperties:
    """Quota ceiling, period isolation, concurrency and bypass."""

    @pytest.mark.asyncio
    async def test_previously_granted_ids_stay_grantable(
        self, access_service, add_account, now
    ):
        add_account("user-1", subscription_tier=CURIOUS)
        identity = Identity("user-1")
        for rid in ("a", "b", "c"):
            await access_service.decide_access(identity, rid, now)

        assert (await access_service.decide_access(identity, "d", now)).reason is DenialReason.QUOTA_EXCEEDED
        for rid in ("a", "b", "c"):
            assert (await access_service.decide_access(identity, rid, now)).granted is True

    @pytest.mark.asyncio
    async def test_denial_does_not_carry_into_next_month(
        self, access_service, add_account, now, next_month
    ):
        add_account("user-1", subscription_tier=CURIOUS)
        identity = Identity("user-1")
        for rid in ("a", "b", "c"):
            await access_service.decide_access(identity, rid, now)
        assert (await access_service.decide_access(identity, "d", now)).granted is False

        assert (await access_service.decide_access(identity, "d", next_month)).granted is True

    @pytest.mark.asyncio
    async def test_concurrent_decisions_never_exceed_quota(
        self, access_service, add_account, repositories, now
    ):
        """10 simultaneous views of 10 ids: exactly 3 grants."""
        add_account("user-1", subscription_tier=CURIOUS)
        identity = Identity("user-1")

        decisions = await asyncio.gather(*[
            access_service.decide_access(identity, f"r{i}", now)
            for i in range(10)
        ])

        granted = [d for d in decisions if d.granted]
        denied = [d for d in decisions if not d.granted]
        assert len(granted) == 3
        assert len(denied) == 7
        assert all(d.reason is DenialReason.QUOTA_EXCEEDED for d in denied)

        period = await repositories.usage.get_usage_period("user-1", "2025-01")
        assert len(period.viewed_resource_ids) == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "account",
        [
            Account(id="user-1", subscription_tier="Active Trader"),
            Account(id="user-1", subscription_tier="active"),
            Account(id="user-1", subscription_tier="Quant Edge"),
            Account(id="user-1", role="admin"),
            Account(id="user-1", role="admin", subscription_tier="Curious Retail"),
        ],
    )
    async def test_unlimited_tiers_never_open_a_transaction(
        self, account, mock_accounts, mock_usage, now
    ):
        mock_accounts.get_account = AsyncMock(return_value=account)
        service = AccessService(mock_accounts, mock_usage)

        for i in range(5):
            assert (await service.decide_access(Identity("user-1"), f"r{i}", now)).granted is True

        assert mock_usage.run_usage_transaction.call_count == 0


class TestDecideAccessTotality:
    """Every Tier member has a defined outcome."""

    EXPECTED = {
        Tier.NONE: (False, DenialReason.UNAUTHENTICATED),
        Tier.CURIOUS: (True, None),
        Tier.ACTIVE: (True, None),
        Tier.QUANT: (True, None),
        Tier.ADMIN: (True, None),
    }

    def test_expectations_cover_every_tier(self):
        assert set(self.EXPECTED) == set(Tier)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tier", list(Tier))
    async def test_every_tier_is_handled(self, tier, mock_accounts, mock_usage, now):
        service = AccessService(mock_accounts, mock_usage)

        with patch.object(service, "resolve_identity_tier", new=AsyncMock(return_value=tier)):
            decision = await service.decide_access(Identity("user-1"), "r1", now)

        granted, reason = self.EXPECTED[tier]
        assert decision.granted is granted
        assert decision.reason is reason
        assert decision.tier is tier


class TestDecideAccessFailures:
    """Account and storage failures deny."""

    @pytest.mark.asyncio
    async def test_missing_account_is_unauthenticated(self, access_service, now):
        decision = await access_service.decide_access(Identity("ghost"), "r1", now)
        assert decision.reason is DenialReason.UNAUTHENTICATED

    @pytest.mark.asyncio
    async def test_free_tier_is_unauthenticated(self, access_service, add_account, now):
        add_account("user-1", subscription_tier="free")
        decision = await access_service.decide_access(Identity("user-1"), "r1", now)
        assert decision.reason is DenialReason.UNAUTHENTICATED

    @pytest.mark.asyncio
    async def test_account_read_failure_denies(self, mock_accounts, mock_usage, now):
        mock_accounts.get_account = AsyncMock(side_effect=StorageUnavailableError("down"))
        service = AccessService(mock_accounts, mock_usage)

        decision = await service.decide_access(Identity("user-1"), "r1", now)

        assert decision.granted is False
        assert decision.reason is DenialReason.UNAUTHENTICATED
        mock_usage.run_usage_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_usage_transaction_failure_is_quota_denial(
        self, mock_accounts, mock_usage, now
    ):
        """Storage state is never surfaced as its own reason."""
        mock_accounts.get_account = AsyncMock(
            return_value=Account(id="user-1", subscription_tier=CURIOUS)
        )
        mock_usage.run_usage_transaction = AsyncMock(side_effect=StorageUnavailableError("down"))
        service = AccessService(mock_accounts, mock_usage)

        decision = await service.decide_access(Identity("user-1"), "r1", now)

        assert decision.granted is False
        assert decision.reason is DenialReason.QUOTA_EXCEEDED


class TestGetUsageStatus:
    """Tests for get_usage_status."""

    @pytest.mark.asyncio
    async def test_unauthenticated(self, access_service, now):
        status = await access_service.get_usage_status(None, now)
        assert status.tier is Tier.NONE
        assert status.limit == 0
        assert status.remaining == 0
        assert status.period_key == "2025-01"

    @pytest.mark.asyncio
    async def test_unlimited_tier(self, access_service, add_account, now):
        add_account("user-1", subscription_tier="Quant Edge")
        status = await access_service.get_usage_status(Identity("user-1"), now)
        assert status.tier is Tier.QUANT
        assert status.limit is None
        assert status.remaining is None

    @pytest.mark.asyncio
    async def test_curious_counts_views(self, access_service, add_account, memory_store, now):
        add_account("user-1", subscription_tier=CURIOUS)
        identity = Identity("user-1")
        await access_service.decide_access(identity, "r2", now)
        await access_service.decide_access(identity, "r1", now)

        status = await access_service.get_usage_status(identity, now)

        assert status.views_used == 2
        assert status.limit == 3
        assert status.remaining == 1
        assert status.viewed_resource_ids == ["r1", "r2"]

    @pytest.mark.asyncio
    async def test_does_not_create_a_period(self, access_service, add_account, memory_store, now):
        add_account("user-1", subscription_tier=CURIOUS)

        status = await access_service.get_usage_status(Identity("user-1"), now)

        assert status.views_used == 0
        assert status.remaining == 3
        assert memory_store.usage == {}

    @pytest.mark.asyncio
    async def test_uses_gate_limit(self, repositories, add_account, now):
        add_account("user-1", subscription_tier=CURIOUS)
        service = AccessService(
            repositories.accounts,
            repositories.usage,
            quota_gate=QuotaGate(repositories.usage, limit=10),
        )

        status = await service.get_usage_status(Identity("user-1"), now)
        assert status.limit == 10

    @pytest.mark.asyncio
    async def test_usage_read_failure_fails_closed(self, mock_accounts, mock_usage, now):
        mock_accounts.get_account = AsyncMock(
            return_value=Account(id="user-1", subscription_tier=CURIOUS)
        )
        mock_usage.get_usage_period = AsyncMock(
            side_effect=StorageUnavailableError("connection lost", account_id="user-1")
        )
        service = AccessService(mock_accounts, mock_usage)

        status = await service.get_usage_status(Identity("user-1"), now)

        assert status.tier is Tier.CURIOUS
        assert status.degraded is True
        assert status.limit == 3
        assert status.remaining == 0
        assert status.viewed_resource_ids == []
