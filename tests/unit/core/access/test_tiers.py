"""Unit tests for tier resolution."""

import pytest

from paywall.core.access import Account, Tier, is_quota_bound, resolve_tier


def _account(subscription_tier=None, role=None) -> Account:
    return Account(id="user-1", role=role, subscription_tier=subscription_tier)


class TestResolveTierBranches:
    """One test per resolution branch, in priority order."""

    def test_absent_account_is_none(self):
        """Unauthenticated callers have no tier."""
        assert resolve_tier(None) is Tier.NONE

    def test_admin_role(self):
        assert resolve_tier(_account("Curious Retail", role="admin")) is Tier.ADMIN

    def test_admin_in_tier_text(self):
        """Older records carry admin status in the tier field."""
        assert resolve_tier(_account("Admin")) is Tier.ADMIN

    def test_quant(self):
        assert resolve_tier(_account("Quant Edge")) is Tier.QUANT

    def test_active(self):
        assert resolve_tier(_account("Active Trader")) is Tier.ACTIVE

    def test_legacy_active_literal(self):
        """The pre-named-tiers value "active" still resolves to Active."""
        assert resolve_tier(_account("active")) is Tier.ACTIVE

    def test_curious(self):
        assert resolve_tier(_account("Curious Retail")) is Tier.CURIOUS

    def test_unrecognized_is_none(self):
        assert resolve_tier(_account("Platinum")) is Tier.NONE


class TestResolveTierPriority:
    """Tests for first-match-wins ordering."""

    def test_quant_beats_active(self):
        assert resolve_tier(_account("active quant")) is Tier.QUANT

    def test_active_beats_curious(self):
        assert resolve_tier(_account("curious but active")) is Tier.ACTIVE

    def test_admin_text_beats_quant(self):
        assert resolve_tier(_account("quant admin")) is Tier.ADMIN


class TestResolveTierMalformedInput:
    """Malformed data maps to NONE or a tier, never an exception."""

    @pytest.mark.parametrize("raw", [None, "", "   ", "free", "Premium", "curiosity"])
    def test_unrecognized_values(self, raw):
        assert resolve_tier(_account(raw)) is Tier.NONE

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("CURIOUS RETAIL", Tier.CURIOUS),
            ("active trader", Tier.ACTIVE),
            ("QuAnT eDgE", Tier.QUANT),
            ("  Curious Retail  ", Tier.CURIOUS),
        ],
    )
    def test_mixed_case_and_whitespace(self, raw, expected):
        assert resolve_tier(_account(raw)) is expected

    @pytest.mark.parametrize("raw", [42, 3.5, ["quant"], {"tier": "quant"}, True])
    def test_non_string_tier(self, raw):
        """Non-string tier values on arbitrary record objects resolve to NONE."""

        class RawRecord:
            role = None
            subscription_tier = raw

        assert resolve_tier(RawRecord()) is Tier.NONE

    def test_object_without_tier_attributes(self):
        assert resolve_tier(object()) is Tier.NONE

    @pytest.mark.parametrize("role", ["Admin", " admin", "administrator", "owner"])
    def test_role_must_match_exactly(self, role):
        """Only the exact role value "admin" overrides the tier text."""
        assert resolve_tier(_account("Curious Retail", role=role)) is Tier.CURIOUS


class TestResolveTierProperties:
    """Property checks over a spread of tier strings."""

    TIER_TEXTS = [
        None, "", " ", "Inactive", "free", "Curious Retail", "Active Trader",
        "Quant Edge", "active", "unknown", "ADMIN", "canceled",
    ]

    @pytest.mark.parametrize("raw", TIER_TEXTS)
    def test_admin_role_always_wins(self, raw):
        """role == "admin" implies ADMIN whatever the tier text says."""
        assert resolve_tier(_account(raw, role="admin")) is Tier.ADMIN

    @pytest.mark.parametrize("raw", [None, "", " ", "free", "unknown", "canceled", "Gold", "trial"])
    @pytest.mark.parametrize("role", [None, "", "user", "editor"])
    def test_unrecognized_tier_without_admin_role_is_none(self, raw, role):
        assert resolve_tier(_account(raw, role=role)) is Tier.NONE

    @pytest.mark.parametrize("raw", TIER_TEXTS)
    def test_deterministic(self, raw):
        account = _account(raw)
        assert resolve_tier(account) is resolve_tier(account)


class TestIsQuotaBound:
    """Tests for is_quota_bound."""

    def test_only_curious_is_metered(self):
        assert [t for t in Tier if is_quota_bound(t)] == [Tier.CURIOUS]
