"""Unit tests for strategy record normalization."""

from paywall.core.strategies import StrategySummary, normalize_strategy


class TestNormalizeStrategy:
    """Tests for normalize_strategy."""

    def test_fills_defaults_for_sparse_record(self):
        strategy = normalize_strategy("s1", {"name": "Gap Fade"})

        assert strategy.id == "s1"
        assert strategy.tier == "Curious Retail"
        assert strategy.status == "active"
        assert strategy.win_rate == 0.0
        assert strategy.description == ""

    def test_nulls_read_as_defaults(self):
        strategy = normalize_strategy(
            "s1", {"name": "Gap Fade", "market": None, "trades": None, "tier": None}
        )

        assert strategy.market == ""
        assert strategy.trades == 0
        assert strategy.tier == "Curious Retail"

    def test_missing_name_falls_back_to_id(self):
        assert normalize_strategy("s1", {}).name == "s1"
        assert normalize_strategy("s1", {"name": ""}).name == "s1"

    def test_record_id_is_ignored(self):
        assert normalize_strategy("s1", {"id": "other", "name": "x"}).id == "s1"

    def test_legacy_percent_values_are_kept(self):
        """Older hand-entered records store percentages, not fractions."""
        strategy = normalize_strategy("s1", {"name": "x", "win_rate": 62.5, "max_drawdown": 18})
        assert strategy.win_rate == 62.5

    def test_summary_from_strategy(self):
        strategy = normalize_strategy("s1", {"name": "x", "market": "ES"})
        summary = StrategySummary.model_validate(strategy)
        assert summary.id == "s1"
        assert summary.market == "ES"
