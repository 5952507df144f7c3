"""End-to-end tests for PortfolioOptimizer and the pipeline engine."""

import json

import numpy as np
import pytest

from src.analysis import PortfolioOptimizer, optimize_portfolio
from src.errors import InsufficientInputError
from src.models import AssetHolding
from src.pipeline.context import OptimizationContext
from src.pipeline.engine import OptimizationEngine


FAST = {"n_points": 30, "mc_count": 200, "mc_seed": 7}


class TestPortfolioOptimizer:

    def test_full_run(self, three_holdings, three_asset_history):
        result = PortfolioOptimizer(**FAST).optimize(three_holdings, three_asset_history)

        assert result.symbols == ["A", "B", "C"]
        assert result.expected_returns == pytest.approx([0.10, 0.06, 0.04], abs=1e-9)
        assert result.covariance.shape == (3, 3)

        risks = [p.risk for p in result.efficient_frontier]
        rets = [p.expected_return for p in result.efficient_frontier]
        assert risks == sorted(risks)
        assert all(b >= a for a, b in zip(rets, rets[1:]))

        assert result.minimum_risk_portfolio is result.efficient_frontier[0]
        assert 0 < len(result.monte_carlo_cloud) <= 200

        # Target metrics are reported on the nearest frontier member's weights.
        assert result.optimal_portfolio.expected_return == pytest.approx(0.23)
        assert result.optimal_portfolio.risk == pytest.approx(0.12)
        assert sum(result.optimal_portfolio.weights) == pytest.approx(1.0)

        assert result.current_portfolio.weights == pytest.approx((0.6, 0.3, 0.1))
        assert result.summary.total_value == pytest.approx(10_000)
        assert len(result.adjustments) == 3
        assert result.cash_remaining == pytest.approx(result.total_sell - result.total_buy)

    def test_trades_reach_optimal_weights(self, three_holdings, three_asset_history):
        result = PortfolioOptimizer(**FAST).optimize(
            three_holdings, three_asset_history, rebalance_threshold=0.0
        )
        for holding, adj in zip(three_holdings, result.adjustments):
            sign = {"buy": 1, "sell": -1, "hold": 0}[adj.action.value]
            new_value = holding.market_value + sign * adj.amount
            assert new_value == pytest.approx(adj.optimal_weight * 10_000, abs=1e-6)

    def test_max_sharpe_policy(self, three_holdings, three_asset_history):
        result = PortfolioOptimizer(**FAST).optimize(
            three_holdings, three_asset_history, policy="max_sharpe"
        )
        best = max(p.sharpe_ratio for p in result.efficient_frontier)
        assert result.optimal_portfolio.sharpe_ratio == best
        assert result.optimal_portfolio in result.efficient_frontier

    def test_nearest_member_without_target_metrics(self, three_holdings, three_asset_history):
        result = optimize_portfolio(
            three_holdings, three_asset_history,
            report_target_metrics=False, **FAST,
        )
        assert result.optimal_portfolio in result.efficient_frontier

    def test_no_cloud(self, three_holdings, three_asset_history):
        result = PortfolioOptimizer(n_points=20, mc_count=0).optimize(
            three_holdings, three_asset_history
        )
        assert result.monte_carlo_cloud == []
        assert "monte_carlo_cloud" not in result.to_dict(include_cloud=False)

    def test_result_is_json_serialisable(self, three_holdings, three_asset_history):
        result = PortfolioOptimizer(**FAST).optimize(three_holdings, three_asset_history)
        payload = json.loads(json.dumps(result.to_dict()))
        assert set(payload["expected_returns"]) == {"A", "B", "C"}
        assert payload["covariance"]["A"]["B"] == payload["covariance"]["B"]["A"]
        assert len(payload["adjustments"]) == 3
        assert {"total_buy", "total_sell", "cash_remaining"} <= set(payload)
        assert len(payload["monte_carlo_cloud"]) == len(result.monte_carlo_cloud)

    def test_seeded_runs_are_identical(self, three_holdings, three_asset_history):
        a = PortfolioOptimizer(**FAST).optimize(three_holdings, three_asset_history)
        b = PortfolioOptimizer(**FAST).optimize(three_holdings, three_asset_history)
        assert a.to_dict() == b.to_dict()

    def test_duplicate_symbols_raise(self, three_holdings, three_asset_history):
        dup = three_holdings + [AssetHolding("A", 1, 100.0, 100.0)]
        with pytest.raises(InsufficientInputError, match="Duplicate"):
            PortfolioOptimizer().optimize(dup, three_asset_history)

    def test_single_asset_raises(self, three_holdings, three_asset_history):
        with pytest.raises(InsufficientInputError):
            PortfolioOptimizer().optimize(three_holdings[:1], three_asset_history)

    def test_progress_callback(self, three_holdings, three_asset_history):
        calls = []
        PortfolioOptimizer(progress_callback=lambda *a: calls.append(a), **FAST).optimize(
            three_holdings, three_asset_history
        )
        assert [c[0] for c in calls] == [
            "compute_statistics_step",
            "evaluate_current_step",
            "build_frontier_step",
            "sample_cloud_step",
            "select_portfolios_step",
            "plan_rebalance_step",
        ]
        assert all(status == "completed" for _, status, _ in calls)


class TestOptimizationEngine:

    def _ctx(self):
        assets = [AssetHolding("X", 1, 1.0, 1.0), AssetHolding("Y", 1, 1.0, 1.0)]
        return OptimizationContext(assets=assets, history={})

    def test_records_steps_and_timings(self):
        def first(ctx):
            ctx.expected_returns = np.zeros(2)

        def second(ctx):
            ctx.total_value = 2.0

        ctx = OptimizationEngine().run(self._ctx(), [first, second])
        assert ctx.steps_completed == ["first", "second"]
        assert set(ctx.timings) == {"first", "second"}
        assert ctx.total_value == 2.0

    def test_failure_is_recorded_and_reraised(self):
        calls = []

        def boom(ctx):
            raise InsufficientInputError("no data")

        def never(ctx):
            calls.append("never")

        ctx = self._ctx()
        engine = OptimizationEngine(progress_callback=lambda *a: calls.append(a[:2]))
        with pytest.raises(InsufficientInputError, match="no data"):
            engine.run(ctx, [boom, never])

        assert ctx.errors == [{"step": "boom", "error": "no data"}]
        assert ctx.steps_completed == []
        assert calls == [("boom", "failed")]
