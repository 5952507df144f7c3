"""Tests for src.analysis.selection -- choosing portfolios off the frontier."""

import pytest

from src.analysis.selection import (
    SelectionPolicy,
    select_max_sharpe,
    select_minimum_risk,
    select_optimal,
    select_portfolio,
)
from src.errors import OptimizationFailureError
from src.models import PortfolioPoint


@pytest.fixture
def frontier():
    return [
        PortfolioPoint(0.05, 0.05, 0.60, (0.1, 0.9)),
        PortfolioPoint(0.07, 0.08, 0.625, (0.5, 0.5)),
        PortfolioPoint(0.09, 0.12, 0.583, (0.8, 0.2)),
        PortfolioPoint(0.10, 0.15, 0.533, (1.0, 0.0)),
    ]


class TestSelectOptimal:

    def test_nearest_point_weights_with_target_metrics(self, frontier):
        p = select_optimal(frontier, target_return=0.23, target_risk=0.12, risk_free_rate=0.02)
        # L1 distances: .25, .20, .14, .16 -> third point
        assert p.weights == (0.8, 0.2)
        assert p.expected_return == 0.23
        assert p.risk == 0.12
        assert p.sharpe_ratio == pytest.approx((0.23 - 0.02) / 0.12)

    def test_nearest_point_as_is(self, frontier):
        p = select_optimal(frontier, 0.23, 0.12, report_target_metrics=False)
        assert p is frontier[2]

    def test_exact_match(self, frontier):
        p = select_optimal(frontier, 0.07, 0.08, report_target_metrics=False)
        assert p is frontier[1]

    def test_first_point_wins_ties(self):
        a = PortfolioPoint(0.25, 0.5, 0.4, (0.3, 0.7))
        b = PortfolioPoint(0.75, 1.0, 0.5, (0.6, 0.4))
        p = select_optimal([a, b], target_return=0.5, target_risk=0.75,
                           report_target_metrics=False)
        assert p is a

    def test_zero_target_risk_gives_zero_sharpe(self, frontier):
        p = select_optimal(frontier, target_return=0.05, target_risk=0.0)
        assert p.sharpe_ratio == 0.0

    def test_empty_frontier_raises(self):
        with pytest.raises(OptimizationFailureError):
            select_optimal([])


class TestOtherSelectors:

    def test_max_sharpe(self, frontier):
        assert select_max_sharpe(frontier) is frontier[1]

    def test_minimum_risk_is_first(self, frontier):
        assert select_minimum_risk(frontier) is frontier[0]

    @pytest.mark.parametrize("selector", [select_max_sharpe, select_minimum_risk])
    def test_empty_raises(self, selector):
        with pytest.raises(OptimizationFailureError):
            selector([])


class TestSelectPortfolio:

    def test_policy_string(self, frontier):
        assert select_portfolio(frontier, "max_sharpe") is frontier[1]

    def test_policy_enum_target(self, frontier):
        p = select_portfolio(frontier, SelectionPolicy.TARGET, 0.23, 0.12,
                             report_target_metrics=False)
        assert p is frontier[2]

    def test_unknown_policy_raises(self, frontier):
        with pytest.raises(ValueError):
            select_portfolio(frontier, "min_drawdown")
