"""Pick named portfolios off an efficient frontier."""

from __future__ import annotations

from enum import Enum

from src.analysis.metrics import sharpe_ratio
from src.config import Defaults
from src.errors import OptimizationFailureError
from src.models import PortfolioPoint


class SelectionPolicy(Enum):
    """How the "optimal" portfolio is chosen."""
    TARGET = "target"          # nearest to a (return, risk) target
    MAX_SHARPE = "max_sharpe"  # best risk-adjusted return


def _require_points(frontier: list[PortfolioPoint]) -> None:
    if not frontier:
        raise OptimizationFailureError("Cannot select from an empty frontier")


def select_optimal(
    frontier: list[PortfolioPoint],
    target_return: float = Defaults.TARGET_RETURN,
    target_risk: float = Defaults.TARGET_RISK,
    risk_free_rate: float = Defaults.RISK_FREE_RATE,
    report_target_metrics: bool = Defaults.REPORT_TARGET_METRICS,
) -> PortfolioPoint:
    """Frontier point closest to (target_return, target_risk) in L1 distance.

    The first point wins on ties.  With *report_target_metrics* the
    returned point keeps the nearest member's weights but reports the
    target return and risk (and the Sharpe ratio implied by them);
    otherwise the nearest member is returned as-is.
    """
    _require_points(frontier)

    best = frontier[0]
    best_score = float("inf")
    for point in frontier:
        score = abs(point.expected_return - target_return) + abs(point.risk - target_risk)
        if score < best_score:
            best, best_score = point, score

    if not report_target_metrics:
        return best
    return PortfolioPoint(
        expected_return=target_return,
        risk=target_risk,
        sharpe_ratio=sharpe_ratio(target_return, target_risk, risk_free_rate),
        weights=best.weights,
    )


def select_max_sharpe(frontier: list[PortfolioPoint]) -> PortfolioPoint:
    """Frontier point with the highest Sharpe ratio (first on ties)."""
    _require_points(frontier)
    return max(frontier, key=lambda p: p.sharpe_ratio)


def select_minimum_risk(frontier: list[PortfolioPoint]) -> PortfolioPoint:
    """Lowest-risk point; the frontier is sorted by risk so this is the head."""
    _require_points(frontier)
    return frontier[0]


def select_portfolio(
    frontier: list[PortfolioPoint],
    policy: SelectionPolicy | str = Defaults.POLICY,
    target_return: float = Defaults.TARGET_RETURN,
    target_risk: float = Defaults.TARGET_RISK,
    risk_free_rate: float = Defaults.RISK_FREE_RATE,
    report_target_metrics: bool = Defaults.REPORT_TARGET_METRICS,
) -> PortfolioPoint:
    """Dispatch to the selector for *policy*."""
    policy = SelectionPolicy(policy)
    if policy is SelectionPolicy.MAX_SHARPE:
        return select_max_sharpe(frontier)
    return select_optimal(
        frontier, target_return, target_risk, risk_free_rate, report_target_metrics
    )
