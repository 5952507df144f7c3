"""Built-in pipeline steps: statistics, frontier, cloud, selection, rebalance.

Each step is a function: (OptimizationContext) -> None
"""

from __future__ import annotations

from src.analysis.frontier import generate_frontier
from src.analysis.holdings import current_weights, summarize_holdings, total_value
from src.analysis.metrics import portfolio_metrics
from src.analysis.monte_carlo import sample_portfolios
from src.analysis.rebalancing import plan_rebalance
from src.analysis.selection import select_minimum_risk, select_portfolio
from src.analysis.statistics import compute_statistics
from src.config import Defaults
from src.pipeline.context import OptimizationContext
from src.utils.logger import setup_logger

logger = setup_logger("steps", Defaults.LOG_LEVEL)


# ============================================================
# STATISTICS
# ============================================================

def compute_statistics_step(ctx: OptimizationContext) -> None:
    """Expected returns and covariance from the price history."""
    ctx.expected_returns, ctx.covariance = compute_statistics(
        ctx.assets, ctx.history,
        trading_days=ctx.trading_days, alignment=ctx.alignment,
    )


def evaluate_current_step(ctx: OptimizationContext) -> None:
    """Value the holdings and score the allocation they imply."""
    ctx.total_value = total_value(ctx.assets)
    ctx.current_weights = current_weights(ctx.assets)
    ctx.summary = summarize_holdings(ctx.assets)
    ctx.current_portfolio = portfolio_metrics(
        ctx.current_weights, ctx.expected_returns, ctx.covariance, ctx.risk_free_rate,
    )
    logger.info(
        "Current portfolio: value=%.2f return=%.4f risk=%.4f",
        ctx.total_value, ctx.current_portfolio.expected_return, ctx.current_portfolio.risk,
    )


# ============================================================
# FRONTIER
# ============================================================

def build_frontier_step(ctx: OptimizationContext) -> None:
    ctx.efficient_frontier = generate_frontier(
        ctx.expected_returns, ctx.covariance,
        n_points=ctx.n_points, risk_free_rate=ctx.risk_free_rate,
        solver=ctx.solver, max_workers=ctx.max_workers,
    )


def sample_cloud_step(ctx: OptimizationContext) -> None:
    """Monte Carlo cloud for charting; skipped when mc_count is 0."""
    ctx.monte_carlo_cloud = sample_portfolios(
        ctx.expected_returns, ctx.covariance,
        count=ctx.mc_count, risk_free_rate=ctx.risk_free_rate, seed=ctx.mc_seed,
    )


# ============================================================
# SELECTION / REBALANCE
# ============================================================

def select_portfolios_step(ctx: OptimizationContext) -> None:
    ctx.optimal_portfolio = select_portfolio(
        ctx.efficient_frontier, ctx.policy,
        target_return=ctx.target_return, target_risk=ctx.target_risk,
        risk_free_rate=ctx.risk_free_rate,
        report_target_metrics=ctx.report_target_metrics,
    )
    ctx.minimum_risk_portfolio = select_minimum_risk(ctx.efficient_frontier)


def plan_rebalance_step(ctx: OptimizationContext) -> None:
    ctx.rebalance = plan_rebalance(
        ctx.assets, ctx.current_weights, ctx.optimal_portfolio.weights,
        ctx.total_value, threshold=ctx.rebalance_threshold,
    )
    logger.info(
        "Rebalance: buy=%.2f sell=%.2f cash=%.2f",
        ctx.rebalance.total_buy, ctx.rebalance.total_sell, ctx.rebalance.cash_remaining,
    )


DEFAULT_STEPS = [
    compute_statistics_step,
    evaluate_current_step,
    build_frontier_step,
    sample_cloud_step,
    select_portfolios_step,
    plan_rebalance_step,
]
