"""End-to-end Markowitz optimisation of a set of holdings.

Wires the statistics engine, frontier generator, Monte Carlo sampler,
selector and rebalancing planner together through the pipeline engine.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from src.errors import InsufficientInputError
from src.models import AssetHolding, OptimizationResult
from src.pipeline.context import OptimizationContext
from src.pipeline.engine import OptimizationEngine, ProgressCallback
from src.pipeline.steps import DEFAULT_STEPS


class PortfolioOptimizer:
    """Compute the efficient frontier and the trades to reach its optimal point.

    Keyword arguments given to the constructor override the defaults from
    ``configs/settings.yaml`` for every run; keyword arguments given to
    :meth:`optimize` override them for that run only.  Accepted names are
    the parameter fields of ``OptimizationContext`` (``risk_free_rate``,
    ``n_points``, ``solver``, ``mc_count``, ``mc_seed``, ``policy``,
    ``target_return``, ``target_risk``, ...).
    """

    def __init__(
        self,
        progress_callback: ProgressCallback | None = None,
        **overrides: Any,
    ) -> None:
        self.engine = OptimizationEngine(progress_callback=progress_callback)
        self.overrides = overrides

    def optimize(
        self,
        assets: Sequence[AssetHolding],
        history_by_symbol: Mapping[str, Any],
        **overrides: Any,
    ) -> OptimizationResult:
        """Run the full pipeline for *assets*.

        Args:
            assets: Current holdings (at least two, unique symbols).
            history_by_symbol: ``{symbol: price history}``.

        Returns:
            ``OptimizationResult`` with statistics, frontier, cloud, the
            current/optimal/minimum-risk portfolios and the rebalance plan.

        Raises:
            InsufficientInputError, DegenerateCovarianceError,
            OptimizationFailureError: propagated from the failing step.
        """
        assets = list(assets)
        symbols = [a.symbol for a in assets]
        if len(set(symbols)) != len(symbols):
            raise InsufficientInputError(f"Duplicate symbols in holdings: {symbols}")

        params = {**self.overrides, **overrides}
        ctx = OptimizationContext(assets=assets, history=dict(history_by_symbol), **params)
        self.engine.run(ctx, DEFAULT_STEPS)
        return self._to_result(ctx)

    @staticmethod
    def _to_result(ctx: OptimizationContext) -> OptimizationResult:
        return OptimizationResult(
            symbols=ctx.symbols,
            expected_returns=ctx.expected_returns,
            covariance=ctx.covariance,
            current_portfolio=ctx.current_portfolio,
            optimal_portfolio=ctx.optimal_portfolio,
            minimum_risk_portfolio=ctx.minimum_risk_portfolio,
            efficient_frontier=ctx.efficient_frontier,
            rebalance=ctx.rebalance,
            summary=ctx.summary,
            monte_carlo_cloud=ctx.monte_carlo_cloud,
        )


def optimize_portfolio(
    assets: Sequence[AssetHolding],
    history_by_symbol: Mapping[str, Any],
    **overrides: Any,
) -> OptimizationResult:
    """Convenience wrapper around ``PortfolioOptimizer().optimize``."""
    return PortfolioOptimizer().optimize(assets, history_by_symbol, **overrides)

