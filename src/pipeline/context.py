"""OptimizationContext: shared state bag passed through every pipeline step."""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import numpy as np

from src.config import Defaults
from src.models import AssetHolding, PortfolioPoint, PortfolioSummary, RebalancePlan


@dataclass
class OptimizationContext:
    """Accumulates inputs, intermediates and results as a run executes."""

    # Input
    assets: list[AssetHolding]
    history: dict[str, Any]
    run_id: str = field(default_factory=lambda: datetime.now().strftime("%Y%m%d_%H%M%S"))

    # Parameters
    trading_days: int = Defaults.TRADING_DAYS
    alignment: str = Defaults.ALIGNMENT
    risk_free_rate: float = Defaults.RISK_FREE_RATE
    n_points: int = Defaults.FRONTIER_POINTS
    solver: str = Defaults.SOLVER
    max_workers: int = Defaults.MAX_WORKERS
    mc_count: int = Defaults.MC_COUNT
    mc_seed: int | None = Defaults.MC_SEED
    policy: str = Defaults.POLICY
    target_return: float = Defaults.TARGET_RETURN
    target_risk: float = Defaults.TARGET_RISK
    report_target_metrics: bool = Defaults.REPORT_TARGET_METRICS
    rebalance_threshold: float = Defaults.REBALANCE_THRESHOLD

    # Statistics
    expected_returns: np.ndarray | None = None
    covariance: np.ndarray | None = None

    # Current allocation
    total_value: float = 0.0
    current_weights: np.ndarray | None = None
    current_portfolio: PortfolioPoint | None = None
    summary: PortfolioSummary | None = None

    # Frontier and selections
    efficient_frontier: list[PortfolioPoint] = field(default_factory=list)
    monte_carlo_cloud: list[PortfolioPoint] = field(default_factory=list)
    optimal_portfolio: PortfolioPoint | None = None
    minimum_risk_portfolio: PortfolioPoint | None = None

    # Rebalancing
    rebalance: RebalancePlan | None = None

    # Pipeline metadata
    steps_completed: list[str] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)
    timings: dict[str, float] = field(default_factory=dict)
    started_at: datetime = field(default_factory=datetime.now)

    @property
    def symbols(self) -> list[str]:
        return [a.symbol for a in self.assets]
