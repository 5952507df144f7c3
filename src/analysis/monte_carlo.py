"""Random feasible portfolios for charting the dominated region.

Weights are drawn uniformly over the simplex (symmetric Dirichlet with
concentration 1): one unit-rate exponential variate per asset, normalised
by their sum.  These points are for visualisation only and are never
part of the efficient frontier.
"""

from __future__ import annotations

import numpy as np

from src.analysis.metrics import sharpe_ratio
from src.config import Defaults
from src.models import PortfolioPoint
from src.utils.logger import setup_logger

logger = setup_logger("monte_carlo", Defaults.LOG_LEVEL)


def dirichlet_weights(n_assets: int, count: int, rng: np.random.Generator) -> np.ndarray:
    """``count`` x ``n_assets`` matrix of uniform-simplex weight vectors."""
    draws = rng.standard_exponential((count, n_assets))
    return draws / draws.sum(axis=1, keepdims=True)


def sample_portfolios(
    expected_returns,
    covariance,
    count: int = Defaults.MC_COUNT,
    risk_free_rate: float = Defaults.RISK_FREE_RATE,
    seed: int | None = Defaults.MC_SEED,
    risk_band: tuple[float, float] = Defaults.MC_RISK_BAND,
    return_band: tuple[float, float] = Defaults.MC_RETURN_BAND,
) -> list[PortfolioPoint]:
    """Draw *count* random portfolios and keep those inside the plotting bands.

    Returns:
        Unordered list of at most *count* ``PortfolioPoint`` objects.
    """
    mu = np.asarray(expected_returns, dtype=float)
    cov = np.asarray(covariance, dtype=float)
    if count <= 0 or mu.size == 0:
        return []

    rng = np.random.default_rng(seed)
    weights = dirichlet_weights(mu.size, count, rng)

    rets = weights @ mu
    variances = np.einsum("ij,jk,ik->i", weights, cov, weights)
    vols = np.sqrt(np.clip(variances, 0.0, None))

    keep = (
        np.isfinite(rets) & np.isfinite(vols)
        & (vols >= risk_band[0]) & (vols <= risk_band[1])
        & (rets >= return_band[0]) & (rets <= return_band[1])
    )

    samples = [
        PortfolioPoint(
            expected_return=float(rets[i]),
            risk=float(vols[i]),
            sharpe_ratio=sharpe_ratio(float(rets[i]), float(vols[i]), risk_free_rate),
            weights=tuple(float(x) for x in weights[i]),
        )
        for i in np.nonzero(keep)[0]
    ]
    logger.debug("Monte Carlo: kept %d of %d samples", len(samples), count)
    return samples
