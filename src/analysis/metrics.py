"""Portfolio return, volatility and Sharpe ratio for a weight vector."""

from __future__ import annotations

import math

import numpy as np

from src.config import Defaults
from src.models import PortfolioPoint


def portfolio_return(weights: np.ndarray, mu: np.ndarray) -> float:
    return float(weights @ mu)


def portfolio_volatility(weights: np.ndarray, cov: np.ndarray) -> float:
    # Rounding can push w'Sw slightly below zero for PSD matrices.
    variance = float(weights @ cov @ weights)
    return math.sqrt(max(variance, 0.0))


def sharpe_ratio(ret: float, vol: float, risk_free_rate: float) -> float:
    return (ret - risk_free_rate) / vol if vol > 0 else 0.0


def portfolio_metrics(
    weights,
    expected_returns,
    covariance,
    risk_free_rate: float = Defaults.RISK_FREE_RATE,
) -> PortfolioPoint:
    """Evaluate *weights* against (mu, cov) and return a ``PortfolioPoint``."""
    w = np.asarray(weights, dtype=float)
    mu = np.asarray(expected_returns, dtype=float)
    cov = np.asarray(covariance, dtype=float)

    ret = portfolio_return(w, mu)
    vol = portfolio_volatility(w, cov)
    return PortfolioPoint(
        expected_return=ret,
        risk=vol,
        sharpe_ratio=sharpe_ratio(ret, vol, risk_free_rate),
        weights=tuple(float(x) for x in w),
    )
