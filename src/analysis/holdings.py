"""Valuation and concentration of the current holdings."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from src.errors import InsufficientInputError
from src.models import AssetHolding, PortfolioSummary


def total_value(assets: Sequence[AssetHolding]) -> float:
    return float(sum(a.market_value for a in assets))


def current_weights(assets: Sequence[AssetHolding]) -> np.ndarray:
    """Market-value weights of *assets*; they sum to 1."""
    value = total_value(assets)
    if value <= 0:
        raise InsufficientInputError("Portfolio has zero market value")
    return np.array([a.market_value / value for a in assets])


def diversification_score(weights: Sequence[float]) -> float:
    """0-100 score from the Herfindahl-Hirschman index (100 = equal weights).

    score = (1 - HHI) / (1 - 1/n) * 100, clipped to [0, 100].
    """
    w = np.asarray(weights, dtype=float)
    n = w.size
    if n < 2:
        return 0.0
    hhi = float(np.sum(w ** 2))
    score = (1.0 - hhi) / (1.0 - 1.0 / n) * 100.0
    return float(np.clip(score, 0.0, 100.0))


def summarize_holdings(assets: Sequence[AssetHolding]) -> PortfolioSummary:
    """Value, invested capital, gain/loss and diversification of *assets*."""
    value = total_value(assets)
    invested = float(sum(a.cost_basis for a in assets))
    gain = value - invested
    gain_pct = gain / invested * 100.0 if invested > 0 else 0.0
    weights = [a.market_value / value for a in assets] if value > 0 else []

    return PortfolioSummary(
        total_value=value,
        total_invested=invested,
        total_gain_loss=gain,
        total_gain_loss_pct=gain_pct,
        diversification_score=diversification_score(weights),
    )
