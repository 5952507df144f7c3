"""Statistics engine: periodic returns, annualised expected returns and covariance.

Two alignment modes are supported:

* ``positional`` -- each asset's return series is built from its own price
  list, and pairwise covariances use the first ``min(len_i, len_j)``
  observations of both series.  Cheap, but mismatched calendars are paired
  by index rather than by date.
* ``date`` -- all price series are joined on their timestamps, gaps are
  forward-filled, and returns are computed on the aligned frame.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np
import pandas as pd

from src.config import Defaults
from src.errors import InsufficientInputError
from src.models import AssetHolding, PricePoint
from src.utils.logger import setup_logger

logger = setup_logger("statistics", Defaults.LOG_LEVEL)

_ALIGNMENTS = ("positional", "date")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _as_price_series(raw: Any) -> pd.Series:
    """Normalise the accepted history shapes into a float Series.

    Accepts a pandas Series (index = timestamps), a DataFrame with a
    ``Close`` or ``price`` column, or a sequence of ``PricePoint`` objects,
    ``(timestamp, price)`` pairs, ``{"date": ..., "price": ...}`` dicts or
    bare prices.
    """
    if raw is None:
        return pd.Series(dtype=float)
    if isinstance(raw, pd.DataFrame):
        col = "Close" if "Close" in raw.columns else "price"
        return raw[col].astype(float)
    if isinstance(raw, pd.Series):
        return raw.astype(float)

    stamps: list = []
    prices: list[float] = []
    for item in raw:
        if isinstance(item, PricePoint):
            stamps.append(item.timestamp)
            prices.append(item.price)
        elif isinstance(item, Mapping):
            stamps.append(item.get("date", item.get("timestamp")))
            prices.append(float(item["price"]))
        elif isinstance(item, (tuple, list)):
            stamps.append(item[0])
            prices.append(float(item[1]))
        else:
            stamps.append(None)
            prices.append(float(item))

    if any(s is None for s in stamps):
        return pd.Series(prices, dtype=float)
    return pd.Series(prices, index=pd.to_datetime(stamps), dtype=float)


def periodic_returns(prices: Sequence[float] | np.ndarray) -> np.ndarray:
    """Simple returns ``(p[i] - p[i-1]) / p[i-1]``; empty for < 2 prices."""
    arr = np.asarray(prices, dtype=float)
    if arr.size < 2:
        return np.array([], dtype=float)
    return np.diff(arr) / arr[:-1]


def _positional_covariance(returns: list[np.ndarray], trading_days: int) -> np.ndarray:
    n = len(returns)
    means = [r.mean() if r.size else 0.0 for r in returns]
    cov = np.zeros((n, n))
    for i in range(n):
        for j in range(i, n):
            k = min(returns[i].size, returns[j].size)
            if k < 2:
                continue
            dev_i = returns[i][:k] - means[i]
            dev_j = returns[j][:k] - means[j]
            c = float(dev_i @ dev_j) / (k - 1) * trading_days
            cov[i, j] = cov[j, i] = c
    return cov


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def compute_statistics(
    assets: Sequence[AssetHolding],
    history_by_symbol: Mapping[str, Any],
    trading_days: int = Defaults.TRADING_DAYS,
    alignment: str = Defaults.ALIGNMENT,
) -> tuple[np.ndarray, np.ndarray]:
    """Annualised expected returns and covariance for *assets*.

    Args:
        assets: Holdings in portfolio order; the output vectors follow it.
        history_by_symbol: ``{symbol: price history}`` in ascending time order.
        trading_days: Periods per year used to annualise.
        alignment: ``"positional"`` or ``"date"``.

    Returns:
        ``(expected_returns, covariance)`` as numpy arrays.

    Raises:
        InsufficientInputError: fewer than two assets, or an asset with no
            price points at all.
    """
    if len(assets) < 2:
        raise InsufficientInputError("At least 2 assets are required for optimization")
    if alignment not in _ALIGNMENTS:
        raise ValueError(f"Unknown alignment: {alignment!r}. Choose from {_ALIGNMENTS}.")

    series: list[pd.Series] = []
    for asset in assets:
        s = _as_price_series(history_by_symbol.get(asset.symbol))
        if s.empty:
            raise InsufficientInputError(f"No historical prices for {asset.symbol}")
        bad = ~np.isfinite(s.values) | (s.values <= 0)
        if bad.any():
            raise InsufficientInputError(
                f"Prices for {asset.symbol} must be finite and positive "
                f"({int(bad.sum())} invalid of {len(s)})"
            )
        if len(s) < 2:
            logger.warning(
                "Only one price point for %s; treating its returns as zero", asset.symbol
            )
        series.append(s)

    if alignment == "date":
        return _date_aligned_statistics(assets, series, trading_days)

    returns = [periodic_returns(s.values) for s in series]
    mu = np.array([r.mean() * trading_days if r.size else 0.0 for r in returns])
    cov = _positional_covariance(returns, trading_days)

    logger.debug(
        "Statistics (positional) for %d assets, observations=%s",
        len(assets), [r.size for r in returns],
    )
    return mu, cov


def _date_aligned_statistics(
    assets: Sequence[AssetHolding],
    series: list[pd.Series],
    trading_days: int,
) -> tuple[np.ndarray, np.ndarray]:
    if any(not isinstance(s.index, pd.DatetimeIndex) for s in series):
        raise ValueError("Date alignment requires timestamped price histories")

    prices = pd.concat(series, axis=1, join="outer").sort_index()
    prices.columns = [a.symbol for a in assets]
    prices = prices.ffill().dropna()
    returns_df = prices.pct_change().dropna()

    if len(returns_df) < 2:
        logger.warning("Fewer than 2 overlapping return dates; statistics are degenerate")
        n = len(assets)
        mu = returns_df.mean().fillna(0.0).values * trading_days
        return mu, np.zeros((n, n))

    mu = returns_df.mean().values * trading_days
    cov = returns_df.cov().values * trading_days
    logger.debug("Statistics (date) for %d assets over %d dates", len(assets), len(returns_df))
    return mu, cov
