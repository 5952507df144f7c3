"""Shared pytest fixtures for the frontier rebalancer test suite.

Provides synthetic price histories with fixed random seeds for
reproducibility.  Return series are demeaned and re-centred so the
annualised expected returns come out exactly as requested.
"""

import numpy as np
import pandas as pd
import pytest

from src.models import AssetClass, AssetHolding


TRADING_DAYS = 252


def make_price_history(
    annual_returns=(0.10, 0.06, 0.04),
    annual_vols=(0.15, 0.10, 0.05),
    n=505,
    seed=42,
    start=100.0,
):
    """Price series per asset whose simple returns have exact annual means.

    Returns a dict ``{"A": Series, "B": Series, ...}`` indexed by business
    days, plus the underlying daily-return DataFrame.
    """
    rng = np.random.default_rng(seed)
    k = len(annual_returns)
    names = [chr(ord("A") + i) for i in range(k)]
    dates = pd.bdate_range(start="2022-01-03", periods=n + 1)

    noise = rng.standard_normal((n, k))
    noise = (noise - noise.mean(axis=0)) / noise.std(axis=0, ddof=1)
    daily = noise * (np.array(annual_vols) / np.sqrt(TRADING_DAYS)) \
        + np.array(annual_returns) / TRADING_DAYS

    prices = start * np.vstack([np.ones(k), np.cumprod(1 + daily, axis=0)])
    history = {
        name: pd.Series(prices[:, i], index=dates, name=name)
        for i, name in enumerate(names)
    }
    returns_df = pd.DataFrame(daily, index=dates[1:], columns=names)
    return history, returns_df


# ---------------------------------------------------------------------------
# 1. Holdings
# ---------------------------------------------------------------------------

@pytest.fixture
def three_holdings():
    """$10,000 portfolio: A 60%, B 30%, C 10%."""
    return [
        AssetHolding("A", quantity=60, current_price=100.0, purchase_price=80.0,
                     asset_class=AssetClass.STOCK),
        AssetHolding("B", quantity=30, current_price=100.0, purchase_price=110.0,
                     asset_class=AssetClass.ETF),
        AssetHolding("C", quantity=20, current_price=50.0, purchase_price=50.0,
                     asset_class=AssetClass.BOND),
    ]


@pytest.fixture
def two_holdings():
    """$10,000 portfolio: A $8,000 (80%), B $2,000 (20%)."""
    return [
        AssetHolding("A", quantity=80, current_price=100.0, purchase_price=90.0),
        AssetHolding("B", quantity=40, current_price=50.0, purchase_price=50.0,
                     asset_class="bond"),
    ]


# ---------------------------------------------------------------------------
# 2. Price histories
# ---------------------------------------------------------------------------

@pytest.fixture
def three_asset_history():
    history, _ = make_price_history()
    return history


@pytest.fixture
def three_asset_returns():
    _, returns_df = make_price_history()
    return returns_df


# ---------------------------------------------------------------------------
# 3. Hand-picked statistics
# ---------------------------------------------------------------------------

@pytest.fixture
def two_asset_stats():
    """A: 10% return / 15% risk, B: 4% return / 5% risk, uncorrelated."""
    mu = np.array([0.10, 0.04])
    cov = np.diag([0.15 ** 2, 0.05 ** 2])
    return mu, cov


@pytest.fixture
def three_asset_stats():
    """Three correlated assets with returns 10% / 6% / 4%."""
    mu = np.array([0.10, 0.06, 0.04])
    vols = np.array([0.15, 0.10, 0.05])
    corr = np.array([
        [1.0, 0.3, 0.1],
        [0.3, 1.0, 0.2],
        [0.1, 0.2, 1.0],
    ])
    cov = corr * np.outer(vols, vols)
    return mu, cov


@pytest.fixture
def two_asset_history():
    """A: 10% return / 15% vol, B: 4% return / 5% vol, as price series."""
    history, _ = make_price_history(annual_returns=(0.10, 0.04), annual_vols=(0.15, 0.05))
    return history
