"""Value objects flowing through the optimisation engine.

Inputs (holdings, price points) are supplied by the caller; outputs
(portfolio points, adjustments, results) are computed fresh on every run
and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

import numpy as np


def _to_float(val: Any) -> float:
    """Coerce numpy/pandas scalar to plain float for JSON serialization."""
    return round(float(val), 6)


class AssetClass(Enum):
    """Category of a held asset."""
    STOCK = "stock"
    CRYPTO = "crypto"
    ETF = "etf"
    OPTION = "option"
    BOND = "bond"
    COMMODITY = "commodity"


class Action(Enum):
    """Rebalancing action for a single holding."""
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


@dataclass(frozen=True)
class AssetHolding:
    """A position in the portfolio."""

    symbol: str
    quantity: float
    current_price: float
    purchase_price: float
    asset_class: AssetClass = AssetClass.STOCK
    name: str = ""

    def __post_init__(self) -> None:
        if not self.symbol:
            raise ValueError("symbol must be a non-empty string")
        if not self.quantity >= 0:
            raise ValueError(f"quantity for {self.symbol} must be non-negative")
        if not self.current_price > 0:
            raise ValueError(f"current_price for {self.symbol} must be positive")
        if not self.purchase_price > 0:
            raise ValueError(f"purchase_price for {self.symbol} must be positive")
        if isinstance(self.asset_class, str):
            object.__setattr__(self, "asset_class", AssetClass(self.asset_class.lower()))

    @property
    def market_value(self) -> float:
        return self.quantity * self.current_price

    @property
    def cost_basis(self) -> float:
        return self.quantity * self.purchase_price

    @classmethod
    def from_dict(cls, data: dict) -> AssetHolding:
        """Build a holding from a loosely-keyed mapping (YAML / JSON input)."""
        return cls(
            symbol=str(data["symbol"]),
            quantity=float(data["quantity"]),
            current_price=float(data.get("current_price", data.get("currentPrice"))),
            purchase_price=float(data.get("purchase_price", data.get("purchasePrice"))),
            asset_class=data.get("asset_class", data.get("type", "stock")),
            name=str(data.get("name", "")),
        )


@dataclass(frozen=True)
class PricePoint:
    """One observation of a historical price series."""

    timestamp: datetime
    price: float

    def __post_init__(self) -> None:
        if not self.price > 0:
            raise ValueError(f"price at {self.timestamp} must be positive")


@dataclass(frozen=True)
class PortfolioPoint:
    """Return / risk / Sharpe of one weight vector. Immutable once computed."""

    expected_return: float
    risk: float
    sharpe_ratio: float
    weights: tuple[float, ...]

    @property
    def weight_array(self) -> np.ndarray:
        return np.asarray(self.weights, dtype=float)

    def to_dict(self, symbols: list[str] | None = None) -> dict:
        if symbols is not None:
            weights: Any = {s: _to_float(w) for s, w in zip(symbols, self.weights)}
        else:
            weights = [_to_float(w) for w in self.weights]
        return {
            "expected_return": _to_float(self.expected_return),
            "risk": _to_float(self.risk),
            "sharpe_ratio": _to_float(self.sharpe_ratio),
            "weights": weights,
        }


@dataclass(frozen=True)
class AdjustmentRecommendation:
    """Per-asset move from the current weight to the optimal weight."""

    symbol: str
    current_weight: float
    optimal_weight: float
    action: Action
    amount: float
    shares: float

    @property
    def weight_delta(self) -> float:
        return self.optimal_weight - self.current_weight

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "current_weight": _to_float(self.current_weight),
            "optimal_weight": _to_float(self.optimal_weight),
            "action": self.action.value,
            "amount": _to_float(self.amount),
            "shares": _to_float(self.shares),
        }


@dataclass(frozen=True)
class RebalancePlan:
    """Adjustment list plus the cash totals it implies."""

    adjustments: tuple[AdjustmentRecommendation, ...]
    total_buy: float
    total_sell: float
    cash_remaining: float

    def to_dict(self) -> dict:
        return {
            "adjustments": [a.to_dict() for a in self.adjustments],
            "total_buy": _to_float(self.total_buy),
            "total_sell": _to_float(self.total_sell),
            "cash_remaining": _to_float(self.cash_remaining),
        }


@dataclass(frozen=True)
class PortfolioSummary:
    """Valuation of the current holdings."""

    total_value: float
    total_invested: float
    total_gain_loss: float
    total_gain_loss_pct: float
    diversification_score: float

    def to_dict(self) -> dict:
        return {
            "total_value": _to_float(self.total_value),
            "total_invested": _to_float(self.total_invested),
            "total_gain_loss": _to_float(self.total_gain_loss),
            "total_gain_loss_pct": _to_float(self.total_gain_loss_pct),
            "diversification_score": _to_float(self.diversification_score),
        }


@dataclass
class OptimizationResult:
    """Everything one optimisation run hands back to the caller."""

    symbols: list[str]
    expected_returns: np.ndarray
    covariance: np.ndarray
    current_portfolio: PortfolioPoint
    optimal_portfolio: PortfolioPoint
    minimum_risk_portfolio: PortfolioPoint
    efficient_frontier: list[PortfolioPoint]
    rebalance: RebalancePlan
    summary: PortfolioSummary
    monte_carlo_cloud: list[PortfolioPoint] = field(default_factory=list)

    @property
    def adjustments(self) -> tuple[AdjustmentRecommendation, ...]:
        return self.rebalance.adjustments

    @property
    def total_buy(self) -> float:
        return self.rebalance.total_buy

    @property
    def total_sell(self) -> float:
        return self.rebalance.total_sell

    @property
    def cash_remaining(self) -> float:
        return self.rebalance.cash_remaining

    def to_dict(self, include_cloud: bool = True) -> dict:
        n = len(self.symbols)
        out = {
            "symbols": list(self.symbols),
            "expected_returns": {
                self.symbols[i]: _to_float(self.expected_returns[i]) for i in range(n)
            },
            "covariance": {
                self.symbols[i]: {
                    self.symbols[j]: _to_float(self.covariance[i, j]) for j in range(n)
                }
                for i in range(n)
            },
            "summary": self.summary.to_dict(),
            "current_portfolio": self.current_portfolio.to_dict(self.symbols),
            "optimal_portfolio": self.optimal_portfolio.to_dict(self.symbols),
            "minimum_risk_portfolio": self.minimum_risk_portfolio.to_dict(self.symbols),
            "efficient_frontier": [p.to_dict(self.symbols) for p in self.efficient_frontier],
            **self.rebalance.to_dict(),
        }
        if include_cloud:
            out["monte_carlo_cloud"] = [
                {"expected_return": _to_float(p.expected_return), "risk": _to_float(p.risk)}
                for p in self.monte_carlo_cloud
            ]
        return out
