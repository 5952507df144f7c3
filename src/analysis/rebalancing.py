"""Rebalancing planner: current weights -> optimal weights as trades."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace

from src.analysis.holdings import current_weights, total_value
from src.config import Defaults
from src.models import Action, AdjustmentRecommendation, AssetHolding, RebalancePlan


def plan_rebalance(
    assets: Sequence[AssetHolding],
    current_weights: Sequence[float],
    optimal_weights: Sequence[float],
    total_value: float,
    threshold: float = Defaults.REBALANCE_THRESHOLD,
) -> RebalancePlan:
    """Per-asset buy/sell/hold recommendations and the cash they net to.

    A weight change no larger than *threshold* (fraction of the whole
    portfolio) is a hold; the amount and share count are still reported.

    Args:
        assets: Holdings, in the same order as both weight vectors.
        current_weights: Present allocation.
        optimal_weights: Allocation to move to.
        total_value: Portfolio market value the weights refer to.
        threshold: Minimum absolute weight change that triggers a trade.

    Returns:
        ``RebalancePlan`` with one adjustment per asset, ``total_buy``,
        ``total_sell`` and ``cash_remaining = total_sell - total_buy``.
    """
    if not (len(assets) == len(current_weights) == len(optimal_weights)):
        raise ValueError("assets, current_weights and optimal_weights must be the same length")
    if total_value < 0:
        raise ValueError("total_value must be non-negative")

    adjustments: list[AdjustmentRecommendation] = []
    for asset, cur, opt in zip(assets, current_weights, optimal_weights):
        diff = float(opt) - float(cur)
        amount = abs(diff) * total_value
        shares = amount / asset.current_price

        if abs(diff) <= threshold:
            action = Action.HOLD
        else:
            action = Action.BUY if diff > 0 else Action.SELL

        adjustments.append(AdjustmentRecommendation(
            symbol=asset.symbol,
            current_weight=float(cur),
            optimal_weight=float(opt),
            action=action,
            amount=amount,
            shares=shares,
        ))

    total_buy = sum(a.amount for a in adjustments if a.action is Action.BUY)
    total_sell = sum(a.amount for a in adjustments if a.action is Action.SELL)

    return RebalancePlan(
        adjustments=tuple(adjustments),
        total_buy=total_buy,
        total_sell=total_sell,
        cash_remaining=total_sell - total_buy,
    )


def plan_to_allocation(
    assets: Sequence[AssetHolding],
    target_allocation: Mapping[str, float],
    threshold: float = Defaults.REBALANCE_THRESHOLD,
) -> list[AdjustmentRecommendation]:
    """Trades that move *assets* to a ``{symbol: target percent}`` allocation.

    Symbols missing from *target_allocation* are sold down to 0%.  Holds are
    dropped and share counts are rounded to two decimals.
    """
    targets = [float(target_allocation.get(a.symbol, 0.0)) / 100.0 for a in assets]
    plan = plan_rebalance(
        assets, current_weights(assets), targets, total_value(assets), threshold=threshold,
    )
    return [
        replace(adj, shares=round(adj.shares, 2))
        for adj in plan.adjustments
        if adj.action is not Action.HOLD
    ]
