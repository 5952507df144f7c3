#!/usr/bin/env python3
"""Frontier Rebalancer: Markowitz optimisation for an existing portfolio.

Usage:
    python main.py optimize --portfolio holdings.yaml --prices prices.csv
    python main.py optimize --portfolio holdings.yaml --prices prices.csv --policy max_sharpe
    python main.py optimize ... --target-return 0.12 --target-risk 0.10 --seed 7
    python main.py frontier --portfolio holdings.yaml --prices prices.csv --points 50
    python main.py stats --portfolio holdings.yaml --prices prices.csv

holdings.yaml:
    holdings:
      - {symbol: AAPL, quantity: 10, current_price: 190.0, purchase_price: 150.0, asset_class: stock}
      - {symbol: TLT,  quantity: 40, current_price: 92.5,  purchase_price: 101.0, asset_class: bond}

prices.csv is either wide (a ``date`` column plus one column per symbol) or
long (``symbol,date,price`` rows).
"""

import argparse
import json
import sys
from pathlib import Path

import pandas as pd
import yaml

from src.analysis import (
    PortfolioOptimizer,
    compute_statistics,
    generate_frontier,
)
from src.config import Defaults
from src.errors import PortfolioOptimizationError
from src.models import AssetHolding
from src.utils.logger import setup_logger

logger = setup_logger("main", Defaults.LOG_LEVEL)


def _load_holdings(path: Path) -> list[AssetHolding]:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    rows = data.get("holdings", data) if isinstance(data, dict) else data
    return [AssetHolding.from_dict(row) for row in rows]


def _load_prices(path: Path) -> dict[str, pd.Series]:
    """Read a wide or long CSV into ``{symbol: price Series}``."""
    df = pd.read_csv(path)
    df.columns = [c.strip() for c in df.columns]
    date_col = next((c for c in df.columns if c.lower() in ("date", "timestamp")), None)

    if {"symbol", "price"} <= {c.lower() for c in df.columns}:
        cols = {c.lower(): c for c in df.columns}
        out = {}
        for symbol, grp in df.groupby(cols["symbol"]):
            if date_col:
                grp = grp.sort_values(date_col)
                out[str(symbol)] = pd.Series(
                    grp[cols["price"]].values, index=pd.to_datetime(grp[date_col])
                )
            else:
                out[str(symbol)] = grp[cols["price"]].reset_index(drop=True)
        return out

    if date_col:
        df[date_col] = pd.to_datetime(df[date_col])
        df = df.set_index(date_col).sort_index()
    return {str(c): df[c].dropna() for c in df.columns}


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, indent=2, default=str))


def cmd_optimize(args):
    holdings = _load_holdings(args.portfolio)
    prices = _load_prices(args.prices)

    overrides = {
        "target_return": args.target_return,
        "target_risk": args.target_risk,
        "policy": args.policy,
        "mc_count": 0 if args.no_cloud else args.mc_count,
        "mc_seed": args.seed,
        "n_points": args.points,
        "solver": args.solver,
        "alignment": args.alignment,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}

    result = PortfolioOptimizer(**overrides).optimize(holdings, prices)
    _print_json(result.to_dict(include_cloud=not args.no_cloud))


def cmd_frontier(args):
    holdings = _load_holdings(args.portfolio)
    prices = _load_prices(args.prices)
    mu, cov = compute_statistics(holdings, prices, alignment=args.alignment or Defaults.ALIGNMENT)
    frontier = generate_frontier(
        mu, cov,
        n_points=args.points or Defaults.FRONTIER_POINTS,
        solver=args.solver or Defaults.SOLVER,
    )
    symbols = [h.symbol for h in holdings]
    _print_json({"symbols": symbols, "frontier": [p.to_dict(symbols) for p in frontier]})


def cmd_stats(args):
    holdings = _load_holdings(args.portfolio)
    prices = _load_prices(args.prices)
    mu, cov = compute_statistics(holdings, prices, alignment=args.alignment or Defaults.ALIGNMENT)
    symbols = [h.symbol for h in holdings]
    _print_json({
        "expected_returns": dict(zip(symbols, mu.round(6).tolist())),
        "covariance": pd.DataFrame(cov, index=symbols, columns=symbols).round(6).to_dict(),
    })


def main():
    parser = argparse.ArgumentParser(
        description="Frontier Rebalancer - efficient frontier and rebalancing plan",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command")

    def _common(p):
        p.add_argument("--portfolio", type=Path, required=True, help="Holdings YAML file")
        p.add_argument("--prices", type=Path, required=True, help="Price history CSV file")
        p.add_argument("--alignment", choices=["positional", "date"])
        p.add_argument("--points", type=int, help="Frontier target-return intervals")
        p.add_argument("--solver", choices=["slsqp", "projected_gradient"])

    p = sub.add_parser("optimize", help="Full optimisation with rebalancing plan")
    _common(p)
    p.add_argument("--target-return", type=float)
    p.add_argument("--target-risk", type=float)
    p.add_argument("--policy", choices=["target", "max_sharpe"])
    p.add_argument("--mc-count", type=int, help="Monte Carlo samples")
    p.add_argument("--seed", type=int, help="Monte Carlo RNG seed")
    p.add_argument("--no-cloud", action="store_true", help="Skip the Monte Carlo cloud")

    p = sub.add_parser("frontier", help="Efficient frontier only")
    _common(p)

    p = sub.add_parser("stats", help="Expected returns and covariance")
    _common(p)

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "optimize": cmd_optimize,
        "frontier": cmd_frontier,
        "stats": cmd_stats,
    }
    try:
        commands[args.command](args)
    except PortfolioOptimizationError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        sys.exit(2)


if __name__ == "__main__":
    main()
