"""Central configuration loader for the frontier rebalancer."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

# Project root is the parent of the src/ directory
PROJECT_ROOT = Path(__file__).resolve().parent.parent

load_dotenv(PROJECT_ROOT / ".env")


def load_settings(path: Path | None = None) -> dict:
    """Load settings from configs/settings.yaml (or $FRONTIER_SETTINGS)."""
    settings_path = path or Path(
        os.getenv("FRONTIER_SETTINGS", PROJECT_ROOT / "configs" / "settings.yaml")
    )
    if not settings_path.exists():
        return {}
    with open(settings_path) as f:
        return yaml.safe_load(f) or {}


SETTINGS = load_settings()


def _section(name: str) -> dict:
    return SETTINGS.get(name, {}) or {}


# --- Optimisation defaults ---
class Defaults:
    LOG_LEVEL = os.getenv(
        "FRONTIER_LOG_LEVEL", _section("app").get("log_level", "INFO")
    )

    TRADING_DAYS = int(_section("statistics").get("trading_days", 252))
    ALIGNMENT = _section("statistics").get("alignment", "positional")

    RISK_FREE_RATE = float(_section("metrics").get("risk_free_rate", 0.02))

    FRONTIER_POINTS = int(_section("frontier").get("n_points", 100))
    SOLVER = _section("frontier").get("solver", "slsqp")
    MAX_ITER = int(_section("frontier").get("max_iter", 1000))
    MAX_WORKERS = int(_section("frontier").get("max_workers", 1))
    RETURN_TOLERANCE = float(_section("frontier").get("return_tolerance", 1e-3))
    DEDUP_EPSILON = float(_section("frontier").get("dedup_epsilon", 1e-6))
    RISK_BAND = tuple(_section("frontier").get("risk_band", (0.0, 0.35)))
    RETURN_BAND = tuple(_section("frontier").get("return_band", (0.0, 0.35)))

    MC_COUNT = int(_section("monte_carlo").get("count", 1000))
    MC_RISK_BAND = tuple(_section("monte_carlo").get("risk_band", (0.0, 0.35)))
    MC_RETURN_BAND = tuple(_section("monte_carlo").get("return_band", (-0.05, 0.35)))
    MC_SEED = _section("monte_carlo").get("seed")

    TARGET_RETURN = float(_section("selection").get("target_return", 0.23))
    TARGET_RISK = float(_section("selection").get("target_risk", 0.12))
    POLICY = _section("selection").get("policy", "target")
    REPORT_TARGET_METRICS = bool(
        _section("selection").get("report_target_metrics", True)
    )

    REBALANCE_THRESHOLD = float(_section("rebalancing").get("threshold", 0.01))
