"""Efficient frontier generation (long-only, fully invested Markowitz).

For each target return the minimum-variance weight vector is solved, the
resulting points are screened for plausibility, sorted by risk and reduced
to the Pareto-efficient subsequence.

Two solvers are available:

* ``slsqp`` -- scipy's SLSQP with equality constraints on the weight sum and
  the portfolio return (exact QP up to solver tolerance).
* ``projected_gradient`` -- accelerated projected gradient on a quadratic
  return penalty, projecting each iterate onto the probability simplex.
"""

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from scipy.optimize import minimize

from src.analysis.metrics import portfolio_metrics
from src.config import Defaults
from src.errors import (
    DegenerateCovarianceError,
    InsufficientInputError,
    OptimizationFailureError,
)
from src.models import PortfolioPoint
from src.utils.logger import setup_logger

logger = setup_logger("efficient_frontier", Defaults.LOG_LEVEL)

SOLVERS = ("slsqp", "projected_gradient")

_RETURN_PENALTY = 1e4


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _regularize_cov(cov: np.ndarray, eps: float = 1e-8) -> np.ndarray:
    """Add small ridge to diagonal to avoid singular covariance matrices."""
    return cov + np.eye(cov.shape[0]) * eps


def _project_simplex(v: np.ndarray) -> np.ndarray:
    """Euclidean projection onto {w : w >= 0, sum(w) = 1}."""
    n = v.size
    u = np.sort(v)[::-1]
    css = np.cumsum(u) - 1.0
    idx = np.arange(1, n + 1)
    rho = np.nonzero(u - css / idx > 0)[0][-1]
    theta = css[rho] / (rho + 1)
    return np.maximum(v - theta, 0.0)


def validate_inputs(mu: np.ndarray, cov: np.ndarray) -> None:
    """Reject return/covariance inputs the optimisers cannot work with."""
    if mu.ndim != 1 or mu.size < 2:
        raise InsufficientInputError("At least 2 assets are required for a frontier")
    if cov.shape != (mu.size, mu.size):
        raise DegenerateCovarianceError(
            f"Covariance shape {cov.shape} does not match {mu.size} expected returns"
        )
    if not (np.all(np.isfinite(cov)) and np.all(np.isfinite(mu))):
        raise DegenerateCovarianceError("Covariance or expected returns contain NaN/inf")
    if not np.allclose(cov, cov.T, atol=1e-10):
        raise DegenerateCovarianceError("Covariance matrix is not symmetric")
    if np.any(np.diag(cov) < 0):
        raise DegenerateCovarianceError("Covariance matrix has negative variances")


def target_returns(mu: np.ndarray, n_points: int) -> np.ndarray:
    """Quadratically spaced targets from min(mu) to max(mu), n_points + 1 values.

    Spacing by t**2 packs more targets toward the high-return end where the
    frontier bends.
    """
    lo, hi = float(mu.min()), float(mu.max())
    t = np.arange(n_points + 1) / n_points
    return lo + (hi - lo) * t ** 2


# ---------------------------------------------------------------------------
# Single-target solvers
# ---------------------------------------------------------------------------

def _solve_slsqp(target: float, mu: np.ndarray, cov: np.ndarray, max_iter: int) -> np.ndarray:
    n = mu.size
    bounds = tuple((0.0, 1.0) for _ in range(n))
    sum_to_one = {"type": "eq", "fun": lambda w: np.sum(w) - 1.0}
    constraints = [sum_to_one]
    # Identical returns make the return constraint redundant (and singular).
    if np.ptp(mu) > 1e-12:
        constraints.append({"type": "eq", "fun": lambda w: w @ mu - target})
    w0 = np.ones(n) / n

    def variance_obj(w: np.ndarray) -> float:
        return float(w @ cov @ w)

    res = minimize(
        variance_obj, w0, method="SLSQP", bounds=bounds,
        constraints=constraints,
        options={"maxiter": max_iter, "ftol": 1e-12},
    )
    if not res.success:
        logger.debug("SLSQP did not converge for target %.4f: %s", target, res.message)
    return res.x


def _solve_projected_gradient(
    target: float,
    mu: np.ndarray,
    cov: np.ndarray,
    max_iter: int,
    tolerance: float,
) -> np.ndarray:
    """Minimise w'Sw + P * (w.mu - target)^2 over the simplex (FISTA)."""
    n = mu.size
    lipschitz = 2.0 * (np.linalg.eigvalsh(cov).max() + _RETURN_PENALTY * float(mu @ mu))
    step = 1.0 / max(lipschitz, 1e-12)

    w = np.ones(n) / n
    y = w.copy()
    t_k = 1.0
    for _ in range(max_iter):
        grad = 2.0 * (cov @ y) + 2.0 * _RETURN_PENALTY * (y @ mu - target) * mu
        w_next = _project_simplex(y - step * grad)
        t_next = (1.0 + math.sqrt(1.0 + 4.0 * t_k * t_k)) / 2.0
        y = w_next + ((t_k - 1.0) / t_next) * (w_next - w)
        moved = float(np.max(np.abs(w_next - w)))
        w, t_k = w_next, t_next
        if moved < 1e-10 and abs(float(w @ mu) - target) < tolerance:
            break
    return w


def min_variance_weights(
    target_return: float,
    expected_returns,
    covariance,
    solver: str = Defaults.SOLVER,
    max_iter: int = Defaults.MAX_ITER,
    tolerance: float = Defaults.RETURN_TOLERANCE,
) -> np.ndarray:
    """Minimum-variance long-only weights whose return equals *target_return*.

    Raises:
        DegenerateCovarianceError: the solver could not reach the target
            return within *tolerance* (infeasible or numerically degenerate).
    """
    mu = np.asarray(expected_returns, dtype=float)
    cov = _regularize_cov(np.asarray(covariance, dtype=float))

    if solver == "slsqp":
        w = _solve_slsqp(target_return, mu, cov, max_iter)
    elif solver == "projected_gradient":
        w = _solve_projected_gradient(target_return, mu, cov, max_iter, tolerance)
    else:
        raise ValueError(f"Unknown solver: {solver!r}. Choose from {SOLVERS}.")

    if not np.all(np.isfinite(w)):
        raise DegenerateCovarianceError(
            f"Solver produced non-finite weights for target return {target_return:.4f}"
        )
    w = np.clip(w, 0.0, None)
    w = w / w.sum()

    achieved = float(w @ mu)
    if abs(achieved - target_return) > tolerance:
        raise DegenerateCovarianceError(
            f"No feasible minimum-variance portfolio for target return "
            f"{target_return:.4f} (reached {achieved:.4f})"
        )
    return w


# ---------------------------------------------------------------------------
# Frontier
# ---------------------------------------------------------------------------

def _in_band(value: float, band: tuple[float, float]) -> bool:
    return not math.isnan(value) and band[0] <= value <= band[1]


def efficient_subset(
    points: list[PortfolioPoint],
    dedup_epsilon: float = Defaults.DEDUP_EPSILON,
) -> list[PortfolioPoint]:
    """Sort by risk and keep the non-dominated, risk-distinct points."""
    ordered = sorted(points, key=lambda p: (p.risk, -p.expected_return))
    kept: list[PortfolioPoint] = []
    best_return = -math.inf
    for p in ordered:
        if p.expected_return < best_return:
            continue
        if kept and abs(p.risk - kept[-1].risk) <= dedup_epsilon:
            continue
        kept.append(p)
        best_return = p.expected_return
    return kept


def generate_frontier(
    expected_returns,
    covariance,
    n_points: int = Defaults.FRONTIER_POINTS,
    risk_free_rate: float = Defaults.RISK_FREE_RATE,
    solver: str = Defaults.SOLVER,
    max_iter: int = Defaults.MAX_ITER,
    tolerance: float = Defaults.RETURN_TOLERANCE,
    risk_band: tuple[float, float] = Defaults.RISK_BAND,
    return_band: tuple[float, float] = Defaults.RETURN_BAND,
    dedup_epsilon: float = Defaults.DEDUP_EPSILON,
    max_workers: int = Defaults.MAX_WORKERS,
) -> list[PortfolioPoint]:
    """Compute the efficient frontier, ordered by ascending risk.

    Args:
        expected_returns: Annualised expected return per asset.
        covariance: Annualised covariance matrix.
        n_points: Number of target-return intervals (n_points + 1 targets).
        risk_free_rate: Used for each point's Sharpe ratio.
        solver: ``"slsqp"`` or ``"projected_gradient"``.
        max_iter: Iteration cap for the solver.
        tolerance: Allowed gap between achieved and target return.
        risk_band / return_band: Plausibility bounds; points outside are
            dropped as optimiser noise.
        dedup_epsilon: Points closer than this in risk collapse to one.
        max_workers: > 1 solves targets on a thread pool.

    Returns:
        List of ``PortfolioPoint`` with non-decreasing return.

    Raises:
        OptimizationFailureError: nothing survives the filtering.
    """
    mu = np.asarray(expected_returns, dtype=float)
    cov = np.asarray(covariance, dtype=float)
    validate_inputs(mu, cov)
    if n_points < 1:
        raise ValueError("n_points must be at least 1")

    targets = target_returns(mu, n_points)

    def _solve(target: float) -> PortfolioPoint | None:
        try:
            w = min_variance_weights(target, mu, cov, solver, max_iter, tolerance)
        except DegenerateCovarianceError as exc:
            logger.debug("Skipping target %.4f: %s", target, exc)
            return None
        return portfolio_metrics(w, mu, cov, risk_free_rate)

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            solved = list(pool.map(_solve, targets))
    else:
        solved = [_solve(t) for t in targets]

    candidates = [
        p for p in solved
        if p is not None
        and _in_band(p.risk, risk_band)
        and _in_band(p.expected_return, return_band)
    ]
    logger.debug(
        "Frontier: %d targets, %d solved, %d within bands",
        len(targets), sum(p is not None for p in solved), len(candidates),
    )

    frontier = efficient_subset(candidates, dedup_epsilon)
    if not frontier:
        raise OptimizationFailureError("Efficient frontier is empty after filtering")

    logger.info(
        "Generated efficient frontier with %d points (risk %.3f-%.3f, return %.3f-%.3f)",
        len(frontier), frontier[0].risk, frontier[-1].risk,
        frontier[0].expected_return, frontier[-1].expected_return,
    )
    if not is_convex(frontier):
        logger.info("Frontier slopes are not monotonically decreasing")
    return frontier


def is_convex(frontier: list[PortfolioPoint], tolerance: float = 0.1) -> bool:
    """True when the return/risk slope never increases by more than *tolerance*."""
    if len(frontier) < 3:
        return True
    for prev, curr, nxt in zip(frontier, frontier[1:], frontier[2:]):
        d_risk1 = curr.risk - prev.risk
        d_risk2 = nxt.risk - curr.risk
        if d_risk1 > 0 and d_risk2 > 0:
            slope1 = (curr.expected_return - prev.expected_return) / d_risk1
            slope2 = (nxt.expected_return - curr.expected_return) / d_risk2
            if slope2 > slope1 + tolerance:
                return False
    return True
