"""Error kinds raised by the optimisation engine.

All of them subclass ``ValueError`` so callers that already guard numeric
input with ``except ValueError`` keep working.
"""


class PortfolioOptimizationError(ValueError):
    """Base class for every optimisation failure."""


class InsufficientInputError(PortfolioOptimizationError):
    """Fewer than two assets, or an asset without any price history."""


# Alias for callers that report missing price data.
InsufficientDataError = InsufficientInputError


class DegenerateCovarianceError(PortfolioOptimizationError):
    """Covariance matrix is malformed or admits no feasible minimum-variance solution."""


class OptimizationFailureError(PortfolioOptimizationError):
    """Frontier generation left no efficient points after filtering."""
