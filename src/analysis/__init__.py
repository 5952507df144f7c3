from .statistics import compute_statistics, periodic_returns
from .metrics import portfolio_metrics
from .frontier import generate_frontier, min_variance_weights, is_convex
from .monte_carlo import sample_portfolios
from .selection import SelectionPolicy, select_optimal, select_max_sharpe, select_minimum_risk
from .rebalancing import plan_rebalance, plan_to_allocation
from .holdings import current_weights, diversification_score, summarize_holdings
from .optimizer import PortfolioOptimizer, optimize_portfolio
