"""Tests for src.analysis.monte_carlo -- random simplex portfolios."""

import numpy as np
import pytest

from src.analysis.monte_carlo import dirichlet_weights, sample_portfolios


class TestDirichletWeights:

    def test_rows_on_simplex(self):
        w = dirichlet_weights(4, 500, np.random.default_rng(0))
        assert w.shape == (500, 4)
        assert np.all(w >= 0)
        assert np.allclose(w.sum(axis=1), 1.0, atol=1e-12)

    def test_marginal_mean_is_uniform(self):
        w = dirichlet_weights(3, 20_000, np.random.default_rng(1))
        assert w.mean(axis=0) == pytest.approx([1 / 3] * 3, abs=0.01)


class TestSamplePortfolios:

    def test_three_asset_cloud(self, three_asset_stats):
        mu, cov = three_asset_stats
        cloud = sample_portfolios(mu, cov, count=1000, seed=11)

        assert 0 < len(cloud) <= 1000
        for p in cloud:
            assert len(p.weights) == 3
            assert sum(p.weights) == pytest.approx(1.0, abs=1e-9)
            assert all(w >= 0 for w in p.weights)
            assert 0.0 <= p.risk <= 0.35
            assert -0.05 <= p.expected_return <= 0.35

    def test_samples_lie_inside_asset_return_range(self, three_asset_stats):
        mu, cov = three_asset_stats
        for p in sample_portfolios(mu, cov, count=300, seed=5):
            assert mu.min() - 1e-12 <= p.expected_return <= mu.max() + 1e-12

    def test_seed_is_reproducible(self, three_asset_stats):
        mu, cov = three_asset_stats
        a = sample_portfolios(mu, cov, count=200, seed=123)
        b = sample_portfolios(mu, cov, count=200, seed=123)
        assert [p.weights for p in a] == [p.weights for p in b]

    def test_different_seeds_differ(self, three_asset_stats):
        mu, cov = three_asset_stats
        a = sample_portfolios(mu, cov, count=50, seed=1)
        b = sample_portfolios(mu, cov, count=50, seed=2)
        assert [p.weights for p in a] != [p.weights for p in b]

    def test_metrics_match_weights(self, three_asset_stats):
        mu, cov = three_asset_stats
        p = sample_portfolios(mu, cov, count=1, seed=9, risk_free_rate=0.01)[0]
        w = np.array(p.weights)
        assert p.expected_return == pytest.approx(float(w @ mu))
        assert p.risk == pytest.approx(float(np.sqrt(w @ cov @ w)))
        assert p.sharpe_ratio == pytest.approx((p.expected_return - 0.01) / p.risk)

    def test_zero_count_is_empty(self, three_asset_stats):
        mu, cov = three_asset_stats
        assert sample_portfolios(mu, cov, count=0) == []

    def test_out_of_band_samples_dropped(self):
        mu = np.array([0.60, 0.80])
        cov = np.diag([0.04, 0.09])
        assert sample_portfolios(mu, cov, count=100, seed=0) == []
