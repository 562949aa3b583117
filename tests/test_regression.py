"""Tests for line fitting and outlier cleaning."""

import numpy as np
import pytest

from page_autocrop.models import FitStatus
from page_autocrop.regression import avg_abs_dev, clean, linear_fit


def ramp(length: int = 64, intercept: float = 40.0, slope: float = 0.5) -> np.ndarray:
    return intercept + slope * np.arange(length, dtype=np.float64)


class TestLinearFit:
    def test_recovers_line(self):
        fit = linear_fit(ramp(50, 10.0, 0.75))
        assert fit.status is FitStatus.OK
        assert fit.intercept == pytest.approx(10.0)
        assert fit.slope == pytest.approx(0.75)
        assert fit.r2 == pytest.approx(1.0)
        assert fit.samples == 50

    def test_negative_slope(self):
        fit = linear_fit(ramp(30, 90.0, -1.25))
        assert fit.intercept == pytest.approx(90.0)
        assert fit.slope == pytest.approx(-1.25)
        assert fit.r2 == pytest.approx(1.0)

    def test_skips_zeros(self):
        xs = ramp(40, 20.0, 2.0)
        xs[[0, 5, 17, 39]] = 0
        fit = linear_fit(xs)
        assert fit.samples == 36
        assert fit.intercept == pytest.approx(20.0)
        assert fit.slope == pytest.approx(2.0)

    def test_noise_lowers_confidence(self):
        rng = np.random.default_rng(7)
        xs = ramp(100, 50.0, 0.3) + rng.normal(0, 5, 100)
        fit = linear_fit(xs)
        assert 0 < fit.r2 < 0.9

    def test_flat_is_perfect_fit(self):
        fit = linear_fit(np.full(20, 5.0))
        assert fit.status is FitStatus.OK
        assert fit.slope == 0.0
        assert fit.intercept == 5.0
        assert fit.r2 == 1.0

    def test_all_zero_is_degenerate(self):
        fit = linear_fit(np.zeros(16))
        assert fit.is_degenerate
        assert fit.samples == 0
        assert fit.r2 == 0.0

    def test_single_value_is_degenerate(self):
        xs = np.zeros(16)
        xs[3] = 12.0
        fit = linear_fit(xs)
        assert fit.is_degenerate
        assert fit.intercept == 12.0
        assert fit.slope == 0.0

    def test_never_nan(self):
        for xs in (np.zeros(8), np.array([0.0, 4.0]), np.full(8, 3.0)):
            fit = linear_fit(xs)
            assert np.isfinite([fit.intercept, fit.slope, fit.r2]).all()


class TestClean:
    def test_burst_removed(self):
        expected = ramp()
        xs = expected.copy()
        xs[16:24] += np.array([60, -30, 55, -25, 70, -35, 50, -20])

        fit = clean(xs, regression_dev=24, chunk_mean_dev=4, chunk_size=8)

        assert not fit.is_degenerate
        assert np.all(np.abs(xs[16:24] - fit.predict(np.arange(16, 24))) <= 24)
        assert np.allclose(xs, expected)

    def test_residual_outlier_refilled(self):
        expected = ramp()
        xs = expected.copy()
        xs[30] += 100

        clean(xs, regression_dev=24, chunk_mean_dev=1000, chunk_size=8)

        assert xs[30] == pytest.approx(expected[30], abs=2)

    def test_zeros_filled(self):
        expected = ramp()
        xs = expected.copy()
        xs[[2, 9, 33, 60]] = 0

        clean(xs, regression_dev=24, chunk_mean_dev=4, chunk_size=8)

        assert np.all(xs != 0)
        assert np.allclose(xs, expected)

    def test_short_tail_forms_own_chunk(self):
        xs = ramp(66)
        xs[64:] = [0.0, 400.0]

        clean(xs, regression_dev=24, chunk_mean_dev=4, chunk_size=8)

        assert np.allclose(xs, ramp(66))

    def test_in_place(self):
        xs = ramp()
        xs[5] = 0
        clean(xs, 24, 4, 8)
        assert xs[5] != 0

    def test_all_zero_stays_degenerate(self):
        xs = np.zeros(24)
        fit = clean(xs, 24, 4, 8)
        assert fit.is_degenerate
        assert np.all(xs == 0)


def test_avg_abs_dev():
    assert avg_abs_dev(np.array([1.0, 3.0])) == 1.0
    assert avg_abs_dev(np.full(5, 2.0)) == 0.0
