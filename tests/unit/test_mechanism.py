"""Tests for countguard.privacy.mechanism: Laplace sampling and rounding."""
import math

import numpy as np
import pytest

from countguard.privacy.errors import (
    DistributionCreationError,
    LaplaceError,
    RoundingStepError,
    RoundingStepZeroError,
)
from countguard.privacy.mechanism import round_to_step, sample_laplace

pytestmark = pytest.mark.unit


class TestSampleLaplace:
    def test_positive_scale_returns_float(self, rng):
        sample = sample_laplace(10.0, 1.0, rng)
        assert isinstance(sample, float)
        assert math.isfinite(sample)

    @pytest.mark.parametrize("scale", [0.0, -1.0, float("nan"), float("inf")])
    def test_invalid_scale_fails(self, rng, scale):
        with pytest.raises(DistributionCreationError) as exc_info:
            sample_laplace(10.0, scale, rng)
        assert "Unable to create Laplace distribution" in str(exc_info.value)
        assert isinstance(exc_info.value, LaplaceError)

    def test_samples_stay_near_mu(self, rng):
        mu, scale = 10.0, 1.0
        samples = [sample_laplace(mu, scale, rng) for _ in range(50)]
        assert all(mu - 10 * scale <= s <= mu + 10 * scale for s in samples)

    def test_consumes_randomness(self, rng):
        before = rng.bit_generator.state
        sample_laplace(0.0, 2.0, rng)
        assert rng.bit_generator.state != before

    def test_same_seed_same_sample(self):
        a = sample_laplace(0.0, 3.0, np.random.default_rng(7))
        b = sample_laplace(0.0, 3.0, np.random.default_rng(7))
        assert a == b

    def test_mean_close_to_mu(self):
        rng = np.random.default_rng(123)
        samples = [sample_laplace(5.0, 1.0, rng) for _ in range(5000)]
        assert abs(np.mean(samples) - 5.0) < 0.2


class TestRoundToStep:
    def test_unit_step(self):
        assert round_to_step(3.2, 1) == 3
        assert round_to_step(3.7, 1) == 4

    def test_step_five(self):
        assert round_to_step(12.8, 5) == 15
        assert round_to_step(17.4, 5) == 15

    def test_step_ten(self):
        assert round_to_step(38.2, 10) == 40
        assert round_to_step(44.9, 10) == 40

    def test_zero_value(self):
        for step in (1, 5, 10):
            assert round_to_step(0.0, step) == 0

    def test_large_value(self):
        for step in (1, 5, 10):
            assert round_to_step(1_000_000.0, step) == 1_000_000

    def test_ties_go_to_even_multiple(self):
        assert round_to_step(15, 10) == 20
        assert round_to_step(25, 10) == 20
        assert round_to_step(2.5, 1) == 2

    def test_negative_values_not_clamped(self):
        assert round_to_step(-12.0, 10) == -10

    def test_returns_int(self):
        assert isinstance(round_to_step(np.float64(41.3), 10), int)

    def test_multiple_within_one_step(self):
        rng = np.random.default_rng(0)
        for value in rng.uniform(-500, 500, 200):
            for step in (1, 3, 5, 10, 25):
                rounded = round_to_step(value, step)
                assert rounded % step == 0
                assert abs(rounded - value) <= step

    def test_zero_step_fails(self):
        with pytest.raises(RoundingStepZeroError):
            round_to_step(10.0, 0)

    def test_zero_step_is_a_rounding_step_error(self):
        with pytest.raises(RoundingStepError):
            round_to_step(10.0, 0)

    @pytest.mark.parametrize("step", [-10, 2.5, "10", True])
    def test_invalid_step_fails(self, step):
        with pytest.raises(RoundingStepError):
            round_to_step(10.0, step)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_value_fails(self, value):
        with pytest.raises(RoundingStepError):
            round_to_step(value, 10)
