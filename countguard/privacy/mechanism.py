"""Laplace noise mechanism and parametric rounding.

Both functions are stateless. Randomness comes exclusively from the
``numpy.random.Generator`` handed in by the caller.
"""
from __future__ import annotations

import math
import numbers

import numpy as np
from scipy import stats

from countguard.privacy.errors import (
    DistributionCreationError,
    RoundingStepError,
    RoundingStepZeroError,
)


def sample_laplace(mu: float, scale: float, rng: np.random.Generator) -> float:
    """Draw one sample from a Laplace(*mu*, *scale*) distribution.

    Parameters
    ----------
    mu:
        Location of the distribution.
    scale:
        Scale parameter ``b``, usually ``sensitivity / epsilon``.  Must be
        strictly positive.
    rng:
        Generator the draw is taken from.

    Raises
    ------
    DistributionCreationError
        If *scale* is not finite and strictly positive, or the distribution
        rejects the parameters.
    """
    if not (math.isfinite(scale) and scale > 0):
        raise DistributionCreationError(
            f"scale must be finite and positive, got {scale!r}"
        )
    try:
        sample = stats.laplace.rvs(loc=mu, scale=scale, random_state=rng)
    except ValueError as exc:
        raise DistributionCreationError(str(exc)) from exc
    return float(sample)


def round_to_step(value: float, step: int) -> int:
    """Round *value* to the nearest multiple of *step*.

    Uses Python's built-in ``round``, so exact halves go to the even
    multiple (``round_to_step(15, 10) == 20``, ``round_to_step(25, 10) == 20``).
    The result is not clamped; negative inputs can give negative multiples.

    Raises
    ------
    RoundingStepZeroError
        If *step* is zero.
    RoundingStepError
        If *step* is negative or not an integer, or *value* is not finite.
    """
    if isinstance(step, bool) or not isinstance(step, numbers.Integral):
        raise RoundingStepError(f"step must be an integer, got {step!r}")
    if step == 0:
        raise RoundingStepZeroError()
    if step < 0:
        raise RoundingStepError(f"step must be positive, got {step}")
    step = int(step)
    value = float(value)
    if not math.isfinite(value):
        raise RoundingStepError(f"cannot round non-finite value {value!r}")
    return int(round(value / step)) * step
