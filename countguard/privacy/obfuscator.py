"""Single-value count obfuscation with small-count suppression and caching."""
from __future__ import annotations

import logging
import math
from typing import Any

import numpy as np
import pandas as pd

from countguard.privacy.mechanism import round_to_step, sample_laplace
from countguard.privacy.errors import DistributionCreationError
from countguard.privacy.policy import Below10Mode, ObfuscationPolicy
from countguard.workflow.cache import ObfuscationCache

logger = logging.getLogger(__name__)


def noise_scale(sensitivity: float, epsilon: float) -> float:
    """Return the Laplace scale ``sensitivity / epsilon`` after validating both."""
    for name, param in (("sensitivity", sensitivity), ("epsilon", epsilon)):
        if not (math.isfinite(param) and param > 0):
            raise DistributionCreationError(
                f"{name} must be finite and positive, got {param!r}"
            )
    scale = sensitivity / epsilon
    if not math.isfinite(scale):
        raise DistributionCreationError(
            f"scale {sensitivity!r} / {epsilon!r} is not finite"
        )
    return scale


def privatize(
    value: int,
    sensitivity: float,
    epsilon: float,
    rounding_step: int,
    rng: np.random.Generator,
) -> int:
    """Perturb *value* with the (epsilon, 0) Laplace mechanism.

    The noisy value is rounded to the nearest multiple of *rounding_step*
    and clamped at zero, since a reported count is never negative.

    Raises
    ------
    DistributionCreationError
        If *sensitivity* or *epsilon* is not finite and positive, or their
        ratio is not a finite scale.
    RoundingStepError
        If *rounding_step* is not a positive integer.
    """
    noisy = value + sample_laplace(0.0, noise_scale(sensitivity, epsilon), rng)
    return max(0, round_to_step(noisy, rounding_step))


def obfuscate_with_cache(
    value: int,
    sensitivity: float,
    epsilon: float,
    bin: int,
    cache: ObfuscationCache | None,
    obfuscate_zero: bool,
    below_10_mode: Below10Mode,
    rounding_step: int,
    rng: np.random.Generator,
) -> int:
    """Obfuscate *value*, reusing the cached answer for repeated inputs.

    Without a cache every call draws fresh noise and no suppression rule is
    applied.  With a cache, the order is:

    1. zero stays zero unless *obfuscate_zero* is set;
    2. values below 10 follow *below_10_mode* (``ZERO`` gives 0, ``TEN``
       gives 10, ``OBFUSCATE`` continues);
    3. the cache is bound to *rounding_step*, then the key
       ``(round(sensitivity), value, bin)`` is looked up, and on a miss the
       value is privatized and stored.

    Parameters
    ----------
    value:
        The raw count.
    sensitivity:
        Query sensitivity (delta).
    epsilon:
        Privacy budget parameter.
    bin:
        Structural role of the count; equal values in different bins get
        independent noise.
    cache:
        Cache shared by every call that must stay consistent, or ``None``.
    obfuscate_zero:
        Whether a zero count is perturbed as well.
    below_10_mode:
        Small-count policy applied before any noise is drawn.
    rounding_step:
        Granularity of the reported value.
    rng:
        Random generator, only used on a cache miss.

    Raises
    ------
    DistributionCreationError
        If *sensitivity* or *epsilon* cannot give a finite positive scale.
    RoundingStepError
        If *cache* already holds values rounded to a different step.
    """
    noise_scale(sensitivity, epsilon)

    if cache is None:
        return privatize(value, sensitivity, epsilon, rounding_step, rng)

    if not obfuscate_zero and value == 0:
        return 0

    if value < 10:
        if below_10_mode == Below10Mode.ZERO:
            return 0
        if below_10_mode == Below10Mode.TEN:
            return 10

    cache.bind_rounding_step(rounding_step)
    key = ObfuscationCache.make_key(sensitivity, value, bin)
    cached = cache.get(key)
    if cached is not None:
        logger.debug(f"Cache hit for {key}")
        return cached

    logger.debug(f"Cache miss for {key}; drawing noise")
    return cache.store(key, privatize(value, sensitivity, epsilon, rounding_step, rng))


def obfuscate_counts(
    counts: dict | pd.Series,
    policy: ObfuscationPolicy,
    bin: int,
    cache: ObfuscationCache | None,
    rng: np.random.Generator,
    sensitivity: float = 1.0,
) -> dict[Any, int]:
    """Obfuscate a table of label -> count with the policy's settings.

    Parameters
    ----------
    counts:
        A mapping or Series of category -> count, e.g. the output of
        ``Series.value_counts()``.
    policy:
        Supplies epsilon, rounding step, and the small-count rules.
    bin:
        Bin shared by every count in the table.
    sensitivity:
        Sensitivity of each count.  Defaults to one individual per count.

    Returns
    -------
    dict
        The obfuscated counts as plain ``int`` values.
    """
    if isinstance(counts, pd.Series):
        counts = counts.to_dict()

    obfuscated: dict[Any, int] = {}
    for label, value in counts.items():
        obfuscated[label] = obfuscate_with_cache(
            int(value),
            sensitivity,
            policy.epsilon,
            bin,
            cache,
            policy.obfuscate_zero,
            policy.below_10_mode,
            policy.rounding_step,
            rng,
        )
    return obfuscated
