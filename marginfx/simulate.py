from __future__ import annotations

import logging
from collections.abc import Mapping

import numpy as np
import pandas as pd

from .forms import COVARIATE, CONTROL, INTERACTION, FunctionalForm

logger = logging.getLogger(__name__)

_X1_RANGE = (0.5, 5.0)
_X2_RANGE = (0.0, 1.0)


def simulate(
    form: FunctionalForm | str,
    coefficients: Mapping[str, float],
    n: int = 1_000,
    noise: float = 1.0,
    seed: int | None = None,
    intercept: float = 1.0,
) -> pd.DataFrame:
    """
    Draw a sample from a known data-generating process for ``form``.

    The linear predictor is built from the same terms the fitted model will
    contain, so the true coefficients are exactly what OLS targets::

        eta = intercept + b1*x1 + b2*x2 (+ b_int*x1*x2)     (x1 -> log(x1) under a log covariate)
        y   = eta + e                                        (level outcome)
        y   = exp(eta + e)                                   (log outcome)

    with x1 ~ U(0.5, 5), x2 ~ U(0, 1) and e ~ N(0, noise^2).  x1 is strictly
    positive so every form is defined on the sample.

    Returns a dataframe with columns ``x1``, ``x2`` and ``y``.
    """
    form = FunctionalForm(form)
    missing = sorted(form.required_terms - set(coefficients))
    if missing:
        raise ValueError(f"Coefficients {missing} are needed to simulate the '{form}' form.")
    if n <= 0:
        raise ValueError(f"Sample size must be positive, got n = {n}.")

    rng = np.random.default_rng(seed)
    x1 = rng.uniform(*_X1_RANGE, size=n)
    x2 = rng.uniform(*_X2_RANGE, size=n)

    cov = np.log(x1) if form.log_covariate else x1
    eta = (
        intercept
        + coefficients[COVARIATE] * cov
        + coefficients.get(CONTROL, 0.0) * x2
    )
    if form.interaction:
        eta = eta + coefficients[INTERACTION] * cov * x2

    eta = eta + rng.normal(scale=noise, size=n)
    y = np.exp(eta) if form.log_outcome else eta

    logger.debug("Simulated %d rows from the '%s' form (noise=%s, seed=%s)", n, form, noise, seed)
    return pd.DataFrame({"x1": x1, "x2": x2, "y": y})
