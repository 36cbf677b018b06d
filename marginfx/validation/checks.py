from __future__ import annotations

import logging

from ._check import ValidationCheck, ValidationReport

logger = logging.getLogger(__name__)

_DEFAULT_RTOL = 1e-4


def _check_analytical_agreement(estimate, analytical: float, rtol: float) -> ValidationCheck:
    """
    The finite-difference AME should reproduce the closed-form derivative
    averaged over the same sample with the same coefficients.  Any gap
    beyond numerical error means the two disagree about the functional form.
    """
    gap = abs(estimate.effect - analytical)
    tol = rtol * max(1.0, abs(analytical))
    passed = gap <= tol

    if passed:
        detail = (
            f"numerical AME = {estimate.effect:.4f}, analytical = {analytical:.4f}  "
            f"(gap {gap:.2e} ≤ {tol:.2e})"
        )
    else:
        detail = (
            f"numerical AME = {estimate.effect:.4f}, analytical = {analytical:.4f}  "
            f"(gap {gap:.2e} > {tol:.2e})  The numerical and closed-form "
            f"derivatives disagree."
        )
    logger.debug("Analytical agreement: gap=%.3e tol=%.3e passed=%s", gap, tol, passed)
    return ValidationCheck(name="Analytical agreement", passed=passed, detail=detail)


def _check_truth_coverage(estimate, true_effect: float, alpha: float) -> ValidationCheck:
    """
    The closed-form AME under the true coefficients should fall inside the
    estimated confidence interval.  Under a correct model this fails with
    probability ``alpha``.
    """
    lo, hi = estimate.conf_int
    passed = estimate.covers(true_effect)
    level = 100 * (1 - alpha)

    if passed:
        detail = f"true AME = {true_effect:.4f} inside {level:g}% CI [{lo:.4f}, {hi:.4f}]"
    else:
        detail = (
            f"true AME = {true_effect:.4f} outside {level:g}% CI [{lo:.4f}, {hi:.4f}]  "
            f"The estimate does not recover the data-generating effect."
        )
    logger.debug("Truth coverage: true=%.6f CI=[%.6f, %.6f] passed=%s", true_effect, lo, hi, passed)
    return ValidationCheck(name="Truth coverage", passed=passed, detail=detail)
