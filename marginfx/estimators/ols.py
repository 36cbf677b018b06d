from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

import numpy as np
import pandas as pd
import patsy
import statsmodels.formula.api as smf
from scipy import stats
from statsmodels.tools.numdiff import approx_fprime

from .._exceptions import DomainError
from ..evaluator import CoefficientSet, EvaluationPoint, MarginalEffect, evaluate
from ..forms import COVARIATE, FunctionalForm, Scale

logger = logging.getLogger(__name__)

_DEFAULT_ALPHA = 0.05
_DEFAULT_STEP = 1e-5


@dataclass(frozen=True)
class AMEEstimate:
    """A numerically estimated average marginal effect with delta-method inference."""

    effect: float
    std_err: float
    conf_int: tuple[float, float]
    pvalue: float
    scale: Scale

    def covers(self, value: float) -> bool:
        """``True`` if ``value`` lies inside the confidence interval."""
        lo, hi = self.conf_int
        return lo <= value <= hi


def _two_sided_pvalue(effect: float, std_err: float) -> float:
    """
    Normal two-sided p-value for ``H0: AME = 0``.

    A zero standard error gives 0.0 for a non-zero effect and NaN when the
    effect is zero too, since the test statistic is then undefined.
    """
    if std_err > 0:
        return float(2 * stats.norm.sf(abs(effect / std_err)))
    return 0.0 if effect != 0 else float("nan")


def _average_effect(
    params: np.ndarray,
    X: np.ndarray,
    dX: np.ndarray,
    x1: np.ndarray,
    log_outcome: bool,
    scale: Scale,
) -> float:
    """
    Mean over rows of the derivative of the prediction in x1.

    ``dX`` is the derivative of each design row with respect to x1, so
    ``dX @ params`` is the slope of the linear predictor.
    """
    eta = X @ params
    d_eta = dX @ params
    if log_outcome:
        if scale is Scale.LEVEL:
            per_row = np.exp(eta) * d_eta
        elif scale is Scale.LOG:
            per_row = d_eta
        else:
            per_row = d_eta * x1
    else:
        if scale is Scale.LEVEL:
            per_row = d_eta
        elif scale is Scale.LOG:
            per_row = d_eta / eta
        else:
            per_row = d_eta * x1 / eta
    return float(np.mean(per_row))


class FunctionalFormResult:
    """
    The result of fitting a functional form by OLS.

    Keeps the fitted statsmodels model and the estimation sample, so average
    marginal effects can be computed numerically (``ame``) and compared with
    the closed-form derivative (``analytical_ame``, ``validate``).
    """

    def __init__(
        self,
        result,
        form: FunctionalForm,
        outcome: str,
        covariate: str,
        control: str,
        data: pd.DataFrame,
        alpha: float = _DEFAULT_ALPHA,
        step: float = _DEFAULT_STEP,
    ) -> None:
        self._result = result
        self._form = form
        self._outcome = outcome
        self._covariate = covariate
        self._control = control
        self._data = data
        self._alpha = alpha
        self._step = step

    # ── Fitted model ──────────────────────────────────────────────────────────

    @property
    def form(self) -> FunctionalForm:
        return self._form

    @property
    def formula(self) -> str:
        """The statsmodels formula that was fitted."""
        return self._form.formula(self._outcome, self._covariate, self._control)

    @property
    def coefficients(self) -> CoefficientSet:
        """Fitted coefficients under their canonical names (``x1``, ``x2``, ``x1:x2``)."""
        return CoefficientSet.from_params(
            self._result.params, self._form, self._covariate, self._control
        )

    @property
    def coefficient(self) -> float:
        """Fitted coefficient on the covariate term (x1 or log(x1))."""
        return self.coefficients[COVARIATE]

    @property
    def rsquared(self) -> float:
        return float(self._result.rsquared)

    @property
    def nobs(self) -> int:
        return int(self._result.nobs)

    @property
    def statsmodels_result(self):
        """The underlying statsmodels result, for full diagnostics."""
        return self._result

    # ── Design matrices ───────────────────────────────────────────────────────

    def _frame(self, data: pd.DataFrame | None) -> pd.DataFrame:
        frame = self._data if data is None else data
        cols = [self._covariate, self._control]
        for col in cols:
            if col not in frame.columns:
                raise ValueError(f"Column '{col}' not found in dataframe.")
        frame = frame.dropna(subset=cols)
        if self._form.log_covariate and (frame[self._covariate] <= 0).any():
            raise DomainError(
                f"Covariate '{self._covariate}' must be strictly positive under "
                f"the '{self._form}' form."
            )
        return frame

    def _design(self, frame: pd.DataFrame) -> np.ndarray:
        rhs = self._form.rhs(self._covariate, self._control)
        X = patsy.dmatrix(rhs, frame, return_type="dataframe")
        return X[list(self._result.params.index)].to_numpy(dtype=float)

    def fitted_levels(self, data: pd.DataFrame | None = None) -> np.ndarray:
        """
        Predicted outcome on the level scale.

        For log outcomes this is ``exp`` of the fitted log outcome.
        """
        frame = self._frame(data)
        eta = self._design(frame) @ self._result.params.to_numpy()
        return np.exp(eta) if self._form.log_outcome else eta

    # ── Marginal effects ──────────────────────────────────────────────────────

    def _scale(self, scale: Scale | str | None) -> Scale:
        return self._form.natural_scale if scale is None else Scale(scale)

    def effect_at(self, point: EvaluationPoint, scale: Scale | str | None = None) -> MarginalEffect:
        """Closed-form marginal effect at a single point, using the fitted coefficients."""
        return evaluate(self._form, self.coefficients, point, self._scale(scale))

    def analytical_ame(
        self,
        data: pd.DataFrame | None = None,
        scale: Scale | str | None = None,
        coefficients: Mapping[str, float] | None = None,
    ) -> float:
        """
        Sample average of the closed-form marginal effect.

        Each row is evaluated at its own (x1, x2) with the fitted outcome
        level as y.  Pass ``coefficients`` (e.g. the true values of a
        simulation) to average the derivative under those instead of the
        fitted ones.
        """
        scale = self._scale(scale)
        frame = self._frame(data)
        coeffs = self.coefficients if coefficients is None else CoefficientSet(coefficients)
        levels = self.fitted_levels(frame)
        effects = [
            evaluate(self._form, coeffs, EvaluationPoint(x1, x2, y), scale).value
            for x1, x2, y in zip(frame[self._covariate], frame[self._control], levels)
        ]
        return float(np.mean(effects))

    def ame(self, data: pd.DataFrame | None = None, scale: Scale | str | None = None) -> AMEEstimate:
        """
        Average marginal effect of the covariate, estimated numerically.

        The derivative of the model's prediction is taken by central finite
        differences in x1 (step relative to |x1|) and averaged over the
        sample.  The standard error comes from the delta method, with the
        gradient of the AME in the parameters taken numerically.

        Parameters
        ----------
        data : pd.DataFrame, optional
            Sample to average over.  Defaults to the estimation sample.
        scale : Scale or str, optional
            Defaults to the form's natural scale.

        Raises
        ------
        DomainError
            If the covariate is non-positive under a log transform, or a
            level-outcome model has non-positive fitted values on a log scale.
        """
        scale = self._scale(scale)
        frame = self._frame(data)
        cov = self._covariate

        x1 = frame[cov].to_numpy(dtype=float)
        h = self._step * np.where(x1 != 0, np.abs(x1), 1.0)
        X = self._design(frame)
        X_plus = self._design(frame.assign(**{cov: x1 + h}))
        X_minus = self._design(frame.assign(**{cov: x1 - h}))
        dX = (X_plus - X_minus) / (2 * h)[:, None]

        params = self._result.params.to_numpy(dtype=float)
        log_outcome = self._form.log_outcome

        if not log_outcome and scale is not Scale.LEVEL and (X @ params <= 0).any():
            raise DomainError(
                f"Fitted values of '{self._outcome}' must be positive to express "
                f"the effect on the {scale.value} scale."
            )

        def average(b):
            return _average_effect(b, X, dX, x1, log_outcome, scale)

        effect = average(params)
        grad = np.ravel(approx_fprime(params, average, centered=True))
        names = list(self._result.params.index)
        vcov = self._result.cov_params().loc[names, names].to_numpy(dtype=float)
        std_err = float(np.sqrt(grad @ vcov @ grad))

        z = float(stats.norm.ppf(1 - self._alpha / 2))
        conf_int = (effect - z * std_err, effect + z * std_err)
        pvalue = _two_sided_pvalue(effect, std_err)

        logger.debug(
            "AME of %s on %s (%s, %s scale): %.6f (SE %.6f)",
            cov, self._outcome, self._form, scale.value, effect, std_err,
        )
        return AMEEstimate(
            effect=effect, std_err=std_err, conf_int=conf_int, pvalue=pvalue, scale=scale
        )

    # ── Validation and display ────────────────────────────────────────────────

    def validate(
        self,
        data: pd.DataFrame | None = None,
        scale: Scale | str | None = None,
        truth: Mapping[str, float] | None = None,
        rtol: float | None = None,
    ):
        """
        Compare the numerical AME against the closed-form derivative.

        Currently runs:

        - **Analytical agreement**: the numerical AME should equal the sample
          average of the closed-form derivative under the fitted coefficients.
        - **Truth coverage** (only with ``truth``): the closed-form AME under
          the true coefficients should lie inside the AME's confidence interval.

        Parameters
        ----------
        truth : Mapping[str, float], optional
            True coefficients of the data-generating process, keyed by
            canonical term name.
        """
        from ..validation.checks import (
            _DEFAULT_RTOL,
            ValidationReport,
            _check_analytical_agreement,
            _check_truth_coverage,
        )
        scale = self._scale(scale)
        estimate = self.ame(data, scale)
        checks = [
            _check_analytical_agreement(
                estimate, self.analytical_ame(data, scale), _DEFAULT_RTOL if rtol is None else rtol,
            ),
        ]
        if truth is not None:
            checks.append(
                _check_truth_coverage(estimate, self.analytical_ame(data, scale, truth), self._alpha)
            )
        return ValidationReport(
            checks=checks,
            form=self._form,
            covariate=self._covariate,
            outcome=self._outcome,
            scale=scale,
        )

    def executive_summary(self) -> str:
        """Narrative explanation of the form, the coefficients and the average effect."""
        from .._explain import explain_fit
        return explain_fit(self)

    def summary(self) -> str:
        est = self.ame()
        lo, hi = est.conf_int
        level = 100 * (1 - self._alpha)
        lines = [
            "",
            f"Marginal Effect ({self._form}): {self._covariate} → {self._outcome}",
            f"  Formula: {self.formula}",
            "─" * 50,
        ]
        for term, value in self.coefficients.items():
            lines.append(f"  Coefficient {term:<9}: {value:>10.4f}")
        lines += [
            "",
            f"  {'AME (' + est.scale.value + ')':<21}: {est.effect:>10.4f}",
            f"  Std. error           : {est.std_err:>10.4f}",
            f"  {level:g}% CI               : [{lo:.4f}, {hi:.4f}]",
            f"  p-value              : {est.pvalue:>10.4f}",
            f"  R-squared            : {self.rsquared:>10.4f}",
            f"  Observations         : {self.nobs:>10d}",
            "",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return self.summary()


class FunctionalFormOLS:
    """
    OLS estimator for one of the supported functional forms.

    Builds the statsmodels formula from the form, fits it, and returns a
    result from which average marginal effects can be computed on any scale
    and checked against their closed-form values.

    Usage
    -----
        df = simulate("log_log", {"x1": 0.8, "x2": 0.3}, seed=0)
        result = FunctionalFormOLS("log_log").fit(df)

        print(result.summary())
        print(result.ame(scale="elasticity"))
        print(result.validate(truth={"x1": 0.8, "x2": 0.3}).summary())
    """

    def __init__(
        self,
        form: FunctionalForm | str,
        outcome: str = "y",
        covariate: str = "x1",
        control: str = "x2",
        alpha: float = _DEFAULT_ALPHA,
        step: float = _DEFAULT_STEP,
    ) -> None:
        self._form = FunctionalForm(form)
        self._outcome = outcome
        self._covariate = covariate
        self._control = control
        self._alpha = alpha
        self._step = step
        self._validate_inputs()

    def _validate_inputs(self) -> None:
        if len({self._outcome, self._covariate, self._control}) < 3:
            raise ValueError("Outcome, covariate, and control must be different variables.")
        if not 0 < self._alpha < 1:
            raise ValueError(f"alpha must be in (0, 1), got {self._alpha}.")
        if self._step <= 0:
            raise ValueError(f"step must be positive, got {self._step}.")

    def fit(self, data: pd.DataFrame) -> FunctionalFormResult:
        """
        Fit the form's formula by OLS.

        Parameters
        ----------
        data : pd.DataFrame
            Must contain the outcome, covariate and control columns.  Rows
            with missing values in those columns are dropped.

        Raises
        ------
        ValueError
            If a required column is missing from the dataframe.
        DomainError
            If a log-transformed column contains non-positive values.
        """
        for label, var in [
            ("Outcome", self._outcome),
            ("Covariate", self._covariate),
            ("Control", self._control),
        ]:
            if var not in data.columns:
                raise ValueError(f"{label} column '{var}' not found in dataframe.")

        frame = data.dropna(subset=[self._outcome, self._covariate, self._control])
        logged = []
        if self._form.log_outcome:
            logged.append(self._outcome)
        if self._form.log_covariate:
            logged.append(self._covariate)
        for var in logged:
            if (frame[var] <= 0).any():
                raise DomainError(
                    f"Column '{var}' must be strictly positive to be log-transformed "
                    f"under the '{self._form}' form."
                )

        formula = self._form.formula(self._outcome, self._covariate, self._control)
        result = smf.ols(formula, data=frame).fit()
        logger.debug("Fitted %s on %d rows", formula, int(result.nobs))

        return FunctionalFormResult(
            result,
            form=self._form,
            outcome=self._outcome,
            covariate=self._covariate,
            control=self._control,
            data=frame,
            alpha=self._alpha,
            step=self._step,
        )
