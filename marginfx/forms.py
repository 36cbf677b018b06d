from __future__ import annotations

from enum import Enum

COVARIATE = "x1"
CONTROL = "x2"
INTERACTION = "x1:x2"


class Scale(Enum):
    """
    The scale a marginal effect is expressed on.

    - ``LEVEL``: dy/dx1, units of y per unit of x1.
    - ``LOG``: d log(y)/dx1, the proportional change in y per unit of x1
      (a semi-elasticity).
    - ``ELASTICITY``: d log(y)/d log(x1), percent change in y per percent
      change in x1.
    """

    LEVEL = "level"
    LOG = "log"
    ELASTICITY = "elasticity"


class FunctionalForm(Enum):
    """
    How outcome and covariate are transformed before fitting a linear model.

    This is a closed set: each variant knows which terms its linear
    predictor contains and how to write itself as a statsmodels formula.
    Anywhere a form is accepted, its string tag works too::

        FunctionalForm("log_log") is FunctionalForm.LOG_LOG
    """

    LINEAR = "linear"
    INTERACTION = "interaction"
    LOG_OUTCOME = "log_outcome"
    LOG_COVARIATE = "log_covariate"
    LOG_LOG = "log_log"
    LOG_LOG_INTERACTION = "log_log_interaction"

    @classmethod
    def _missing_(cls, value):
        raise ValueError(
            f"Unknown functional form {value!r}. "
            f"Known forms: {[f.value for f in cls]}"
        )

    # ── Transformations ───────────────────────────────────────────────────────

    @property
    def log_outcome(self) -> bool:
        """``True`` if the outcome enters the model as log(y)."""
        return self in _LOG_OUTCOME

    @property
    def log_covariate(self) -> bool:
        """``True`` if the covariate enters the model as log(x1)."""
        return self in _LOG_COVARIATE

    @property
    def interaction(self) -> bool:
        """``True`` if the covariate is interacted with the control."""
        return self in _INTERACTED

    @property
    def natural_scale(self) -> Scale:
        """The scale on which the coefficients are read directly."""
        return Scale.LOG if self.log_outcome else Scale.LEVEL

    @property
    def required_terms(self) -> frozenset[str]:
        """Canonical coefficient names the analytical derivative needs."""
        if self.interaction:
            return frozenset({COVARIATE, INTERACTION})
        return frozenset({COVARIATE, CONTROL})

    # ── Formula construction ──────────────────────────────────────────────────

    def term_names(self, covariate: str = COVARIATE, control: str = CONTROL) -> dict[str, str]:
        """
        Map canonical term names to the names statsmodels gives the fitted
        parameters, e.g. ``{"x1": "np.log(income)", "x1:x2": "np.log(income):age"}``.
        """
        cov = f"np.log({covariate})" if self.log_covariate else covariate
        return {
            COVARIATE: cov,
            CONTROL: control,
            INTERACTION: f"{cov}:{control}",
        }

    def formula(self, outcome: str = "y", covariate: str = COVARIATE, control: str = CONTROL) -> str:
        """The statsmodels formula for this form, e.g. ``np.log(y) ~ np.log(x1) + x2``."""
        return f"{self.lhs(outcome)} ~ {self.rhs(covariate, control)}"

    def lhs(self, outcome: str = "y") -> str:
        return f"np.log({outcome})" if self.log_outcome else outcome

    def rhs(self, covariate: str = COVARIATE, control: str = CONTROL) -> str:
        cov = self.term_names(covariate, control)[COVARIATE]
        op = "*" if self.interaction else "+"
        return f"{cov} {op} {control}"

    def __str__(self) -> str:
        return self.value


_LOG_OUTCOME = {FunctionalForm.LOG_OUTCOME, FunctionalForm.LOG_LOG, FunctionalForm.LOG_LOG_INTERACTION}
_LOG_COVARIATE = {FunctionalForm.LOG_COVARIATE, FunctionalForm.LOG_LOG, FunctionalForm.LOG_LOG_INTERACTION}
_INTERACTED = {FunctionalForm.INTERACTION, FunctionalForm.LOG_LOG_INTERACTION}
