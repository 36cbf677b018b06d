"""
Closed-form marginal effects for each functional form.

These are the ground-truth derivatives a numerically estimated average
marginal effect is checked against.  Everything here is a pure function of
its arguments.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from ._exceptions import DomainError, MissingTermError
from .forms import COVARIATE, CONTROL, INTERACTION, FunctionalForm, Scale


class CoefficientSet(Mapping):
    """
    Immutable mapping from canonical term name to coefficient value.

    Canonical names are ``"x1"`` (the covariate, or its log), ``"x2"`` (the
    control) and ``"x1:x2"`` (their interaction), whatever the columns
    were called in the data::

        coeffs = CoefficientSet({"x1": 1.0, "x1:x2": 10.0})
    """

    def __init__(self, terms: Mapping[str, float] | None = None) -> None:
        self._terms = MappingProxyType({k: float(v) for k, v in dict(terms or {}).items()})

    @classmethod
    def from_params(
        cls,
        params,
        form: FunctionalForm | str,
        covariate: str = COVARIATE,
        control: str = CONTROL,
    ) -> CoefficientSet:
        """
        Build a coefficient set from a fitted statsmodels ``params`` series.

        Fitted names such as ``np.log(income):age`` are mapped back onto the
        canonical ``"x1:x2"``.  Terms the model did not estimate are left out.
        """
        form = FunctionalForm(form)
        names = form.term_names(covariate, control)
        return cls({canon: params[name] for canon, name in names.items() if name in params.index})

    def __getitem__(self, term: str) -> float:
        return self._terms[term]

    def __iter__(self):
        return iter(self._terms)

    def __len__(self) -> int:
        return len(self._terms)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k!r}: {v:.4f}" for k, v in self._terms.items())
        return f"CoefficientSet({{{inner}}})"


@dataclass(frozen=True)
class EvaluationPoint:
    """
    Covariate values at which a derivative is evaluated.

    ``y`` is the outcome level at the point.  It is only needed to move
    between the log and level scales.
    """

    x1: float
    x2: float = 0.0
    y: float | None = None


@dataclass(frozen=True)
class MarginalEffect:
    """A derivative of the outcome with respect to x1, tagged with its scale."""

    value: float
    scale: Scale
    form: FunctionalForm

    @property
    def is_log_scale(self) -> bool:
        """``True`` if the outcome is measured in logs (semi-elasticity or elasticity)."""
        return self.scale is not Scale.LEVEL

    def interpret(self, covariate: str = "x1", outcome: str = "y") -> str:
        """One-sentence plain-English reading of this effect."""
        from ._explain import effect_phrase
        phrase = effect_phrase(self.value, self.scale, covariate, outcome)
        return phrase[0].upper() + phrase[1:] + "."

    def __float__(self) -> float:
        return self.value


def _check_terms(form: FunctionalForm, coeffs: Mapping[str, float]) -> None:
    missing = sorted(form.required_terms - set(coeffs))
    if missing:
        raise MissingTermError(form, missing)


def _outcome_level(point: EvaluationPoint, form: FunctionalForm, scale: Scale) -> float:
    if point.y is None:
        raise ValueError(
            f"The outcome level y is required to express a '{form}' effect "
            f"on the {scale.value} scale."
        )
    if not point.y > 0:
        raise DomainError(
            f"Outcome level must be positive to move between log and level "
            f"scales; got y = {point.y}."
        )
    return float(point.y)


def evaluate(
    form: FunctionalForm | str,
    coeffs: Mapping[str, float],
    point: EvaluationPoint,
    scale: Scale | str | None = None,
) -> MarginalEffect:
    """
    Exact derivative of the outcome with respect to x1 at ``point``.

    Parameters
    ----------
    form : FunctionalForm or str
        How outcome and covariate were transformed before fitting.
    coeffs : Mapping[str, float]
        Coefficients keyed by canonical term name.
    point : EvaluationPoint
        Where to evaluate the derivative.
    scale : Scale, str or None
        Scale of the result.  Defaults to the form's natural scale: ``LEVEL``
        for level outcomes, ``LOG`` for log outcomes.

    Raises
    ------
    MissingTermError
        If ``coeffs`` lacks a term the form needs.
    DomainError
        If x1 is not positive (or is NaN) under a logged covariate, or the
        outcome level is not positive where a scale conversion needs it.
    ValueError
        If the form is unknown, or a scale conversion needs ``point.y`` and
        none was given.
    """
    form = FunctionalForm(form)
    scale = form.natural_scale if scale is None else Scale(scale)
    _check_terms(form, coeffs)

    x1 = float(point.x1)
    if form.log_covariate and not x1 > 0:
        raise DomainError(
            f"x1 must be positive under the '{form}' form (log(x1) is undefined "
            f"at x1 = {x1})."
        )

    # Coefficient on the covariate term in the linear predictor.
    k = coeffs[COVARIATE]
    if form.interaction:
        k += coeffs[INTERACTION] * point.x2

    if form.log_covariate:
        d_eta_dx1, d_eta_dlogx1 = k / x1, k
    else:
        d_eta_dx1, d_eta_dlogx1 = k, k * x1

    if form.log_outcome:
        if scale is Scale.LOG:
            value = d_eta_dx1
        elif scale is Scale.ELASTICITY:
            value = d_eta_dlogx1
        else:
            value = d_eta_dx1 * _outcome_level(point, form, scale)
    else:
        if scale is Scale.LEVEL:
            value = d_eta_dx1
        elif scale is Scale.LOG:
            value = d_eta_dx1 / _outcome_level(point, form, scale)
        else:
            value = d_eta_dlogx1 / _outcome_level(point, form, scale)

    return MarginalEffect(value=float(value), scale=scale, form=form)
