"""
Narrative interpretation of marginal effects.

``effect_phrase`` turns a single effect into a sentence fragment;
``explain_fit`` renders the full executive summary of a fitted form and is
called by ``FunctionalFormResult.executive_summary()``.
"""
from __future__ import annotations

from .forms import FunctionalForm, Scale

_SEP = "━" * 66

_FORM_DESCRIPTIONS = {
    FunctionalForm.LINEAR: (
        "Both outcome and covariate enter in levels, so the coefficient on {x} "
        "is the marginal effect itself: the same at every point in the data."
    ),
    FunctionalForm.INTERACTION: (
        "{x} is interacted with {c}, so the marginal effect of {x} is "
        "b1 + b_int·{c}: it depends on where {c} is evaluated, and no single "
        "coefficient can be read as the effect."
    ),
    FunctionalForm.LOG_OUTCOME: (
        "The outcome is logged, so the coefficient on {x} is a semi-elasticity: "
        "the proportional change in {y} per unit of {x}. On the level scale the "
        "effect is b1·{y} and grows with the outcome."
    ),
    FunctionalForm.LOG_COVARIATE: (
        "The covariate is logged, so the marginal effect of {x} is b1/{x}: "
        "diminishing returns. b1/100 is the change in {y} for a 1% increase in {x}."
    ),
    FunctionalForm.LOG_LOG: (
        "Both outcome and covariate are logged, so the coefficient on log({x}) is "
        "an elasticity, constant across the data. On the level scale the effect "
        "is b1·{y}/{x}."
    ),
    FunctionalForm.LOG_LOG_INTERACTION: (
        "Both outcome and covariate are logged and log({x}) is interacted with "
        "{c}, so the elasticity is b1 + b_int·{c}: it varies with {c}."
    ),
}


def _direction(value: float) -> str:
    return "an increase" if value >= 0 else "a decrease"


def effect_phrase(value: float, scale: Scale, covariate: str, outcome: str) -> str:
    if scale is Scale.LEVEL:
        return (
            f"a one-unit increase in {covariate} is associated with "
            f"{_direction(value)} of {abs(value):.4f} in {outcome}"
        )
    if scale is Scale.LOG:
        return (
            f"a one-unit increase in {covariate} is associated with "
            f"{_direction(value)} of approximately {100 * abs(value):.2f}% in {outcome}"
        )
    return (
        f"a 1% increase in {covariate} is associated with "
        f"{_direction(value)} of approximately {abs(value):.4f}% in {outcome}"
    )


def _fmt_ci(lo: float, hi: float) -> str:
    return f"[{lo:.4f}, {hi:.4f}]"


def explain_fit(result) -> str:
    X, Y, C = result._covariate, result._outcome, result._control
    form = result.form

    scales = [form.natural_scale]
    if form.log_covariate and form.log_outcome:
        scales.append(Scale.ELASTICITY)
    if form.log_outcome:
        scales.append(Scale.LEVEL)

    result_lines = ["AVERAGE MARGINAL EFFECTS"]
    for scale in scales:
        est = result.ame(scale=scale)
        lo, hi = est.conf_int
        phrase = effect_phrase(est.effect, scale, X, Y)
        result_lines.append(
            f"  • {scale.value}: on average, {phrase} "
            f"(SE = {est.std_err:.4f}, CI: {_fmt_ci(lo, hi)})."
        )

    coef_lines = ["COEFFICIENTS"]
    for term, value in result.coefficients.items():
        coef_lines.append(f"  {term:<6} {value:>10.4f}")

    blocks = [
        "\n".join([_SEP, f"Executive Summary — {form.value.replace('_', '-')} model",
                   f"  {result.formula}", _SEP]),

        "\n".join([
            "FUNCTIONAL FORM",
            _FORM_DESCRIPTIONS[form].format(x=X, y=Y, c=C),
        ]),

        "\n".join(coef_lines),
        "\n".join(result_lines),

        "\n".join([
            "CAVEATS",
            "Averages are taken over the estimation sample. Level-scale effects "
            "for a logged outcome use exp of the fitted log outcome, which is the "
            "conditional median rather than the mean under normal errors. Read "
            "the effects causally only if the regression is correctly specified.",
        ]),

        _SEP,
    ]
    return "\n\n".join(blocks)
