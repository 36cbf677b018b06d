import math

import numpy as np
import pytest

from marginfx import (
    CoefficientSet,
    DomainError,
    EvaluationPoint,
    FunctionalForm,
    MarginalEffect,
    MissingTermError,
    Scale,
    evaluate,
)


RNG = np.random.default_rng(42)
N = 200


def random_points(n=N):
    """Strictly positive x1 and y so every form and scale is defined."""
    x1 = RNG.uniform(0.1, 10.0, size=n)
    x2 = RNG.normal(size=n)
    y = RNG.uniform(0.1, 50.0, size=n)
    return [EvaluationPoint(a, b, c) for a, b, c in zip(x1, x2, y)]


class TestLinear:
    def test_effect_is_coefficient_everywhere(self):
        coeffs = {"x1": 1.7, "x2": -0.3}
        for point in random_points():
            effect = evaluate(FunctionalForm.LINEAR, coeffs, point)
            assert effect.value == 1.7
            assert effect.scale is Scale.LEVEL
            assert not effect.is_log_scale

    def test_accepts_string_tag(self):
        effect = evaluate("linear", {"x1": 2.0, "x2": 0.5}, EvaluationPoint(3.0, 1.0))
        assert effect.form is FunctionalForm.LINEAR
        assert effect.value == 2.0

    def test_negative_x1_is_fine(self):
        effect = evaluate("linear", {"x1": 2.0, "x2": 0.5}, EvaluationPoint(-4.0, 1.0))
        assert effect.value == 2.0


class TestInteraction:
    def test_worked_example(self):
        coeffs = {"x1": 1.0, "x1:x2": 10.0}
        effect = evaluate(FunctionalForm.INTERACTION, coeffs, EvaluationPoint(x1=3.0, x2=0.5))
        assert effect.value == 6.0

    def test_effect_depends_on_x2_only(self):
        coeffs = {"x1": 1.0, "x2": 4.0, "x1:x2": -2.0}
        for point in random_points():
            effect = evaluate("interaction", coeffs, point)
            assert effect.value == pytest.approx(1.0 - 2.0 * point.x2)

    def test_missing_interaction_term_raises(self):
        with pytest.raises(MissingTermError, match="x1:x2"):
            evaluate("interaction", {"x1": 1.0, "x2": 2.0}, EvaluationPoint(1.0, 1.0))

    def test_missing_error_lists_every_term(self):
        with pytest.raises(MissingTermError) as excinfo:
            evaluate("interaction", {}, EvaluationPoint(1.0, 1.0))
        assert excinfo.value.missing == ["x1", "x1:x2"]
        assert isinstance(excinfo.value, KeyError)


class TestLogOutcome:
    def test_natural_scale_is_log(self):
        effect = evaluate("log_outcome", {"x1": 0.2, "x2": 0.5}, EvaluationPoint(1.0, 1.0))
        assert effect.scale is Scale.LOG
        assert effect.is_log_scale
        assert effect.value == 0.2

    def test_level_is_log_times_y(self):
        coeffs = {"x1": 0.2, "x2": 0.5}
        for point in random_points():
            log_effect = evaluate("log_outcome", coeffs, point, Scale.LOG)
            level_effect = evaluate("log_outcome", coeffs, point, Scale.LEVEL)
            assert level_effect.value == log_effect.value * point.y

    def test_level_without_y_raises(self):
        with pytest.raises(ValueError, match="outcome level"):
            evaluate("log_outcome", {"x1": 0.2, "x2": 0.5}, EvaluationPoint(1.0, 1.0), "level")

    def test_nan_y_on_level_scale_raises(self):
        with pytest.raises(DomainError, match="positive"):
            evaluate("log_outcome", {"x1": 0.2, "x2": 0.5}, EvaluationPoint(1.0, 1.0, y=math.nan), "level")

    def test_level_with_nonpositive_y_raises(self):
        with pytest.raises(DomainError, match="positive"):
            evaluate("log_outcome", {"x1": 0.2, "x2": 0.5}, EvaluationPoint(1.0, 1.0, y=0.0), "level")


class TestLogCovariate:
    def test_worked_example(self):
        effect = evaluate("log_covariate", {"x1": 1.0, "x2": 0.0}, EvaluationPoint(x1=2.0))
        assert effect.value == 0.5

    def test_effect_is_coefficient_over_x1(self):
        coeffs = {"x1": 3.0, "x2": 0.5}
        for point in random_points():
            assert evaluate("log_covariate", coeffs, point).value == pytest.approx(3.0 / point.x1)

    @pytest.mark.parametrize("x1", [0.0, -1.5])
    def test_nonpositive_x1_raises(self, x1):
        with pytest.raises(DomainError, match="x1 must be positive"):
            evaluate("log_covariate", {"x1": 1.0, "x2": 0.0}, EvaluationPoint(x1=x1))

    def test_elasticity_divides_by_y(self):
        effect = evaluate("log_covariate", {"x1": 2.0, "x2": 0.0}, EvaluationPoint(4.0, 0.0, y=8.0), "elasticity")
        assert effect.value == pytest.approx(0.25)


class TestLogLog:
    def test_elasticity_is_exactly_coefficient(self):
        coeffs = {"x1": 0.8, "x2": 0.3}
        for point in random_points():
            assert evaluate("log_log", coeffs, point, Scale.ELASTICITY).value == 0.8

    def test_log_scale(self):
        effect = evaluate("log_log", {"x1": 0.8, "x2": 0.3}, EvaluationPoint(4.0, 1.0))
        assert effect.scale is Scale.LOG
        assert effect.value == pytest.approx(0.2)

    def test_level_effect_consistent_with_elasticity(self):
        coeffs = {"x1": 0.8, "x2": 0.3}
        for point in random_points():
            level = evaluate("log_log", coeffs, point, Scale.LEVEL).value
            assert level == pytest.approx(0.8 * point.y / point.x1)
            assert level * point.x1 / point.y == pytest.approx(0.8)

    @pytest.mark.parametrize("form", ["log_log", "log_covariate"])
    def test_nan_x1_raises(self, form):
        with pytest.raises(DomainError, match="x1 must be positive"):
            evaluate(form, {"x1": 0.8, "x2": 0.3}, EvaluationPoint(math.nan, 1.0))

    def test_nonpositive_x1_raises_even_for_elasticity(self):
        with pytest.raises(DomainError):
            evaluate("log_log", {"x1": 0.8, "x2": 0.3}, EvaluationPoint(0.0, 1.0), "elasticity")

    def test_interaction_elasticity_varies_with_x2(self):
        coeffs = {"x1": 0.8, "x2": 0.3, "x1:x2": 0.5}
        effect = evaluate("log_log_interaction", coeffs, EvaluationPoint(2.0, 0.4), "elasticity")
        assert effect.value == pytest.approx(1.0)
        effect = evaluate("log_log_interaction", coeffs, EvaluationPoint(2.0, 0.4))
        assert effect.value == pytest.approx(0.5)


class TestEvaluateInputs:
    def test_unknown_form_raises(self):
        with pytest.raises(ValueError, match="Unknown functional form"):
            evaluate("quadratic", {"x1": 1.0}, EvaluationPoint(1.0))

    def test_unknown_scale_raises(self):
        with pytest.raises(ValueError):
            evaluate("linear", {"x1": 1.0, "x2": 0.0}, EvaluationPoint(1.0), "percent")

    def test_missing_x2_under_linear_raises(self):
        with pytest.raises(MissingTermError, match="x2"):
            evaluate("linear", {"x1": 1.0}, EvaluationPoint(1.0))

    def test_marginal_effect_is_float_convertible(self):
        effect = evaluate("linear", {"x1": 2.0, "x2": 0.0}, EvaluationPoint(1.0))
        assert isinstance(effect, MarginalEffect)
        assert float(effect) == 2.0


class TestCoefficientSet:
    def test_is_immutable(self):
        coeffs = CoefficientSet({"x1": 1.0})
        with pytest.raises(TypeError):
            coeffs["x1"] = 2.0

    def test_copies_input(self):
        terms = {"x1": 1.0, "x2": 2.0}
        coeffs = CoefficientSet(terms)
        terms["x1"] = 5.0
        assert coeffs["x1"] == 1.0
        assert len(coeffs) == 2
        assert set(coeffs) == {"x1", "x2"}

    def test_from_params_maps_fitted_names(self):
        import pandas as pd

        params = pd.Series({
            "Intercept": 0.1,
            "np.log(income)": 0.8,
            "age": 0.3,
            "np.log(income):age": 0.5,
        })
        coeffs = CoefficientSet.from_params(params, "log_log_interaction", covariate="income", control="age")
        assert dict(coeffs) == {"x1": 0.8, "x2": 0.3, "x1:x2": 0.5}

    def test_from_params_skips_absent_terms(self):
        import pandas as pd

        params = pd.Series({"Intercept": 0.1, "x1": 2.0, "x2": 0.5})
        coeffs = CoefficientSet.from_params(params, "linear")
        assert "x1:x2" not in coeffs


class TestInterpret:
    def test_level_sentence(self):
        effect = evaluate("linear", {"x1": 2.0, "x2": 0.0}, EvaluationPoint(1.0))
        assert effect.interpret() == (
            "A one-unit increase in x1 is associated with an increase of 2.0000 in y."
        )

    def test_log_sentence_uses_percent(self):
        effect = evaluate("log_outcome", {"x1": -0.05, "x2": 0.0}, EvaluationPoint(1.0))
        sentence = effect.interpret(covariate="tenure", outcome="Wage")
        assert "a decrease of approximately 5.00% in Wage" in sentence

    def test_elasticity_sentence(self):
        effect = evaluate("log_log", {"x1": 0.8, "x2": 0.0}, EvaluationPoint(2.0), "elasticity")
        assert effect.interpret().startswith("A 1% increase in x1")
