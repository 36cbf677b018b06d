import pytest

from marginfx import FunctionalForm, Scale


class TestFunctionalForm:
    def test_string_tags_round_trip(self):
        for form in FunctionalForm:
            assert FunctionalForm(form.value) is form
            assert str(form) == form.value

    def test_unknown_tag_raises(self):
        with pytest.raises(ValueError, match="Known forms"):
            FunctionalForm("probit")

    @pytest.mark.parametrize("form, expected", [
        ("linear", "y ~ x1 + x2"),
        ("interaction", "y ~ x1 * x2"),
        ("log_outcome", "np.log(y) ~ x1 + x2"),
        ("log_covariate", "y ~ np.log(x1) + x2"),
        ("log_log", "np.log(y) ~ np.log(x1) + x2"),
        ("log_log_interaction", "np.log(y) ~ np.log(x1) * x2"),
    ])
    def test_formula(self, form, expected):
        assert FunctionalForm(form).formula() == expected

    def test_formula_uses_column_names(self):
        formula = FunctionalForm.LOG_LOG.formula("wage", "hours", "age")
        assert formula == "np.log(wage) ~ np.log(hours) + age"

    def test_natural_scale(self):
        assert FunctionalForm.LINEAR.natural_scale is Scale.LEVEL
        assert FunctionalForm.LOG_COVARIATE.natural_scale is Scale.LEVEL
        assert FunctionalForm.LOG_OUTCOME.natural_scale is Scale.LOG
        assert FunctionalForm.LOG_LOG.natural_scale is Scale.LOG

    def test_required_terms(self):
        assert FunctionalForm.LINEAR.required_terms == {"x1", "x2"}
        assert FunctionalForm.INTERACTION.required_terms == {"x1", "x1:x2"}
        assert FunctionalForm.LOG_LOG_INTERACTION.required_terms == {"x1", "x1:x2"}

    def test_term_names_follow_covariate_transform(self):
        names = FunctionalForm.LOG_COVARIATE.term_names("income", "age")
        assert names == {"x1": "np.log(income)", "x2": "age", "x1:x2": "np.log(income):age"}

    def test_flags(self):
        form = FunctionalForm.LOG_LOG_INTERACTION
        assert form.log_outcome and form.log_covariate and form.interaction
        form = FunctionalForm.LINEAR
        assert not (form.log_outcome or form.log_covariate or form.interaction)
