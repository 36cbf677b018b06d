from __future__ import annotations

from ..forms import FunctionalForm, Scale


class ValidationCheck:
    """Result of a single comparison between a numerical and an analytical effect."""

    def __init__(self, name: str, passed: bool, detail: str) -> None:
        self.name = name
        self.passed = passed
        self.detail = detail

    def __repr__(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        return f"ValidationCheck({status!r}, {self.name!r})"


class ValidationReport:
    """
    Results of validation checks run against a fitted functional form.

    Obtain via ``FunctionalFormResult.validate()``.

    Example::

        result = FunctionalFormOLS("log_outcome").fit(df)
        report = result.validate(truth={"x1": 0.2, "x2": 0.5})
        print(report.summary())
    """

    def __init__(
        self,
        checks: list[ValidationCheck],
        form: FunctionalForm,
        covariate: str,
        outcome: str,
        scale: Scale,
    ) -> None:
        self._checks = checks
        self._form = form
        self._covariate = covariate
        self._outcome = outcome
        self._scale = scale

    @property
    def checks(self) -> list[ValidationCheck]:
        """All checks, in the order they were run."""
        return list(self._checks)

    @property
    def passed(self) -> bool:
        """``True`` if every check passed."""
        return all(c.passed for c in self._checks)

    @property
    def failed_checks(self) -> list[ValidationCheck]:
        """Only the checks that did not pass."""
        return [c for c in self._checks if not c.passed]

    def _header(self) -> str:
        return (
            f"Marginal Effect Validation ({self._form}, {self._scale.value} scale): "
            f"{self._covariate} → {self._outcome}"
        )

    def _verdict(self) -> str:
        n_failed = len(self.failed_checks)
        if n_failed == 0:
            return f"All {len(self._checks)} check(s) passed."
        return f"{n_failed} of {len(self._checks)} check(s) failed."

    def summary(self) -> str:
        """Formatted report showing each check result and the overall verdict."""
        rows = [
            f"  [{'PASS' if check.passed else 'FAIL'}]  {check.name}: {check.detail}"
            for check in self._checks
        ]
        return "\n".join(["", self._header(), "─" * 50, *rows, "", f"  {self._verdict()}", ""])

    def __repr__(self) -> str:
        return self.summary()
