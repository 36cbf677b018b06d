class DomainError(ValueError):
    """
    Raised when an evaluation point or data column lies outside the domain
    of a functional form, e.g. a non-positive covariate under a log
    transform or a non-positive outcome level where one is needed to move
    between the log and level scales.
    """
    pass


class MissingTermError(KeyError):
    """
    Raised when a coefficient set lacks a term the functional form needs.

    ``missing`` lists every absent term, not just the first one found.
    """

    def __init__(self, form, missing: list[str]) -> None:
        self.form = form
        self.missing = list(missing)
        super().__init__(self.missing)

    def __str__(self) -> str:
        return (
            f"Coefficient set is missing term(s) {self.missing} "
            f"required by the '{self.form}' functional form."
        )
