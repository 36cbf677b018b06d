from ._check import ValidationCheck, ValidationReport

__all__ = ["ValidationCheck", "ValidationReport"]
