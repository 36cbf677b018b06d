from ._exceptions import DomainError, MissingTermError
from .forms import FunctionalForm, Scale
from .evaluator import CoefficientSet, EvaluationPoint, MarginalEffect, evaluate
from .simulate import simulate
from .estimators.ols import FunctionalFormOLS, FunctionalFormResult, AMEEstimate
from .validation import ValidationCheck, ValidationReport

__all__ = [
    "DomainError", "MissingTermError",
    "FunctionalForm", "Scale",
    "CoefficientSet", "EvaluationPoint", "MarginalEffect", "evaluate",
    "simulate",
    "FunctionalFormOLS", "FunctionalFormResult", "AMEEstimate",
    "ValidationCheck", "ValidationReport",
]
