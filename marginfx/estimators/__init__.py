from .ols import FunctionalFormOLS, FunctionalFormResult, AMEEstimate

__all__ = ["FunctionalFormOLS", "FunctionalFormResult", "AMEEstimate"]
