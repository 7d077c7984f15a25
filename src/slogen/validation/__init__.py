"""Validation module for SLO definitions."""

from slogen.validation.slo import MetricsQLDialectValidator, PromQLDialectValidator, validate_slo

__all__ = [
    "MetricsQLDialectValidator",
    "PromQLDialectValidator",
    "validate_slo",
]
