"""Time integration and compliance aggregation."""

from .cancellation import CancellationToken
from .evaluator import (
    EvaluationConfig,
    ProgressCallback,
    default_reference_day,
    evaluate_compliance,
    sample_instants,
)
from .grid import CheckPointGrid, generate_check_points
from .integrator import IntegrationResult, integrate_shadow
from .sampling import IntegrationRule, TimeSample, build_time_samples

__all__ = [
    "CancellationToken",
    "EvaluationConfig",
    "ProgressCallback",
    "default_reference_day",
    "evaluate_compliance",
    "sample_instants",
    "CheckPointGrid",
    "generate_check_points",
    "IntegrationResult",
    "integrate_shadow",
    "IntegrationRule",
    "TimeSample",
    "build_time_samples",
]
