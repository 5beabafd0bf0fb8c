"""Pure evaluators used by the monitors."""
from checks.threshold_evaluator import (
    count_breaches,
    evaluate_threshold,
    validate_threshold_order,
)
from checks.expiry_classifier import ExpiryStatus, classify_expiry, parse_fact_date
from checks.duty_aggregator import aggregate_duty, aggregate_windows
from checks.duty_limits import DutyWindowStatus, evaluate_duty_limits, utilization_band

__all__ = [
    "count_breaches",
    "evaluate_threshold",
    "validate_threshold_order",
    "ExpiryStatus",
    "classify_expiry",
    "parse_fact_date",
    "aggregate_duty",
    "aggregate_windows",
    "DutyWindowStatus",
    "evaluate_duty_limits",
    "utilization_band",
]
