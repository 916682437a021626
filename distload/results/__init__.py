"""Aggregation, alerting and presentation of load test results."""

from .aggregator import ResultAggregator, sum_errors
from .alert import WebhookAlerter, brief_analysis
from .schedule import ScheduleTable

__all__ = [
    "ResultAggregator",
    "sum_errors",
    "WebhookAlerter",
    "brief_analysis",
    "ScheduleTable",
]
