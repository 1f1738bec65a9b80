"""Fan-out aggregation over upstream callers."""

from .aggregated_result import AggregatedResult, AggregateStatus
from .aggregator import FanOutAggregator
from .policy import AggregationPolicy

__all__ = ["AggregationPolicy", "AggregateStatus", "AggregatedResult", "FanOutAggregator"]
