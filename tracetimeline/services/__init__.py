"""
Services package - Business logic layer.
"""

from .filter_service import FilterEngine, filter_intervals
from .metrics_service import MetricsService, StatsReport
from .trace_service import TraceService

__all__ = ['FilterEngine', 'filter_intervals', 'MetricsService', 'StatsReport', 'TraceService']
