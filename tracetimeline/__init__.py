"""
Trace timeline engine.
Normalizes execution traces into intervals, filters them, and summarizes durations.
"""

from .errors import (
    TraceError,
    MalformedRecordError,
    UnmatchedEventError,
    EmptyTraceError,
    InvalidFilterConfigError,
    LoadFailure,
    user_message,
)
from .models import (
    CategoryMode,
    ColorScheme,
    DenominatorMode,
    FilterConfig,
    Interval,
    TimeMode,
    TimeUnit,
    Trace,
)
from .parsing import normalize
from .services import FilterEngine, MetricsService, StatsReport, TraceService, filter_intervals

__version__ = "0.1.0"
