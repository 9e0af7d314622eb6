"""Metrics package for trace duration analysis."""

from .aggregation import (
    SUMMARY_COLUMNS,
    total_duration,
    get_category_summary,
    summarize_intervals,
    window_span,
)
