"""
Duration aggregation by category.
"""

from typing import Optional, Sequence

import pandas as pd

from ..logger import setup_logger
from ..models.filter_config import FilterConfig
from ..models.interval import Interval, Trace, intervals_to_frame
from ..models.units import TimeUnit

logger = setup_logger(__name__)

SUMMARY_COLUMNS = ['category', 'total_duration', 'count', 'percentage']


def _effective_durations(df: pd.DataFrame, exclude_ongoing: bool) -> pd.Series:
    durations = df['duration'].astype('int64')
    if exclude_ongoing:
        durations = durations.where(~df['ongoing'].astype(bool), 0)
    return durations


def total_duration(intervals: Optional[Sequence[Interval]], exclude_ongoing: bool = True) -> int:
    """Sum of interval durations; ongoing intervals add nothing when excluded."""
    if not intervals:
        return 0
    return sum(iv.duration for iv in intervals if not (exclude_ongoing and iv.ongoing))


def get_category_summary(
    df: pd.DataFrame,
    denominator_total: int,
    exclude_ongoing: bool = True,
) -> pd.DataFrame:
    """
    Generate a summary by task category.

    Args:
        df: Interval frame (see intervals_to_frame)
        denominator_total: Duration that percentages are relative to
        exclude_ongoing: Count ongoing intervals but not their synthetic duration

    Returns:
        DataFrame with category, total_duration, count, percentage, sorted by
        total_duration descending (ties keep first-appearance order)
    """
    if df.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    df = df.assign(effective=_effective_durations(df, exclude_ongoing))
    summary = df.groupby('category', sort=False).agg(
        total_duration=('effective', 'sum'),
        count=('effective', 'size'),
    ).reset_index()

    if denominator_total > 0:
        summary['percentage'] = summary['total_duration'] / denominator_total * 100
    else:
        summary['percentage'] = 0.0

    summary = summary.sort_values('total_duration', ascending=False, kind='stable')
    return summary.reset_index(drop=True)[SUMMARY_COLUMNS]


def summarize_intervals(
    intervals: Optional[Sequence[Interval]],
    denominator_total: int,
    exclude_ongoing: bool = True,
) -> pd.DataFrame:
    """get_category_summary over a list of intervals."""
    return get_category_summary(intervals_to_frame(intervals), denominator_total, exclude_ongoing)


def window_span(trace: Optional[Trace], config: Optional[FilterConfig] = None) -> float:
    """
    Wall time covered by the selected window, in canonical units.

    Independent of how many intervals fall inside: a custom window reports
    its own width, 'all' reports the full trace span.
    """
    if config is not None:
        unit = trace.time_unit if trace is not None else TimeUnit.NS
        bounds = config.window_bounds(unit)
        if bounds is not None:
            return bounds[1] - bounds[0]
    if trace is None:
        return 0
    return trace.span
