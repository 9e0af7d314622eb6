"""
Metrics service - Centralized statistics for the stats panel.
Every report names the denominator its percentages are relative to.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..metrics import summarize_intervals, total_duration, window_span
from ..logger import setup_logger
from ..models.filter_config import DenominatorMode, FilterConfig
from ..models.interval import Interval, Trace

logger = setup_logger(__name__)


@dataclass
class StatsReport:
    """
    Aggregate statistics over one interval set.

    Attributes:
        mode: Which total the percentages are relative to
        denominator_total: That total, in canonical units
        total_duration: Summed duration of the summarized intervals
        interval_count: Number of summarized intervals
        window_span: Wall time of the selected window (or full trace)
        categories: Per-category rows (category, total_duration, count, percentage)
    """
    mode: DenominatorMode
    denominator_total: int
    total_duration: int
    interval_count: int
    window_span: float
    categories: List[dict] = field(default_factory=list)

    @property
    def percentage_sum(self) -> float:
        return sum(row['percentage'] for row in self.categories)

    def to_dict(self) -> dict:
        return {
            'mode': self.mode.value,
            'denominator_total': self.denominator_total,
            'total_duration': self.total_duration,
            'interval_count': self.interval_count,
            'window_span': self.window_span,
            'categories': list(self.categories),
        }


class MetricsService:
    """
    Service layer for statistics calculations.

    The default denominator mode is fixed at construction and can be
    overridden per call; it is never inferred from the input.
    """

    def __init__(self, mode: DenominatorMode = DenominatorMode.FILTERED, exclude_ongoing: bool = True):
        self.mode = DenominatorMode(mode)
        self.exclude_ongoing = exclude_ongoing

    def denominator(
        self,
        intervals: Optional[Sequence[Interval]],
        trace: Optional[Trace],
        mode: DenominatorMode,
    ) -> int:
        """Total duration percentages are computed against."""
        if mode == DenominatorMode.GLOBAL:
            source = trace.intervals if trace is not None else intervals
        else:
            source = intervals
        return total_duration(source, self.exclude_ongoing)

    def category_stats(
        self,
        intervals: Optional[Sequence[Interval]],
        trace: Optional[Trace] = None,
        config: Optional[FilterConfig] = None,
        mode: Optional[DenominatorMode] = None,
    ) -> StatsReport:
        """
        Summarize an interval set by category.

        Args:
            intervals: Intervals to summarize (usually the filtered view)
            trace: Canonical trace (global denominator and window span)
            config: Active filter configuration (window span)
            mode: Denominator mode; defaults to the service's mode

        Returns:
            StatsReport with rows sorted by total duration, descending
        """
        mode = DenominatorMode(mode) if mode is not None else self.mode
        if not intervals:
            return self._empty_report(mode, trace, config)

        denominator = self.denominator(intervals, trace, mode)
        summary = summarize_intervals(intervals, denominator, self.exclude_ongoing)
        report = StatsReport(
            mode=mode,
            denominator_total=denominator,
            total_duration=total_duration(intervals, self.exclude_ongoing),
            interval_count=len(intervals),
            window_span=window_span(trace, config),
            categories=summary.to_dict('records'),
        )
        logger.debug(
            f"Stats ({mode.value}): {report.interval_count} intervals, "
            f"{len(report.categories)} categories, denominator {denominator}"
        )
        return report

    def _empty_report(
        self,
        mode: DenominatorMode,
        trace: Optional[Trace],
        config: Optional[FilterConfig],
    ) -> StatsReport:
        """Return an empty report."""
        return StatsReport(
            mode=mode,
            denominator_total=self.denominator([], trace, mode),
            total_duration=0,
            interval_count=0,
            window_span=window_span(trace, config),
            categories=[],
        )
