"""
Filter and selection engine.
Derives the displayed interval subset from the canonical trace.
"""

from typing import Any, List, Optional, Sequence

from ..errors import InvalidFilterConfigError
from ..logger import setup_logger
from ..models.filter_config import CategoryMode, FilterConfig, TimeMode
from ..models.interval import Interval, Trace
from ..models.units import TimeUnit

logger = setup_logger(__name__)


def filter_intervals(
    intervals: Optional[Sequence[Interval]],
    config: FilterConfig,
    time_unit=TimeUnit.NS,
) -> List[Interval]:
    """
    Select intervals matching a configuration.

    An interval is kept when its category is selected (or all categories
    are) and it overlaps the time window (or the whole trace is selected).
    Overlap, not containment: partially visible intervals stay.

    Args:
        intervals: Interval set to filter
        config: Selection criteria
        time_unit: Canonical unit of the intervals

    Returns:
        The matching intervals themselves, in their original order
    """
    if not intervals:
        return []

    bounds = config.window_bounds(time_unit)
    subset = config.category_mode == CategoryMode.SUBSET
    selected = config.selected_categories

    result = []
    for interval in intervals:
        if subset and interval.category not in selected:
            continue
        if bounds is not None and not interval.overlaps(*bounds):
            continue
        result.append(interval)
    return result


class FilterEngine:
    """
    Holds the active filter configuration for one trace.

    Every recomputation starts from the canonical trace, never from a
    previous result. Invalid proposals leave the active configuration and
    view untouched.
    """

    def __init__(self, trace: Optional[Trace] = None, config: Optional[FilterConfig] = None):
        self._trace = trace
        self._config = config or FilterConfig()
        self._view: List[Interval] = []
        self._recompute()

    @property
    def trace(self) -> Optional[Trace]:
        return self._trace

    @property
    def config(self) -> FilterConfig:
        return self._config

    @property
    def view(self) -> List[Interval]:
        """Currently selected intervals (a copy of the list, same objects)."""
        return list(self._view)

    def set_trace(self, trace: Optional[Trace], reset_config: bool = True) -> List[Interval]:
        """Replace the canonical trace and recompute the view."""
        self._trace = trace
        if reset_config:
            self._config = FilterConfig()
        self._recompute()
        return self.view

    def apply(self, proposal: Any) -> List[Interval]:
        """
        Validate and activate a new configuration.

        Args:
            proposal: FilterConfig or a dict of its fields

        Returns:
            The new view

        Raises:
            InvalidFilterConfigError: If the proposal is invalid; the previous
                configuration stays active
        """
        try:
            config = FilterConfig.parse(proposal)
        except InvalidFilterConfigError as e:
            logger.warning(f"Rejected filter config: {e}")
            raise
        self._config = config
        self._recompute()
        return self.view

    def _recompute(self):
        if self._trace is None:
            self._view = []
            return
        self._view = filter_intervals(self._trace.intervals, self._config, self._trace.time_unit)
        logger.debug(f"Filter view: {len(self._view)} of {len(self._trace)} intervals")
