"""
Trace service - One loaded trace and everything derived from it.
Single source of truth for the chart, the stats panel and the list view.
"""

from typing import Any, Callable, List, Optional

import httpx

from ..api.loader import fetch_payload
from ..analytics.legend import LegendEntry, LegendIndex
from ..config import AXIS_UNIT, DEFAULT_SYNTHETIC_SPAN
from ..errors import EmptyTraceError, InvalidFilterConfigError, LoadFailure, TraceError, user_message
from ..logger import setup_logger
from ..models.filter_config import DenominatorMode, FilterConfig
from ..models.interval import Interval, Trace
from ..models.units import TimeUnit
from ..parsing import normalize
from ..utils.time_format import convert
from ..visualization.charts import to_chart_records
from .filter_service import FilterEngine
from .metrics_service import MetricsService, StatsReport

logger = setup_logger(__name__)

Listener = Callable[[FilterConfig, List[Interval]], None]


class TraceService:
    """
    Service layer for one trace session.

    Loading replaces the canonical trace wholesale. Loads are numbered; a
    load that finishes after a newer one started is discarded. Failed loads
    leave the previous trace in place. Every change to the trace or the
    filter configuration rebuilds the displayed view and the search index
    and notifies subscribers.
    """

    def __init__(
        self,
        time_unit=TimeUnit.NS,
        synthetic_span: int = DEFAULT_SYNTHETIC_SPAN,
        display_unit=AXIS_UNIT,
        metrics_service: Optional[MetricsService] = None,
    ):
        self.time_unit = TimeUnit.coerce(time_unit)
        self.synthetic_span = synthetic_span
        self.display_unit = TimeUnit.coerce(display_unit)
        self.metrics = metrics_service or MetricsService()
        self.last_error: Optional[str] = None

        self._trace: Optional[Trace] = None
        self._engine = FilterEngine()
        self._legend = LegendIndex()
        self._generation = 0
        self._listeners: List[Listener] = []

    @property
    def trace(self) -> Optional[Trace]:
        return self._trace

    @property
    def config(self) -> FilterConfig:
        return self._engine.config

    @property
    def view(self) -> List[Interval]:
        """Intervals currently displayed."""
        return self._engine.view

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, payload: Any, time_unit=None) -> Trace:
        """
        Normalize and publish a payload.

        Args:
            payload: Anything normalize() accepts
            time_unit: Canonical unit of the payload (defaults to the service's)

        Returns:
            The new trace

        Raises:
            LoadFailure: If the payload does not parse
            EmptyTraceError: If the payload has no valid intervals
        """
        self._generation += 1
        return self._apply(payload, time_unit)

    async def load_url(
        self,
        url: str,
        client: Optional[httpx.AsyncClient] = None,
        time_unit=None,
    ) -> Optional[Trace]:
        """
        Fetch, normalize and publish a payload.

        Returns:
            The new trace, or None if a newer load superseded this one

        Raises:
            LoadFailure: If fetching or parsing fails (and no newer load started)
            EmptyTraceError: If the payload has no valid intervals
        """
        self._generation += 1
        token = self._generation
        logger.info(f"Loading trace #{token} from {url}")

        try:
            payload = await fetch_payload(url, client)
        except LoadFailure as e:
            if token != self._generation:
                logger.info(f"Ignoring failure of superseded load #{token}: {e}")
                return None
            self._fail(e)
            raise

        if token != self._generation:
            logger.info(f"Discarding superseded load #{token} (current #{self._generation})")
            return None
        return self._apply(payload, time_unit)

    def _apply(self, payload: Any, time_unit) -> Trace:
        unit = TimeUnit.coerce(time_unit) if time_unit is not None else self.time_unit
        try:
            trace = normalize(payload, time_unit=unit, synthetic_span=self.synthetic_span)
        except (LoadFailure, EmptyTraceError) as e:
            self._fail(e)
            raise
        self._publish(trace)
        return trace

    def _publish(self, trace: Trace):
        self._trace = trace
        self._engine.set_trace(trace)
        self.last_error = None
        self._refresh()

    def _fail(self, error: TraceError):
        self.last_error = user_message(error)
        logger.error(f"Trace load failed: {error}")

    def clear(self):
        """Drop the current trace."""
        self._generation += 1
        self._trace = None
        self._engine.set_trace(None)
        self._refresh()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def update_config(self, proposal: Any) -> List[Interval]:
        """
        Apply a configuration emitted by the config panel.

        Window bounds in a dict proposal without ``windowUnit`` are read in
        the display unit, matching ``minTime``/``maxTime`` of the config
        surface.

        Raises:
            InvalidFilterConfigError: The proposal is rejected and the
                previous configuration stays active
        """
        if isinstance(proposal, dict) and not {'windowUnit', 'window_unit'} & proposal.keys():
            proposal = {**proposal, 'windowUnit': self.display_unit}
        try:
            self._engine.apply(proposal)
        except InvalidFilterConfigError as e:
            self.last_error = user_message(e)
            raise
        self.last_error = None
        self._refresh()
        return self.view

    def config_surface(self) -> dict:
        """Values the config panel needs, times in the display unit."""
        trace = self._trace
        if trace is None:
            min_time = max_time = 0.0
            categories = []
        else:
            min_time = convert(trace.min_time, trace.time_unit, self.display_unit)
            max_time = convert(trace.max_time, trace.time_unit, self.display_unit)
            categories = trace.categories
        return {
            'availableCategories': categories,
            'minTime': min_time,
            'maxTime': max_time,
            'displayUnit': self.display_unit.value,
            'currentConfig': self.config.to_dict(),
        }

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Call listener(config, view) after every change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _refresh(self):
        view = self._engine.view
        self._legend = LegendIndex(view)
        config = self._engine.config
        for listener in list(self._listeners):
            listener(config, view)

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def stats(self, mode: Optional[DenominatorMode] = None) -> StatsReport:
        """Statistics over the displayed view."""
        return self.metrics.category_stats(self.view, self._trace, self.config, mode)

    def global_stats(self) -> StatsReport:
        """Statistics over the whole trace against the whole trace."""
        intervals = self._trace.intervals if self._trace is not None else []
        return self.metrics.category_stats(intervals, self._trace, None, DenominatorMode.GLOBAL)

    def chart_records(self) -> List[dict]:
        """Chart records for the displayed view."""
        unit = self._trace.time_unit if self._trace is not None else self.time_unit
        return to_chart_records(self.view, unit, self.display_unit)

    def search(self, query: Optional[str] = None, category: Optional[str] = None) -> List[Interval]:
        """Search the displayed view."""
        return self._legend.search(query, category)

    def legend_entries(self) -> List[LegendEntry]:
        return self._legend.legend_entries()
