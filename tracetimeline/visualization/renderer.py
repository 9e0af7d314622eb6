"""
Scoped ownership of the drawn chart.
"""

from contextlib import contextmanager
from typing import Callable, List, Optional, Sequence, Union

import plotly.graph_objects as go

from ..logger import setup_logger
from .charts import create_timeline_figure

logger = setup_logger(__name__)

RecordSource = Union[Sequence[dict], Callable[[], Sequence[dict]]]


class ChartRenderer:
    """
    Owns at most one live figure.

    The previous figure is released before a new one is built, and again on
    close(), even when building or publishing fails. Render requests that
    arrive while a render is running (for instance from the publish
    callback) are coalesced into one follow-up render of the latest records.
    """

    def __init__(
        self,
        build: Callable[[Sequence[dict]], go.Figure] = create_timeline_figure,
        on_render: Optional[Callable[[go.Figure], None]] = None,
        on_release: Optional[Callable[[go.Figure], None]] = None,
    ):
        self._build = build
        self._on_render = on_render
        self._on_release = on_release
        self._figure: Optional[go.Figure] = None
        self._source: Optional[Callable[[], Sequence[dict]]] = None
        self._rendering = False
        self._pending = False
        self.render_count = 0

    @property
    def figure(self) -> Optional[go.Figure]:
        return self._figure

    @property
    def is_rendering(self) -> bool:
        return self._rendering

    def render(self, source: RecordSource) -> Optional[go.Figure]:
        """
        Draw the records from source.

        Args:
            source: Chart records, or a callable returning the latest records

        Returns:
            The live figure, or None if the request was queued behind a
            render already in progress
        """
        self._source = source if callable(source) else (lambda records=source: records)
        if self._rendering:
            self._pending = True
            logger.debug("Render in progress; follow-up queued")
            return None

        self._rendering = True
        try:
            while True:
                self._pending = False
                self._draw(self._source())
                if not self._pending:
                    break
        finally:
            self._rendering = False
        return self._figure

    def _draw(self, records: Sequence[dict]):
        self.release()
        with self._scoped_figure(records) as figure:
            if self._on_render is not None:
                self._on_render(figure)
            self._figure = figure
        self.render_count += 1
        logger.debug(f"Rendered {len(records)} records")

    @contextmanager
    def _scoped_figure(self, records: Sequence[dict]):
        figure = self._build(records)
        try:
            yield figure
        except Exception:
            logger.exception("Render failed; releasing figure")
            self._dispose(figure)
            raise

    def _dispose(self, figure: go.Figure):
        if self._on_release is not None:
            self._on_release(figure)
        figure.data = []

    def release(self):
        """Release the live figure, if any."""
        if self._figure is None:
            return
        figure, self._figure = self._figure, None
        self._dispose(figure)

    def close(self):
        self.release()
        self._source = None

    def __enter__(self) -> 'ChartRenderer':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
