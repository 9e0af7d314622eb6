"""
Interval and trace data models.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .units import TimeUnit


@dataclass(frozen=True)
class ColorScheme:
    """Colors used to draw one category."""
    primary: str
    secondary: str
    border: str

    def to_dict(self) -> dict:
        return {'primary': self.primary, 'secondary': self.secondary, 'border': self.border}


@dataclass(frozen=True)
class Interval:
    """
    Canonical execution span of one task.

    Attributes:
        index: Position in the canonical interval list
        base_name: Task name as found in the source, e.g. "MEM_load"
        occurrence: 1-based count of intervals sharing base_name so far
        display_name: Label for presentation only
        category: Name prefix before the first separator
        subtask: Name remainder after the first separator
        start: Start in the canonical unit
        end: End in the canonical unit (synthesized when ongoing)
        duration: end - start
        ongoing: True if the end was never observed
        color_scheme: Colors for the category
        original: The raw record, verbatim
        extra: Fields of the raw record the engine does not interpret
    """
    index: int
    base_name: str
    occurrence: int
    display_name: str
    category: str
    subtask: str
    start: int
    end: int
    duration: int
    color_scheme: ColorScheme
    ongoing: bool = False
    original: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        """Validate interval bounds."""
        if self.end < self.start:
            raise ValueError("End must not be before start")
        if self.duration != self.end - self.start:
            raise ValueError("Duration must equal end - start")
        if self.occurrence < 1:
            raise ValueError("Occurrence is 1-based")

    def overlaps(self, window_start: float, window_end: float) -> bool:
        """Whether any part of the interval lies inside the open window."""
        return self.start < window_end and self.end > window_start

    def to_dict(self) -> dict:
        """Convert interval to dictionary."""
        return {
            'index': self.index,
            'base_name': self.base_name,
            'occurrence': self.occurrence,
            'display_name': self.display_name,
            'category': self.category,
            'subtask': self.subtask,
            'start': self.start,
            'end': self.end,
            'duration': self.duration,
            'ongoing': self.ongoing,
            'color_scheme': self.color_scheme.to_dict(),
            'extra': dict(self.extra),
        }


FRAME_COLUMNS = [
    'index', 'base_name', 'occurrence', 'display_name', 'category',
    'subtask', 'start', 'end', 'duration', 'ongoing',
]


def intervals_to_frame(intervals: Optional[Sequence[Interval]]) -> pd.DataFrame:
    """Tabulate intervals, one row each, keeping their order."""
    if not intervals:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    return pd.DataFrame(
        [{col: getattr(iv, col) for col in FRAME_COLUMNS} for iv in intervals],
        columns=FRAME_COLUMNS,
    )


class Trace:
    """
    The canonical interval list of one loaded trace.

    Built once by the normalizer and never mutated afterwards; loading a new
    payload produces a new Trace.
    """

    def __init__(
        self,
        intervals: Sequence[Interval],
        time_unit: TimeUnit = TimeUnit.NS,
        source_format: str = "duration",
        diagnostics: Optional[List[str]] = None,
    ):
        self._intervals: Tuple[Interval, ...] = tuple(intervals)
        self._time_unit = TimeUnit.coerce(time_unit)
        self._source_format = source_format
        self._diagnostics: Tuple[str, ...] = tuple(diagnostics or ())
        self._frame: Optional[pd.DataFrame] = None

    @property
    def intervals(self) -> Tuple[Interval, ...]:
        return self._intervals

    @property
    def time_unit(self) -> TimeUnit:
        return self._time_unit

    @property
    def source_format(self) -> str:
        return self._source_format

    @property
    def diagnostics(self) -> Tuple[str, ...]:
        return self._diagnostics

    @property
    def categories(self) -> List[str]:
        """Categories in order of first appearance."""
        return list(dict.fromkeys(iv.category for iv in self._intervals))

    @property
    def min_time(self) -> int:
        if not self._intervals:
            return 0
        return min(iv.start for iv in self._intervals)

    @property
    def max_time(self) -> int:
        if not self._intervals:
            return 0
        return max(iv.end for iv in self._intervals)

    @property
    def span(self) -> int:
        """Wall time from the earliest start to the latest end."""
        return self.max_time - self.min_time

    @property
    def total_duration(self) -> int:
        """Sum of all completed interval durations."""
        return sum(iv.duration for iv in self._intervals if not iv.ongoing)

    def to_frame(self) -> pd.DataFrame:
        """DataFrame view of the intervals (built once, copied on access)."""
        if self._frame is None:
            self._frame = intervals_to_frame(self._intervals)
        return self._frame.copy()

    def __len__(self) -> int:
        return len(self._intervals)

    def __iter__(self):
        return iter(self._intervals)

    def __repr__(self) -> str:
        return (
            f"Trace({len(self._intervals)} intervals, unit={self._time_unit.value}, "
            f"format={self._source_format})"
        )
