"""
Legend and search index over the displayed intervals.
Backs the auxiliary list view; independent of the chart's filter config.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..models.interval import ColorScheme, Interval
from .categorization import get_color_scheme


@dataclass
class LegendEntry:
    """One category shown in the legend."""
    category: str
    color_scheme: ColorScheme
    count: int
    total_duration: int


class LegendIndex:
    """
    Case-insensitive lookup over a fixed interval set.

    Build a new index whenever the displayed set changes; an index never
    refers to anything but the intervals it was built from.
    """

    def __init__(self, intervals: Optional[Sequence[Interval]] = None):
        self._intervals: List[Interval] = list(intervals or [])
        self._keys = [
            (iv.display_name.casefold(), iv.category.casefold(), iv.subtask.casefold())
            for iv in self._intervals
        ]

    def __len__(self) -> int:
        return len(self._intervals)

    def search(self, query: Optional[str] = None, category: Optional[str] = None) -> List[Interval]:
        """
        Find intervals by free text and/or category.

        Args:
            query: Substring matched against display name, category and subtask
            category: Exact category pick, AND-ed with the query

        Returns:
            Matching intervals in display order
        """
        needle = (query or "").casefold()
        if not needle.strip():
            needle = ""
        results = []
        for interval, keys in zip(self._intervals, self._keys):
            if category and interval.category != category:
                continue
            if needle and not any(needle in key for key in keys):
                continue
            results.append(interval)
        return results

    def legend_entries(self) -> List[LegendEntry]:
        """Categories present in the set, in order of first appearance."""
        entries = {}
        for interval in self._intervals:
            entry = entries.get(interval.category)
            if entry is None:
                entry = LegendEntry(
                    category=interval.category,
                    color_scheme=get_color_scheme(interval.category),
                    count=0,
                    total_duration=0,
                )
                entries[interval.category] = entry
            entry.count += 1
            if not interval.ongoing:
                entry.total_duration += interval.duration
        return list(entries.values())
