"""
Time unit definitions.
"""

from enum import Enum

from ..config import UNIT_NANOSECONDS, UNIT_LABELS


class TimeUnit(str, Enum):
    """Time units understood by the engine, finest first."""
    NS = "ns"
    US = "us"
    MS = "ms"
    S = "s"
    MIN = "min"

    @property
    def nanoseconds(self) -> int:
        """Size of one unit in nanoseconds."""
        return UNIT_NANOSECONDS[self.value]

    @property
    def label(self) -> str:
        """Display suffix, e.g. 'µs'."""
        return UNIT_LABELS[self.value]

    @classmethod
    def coerce(cls, value) -> 'TimeUnit':
        """Accept a TimeUnit, its value, or its display label."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for unit in cls:
            if text in (unit.value, unit.label):
                return unit
        raise ValueError(f"Unknown time unit: {value!r}")
