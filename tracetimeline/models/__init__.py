"""
Models package - Data models and type definitions.
"""

from .units import TimeUnit
from .interval import ColorScheme, Interval, Trace, intervals_to_frame
from .filter_config import CategoryMode, DenominatorMode, FilterConfig, TimeMode

__all__ = [
    'TimeUnit',
    'ColorScheme',
    'Interval',
    'Trace',
    'intervals_to_frame',
    'CategoryMode',
    'DenominatorMode',
    'FilterConfig',
    'TimeMode',
]
