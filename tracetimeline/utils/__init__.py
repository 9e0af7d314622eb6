"""Utility functions for the trace timeline engine."""

from .time_format import (
    convert,
    select_unit,
    format_duration,
    fixed_precision,
    format_fixed,
    parse_duration,
)

__all__ = [
    'convert',
    'select_unit',
    'format_duration',
    'fixed_precision',
    'format_fixed',
    'parse_duration',
]
