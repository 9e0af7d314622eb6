"""
Time formatting for trace values.

Two formatters serve two consumers:
- format_duration picks the largest readable unit (tooltips, legends)
- format_fixed renders in a caller-chosen unit with precision scaled to
  the visible range (axis ticks)

All values arrive in a canonical unit (ns unless stated otherwise).
Decimal arithmetic keeps integer nanosecond inputs exact.
"""

import re
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import Optional, Union

from ..config import (
    ADAPTIVE_UNITS,
    ADAPTIVE_DECIMALS,
    FIXED_PRECISION_STEPS,
    FIXED_MIN_DECIMALS,
    FIXED_MAX_DECIMALS,
)
from ..models.units import TimeUnit

Number = Union[int, float, Decimal]

_DURATION_PATTERN = re.compile(r'^\s*(-?\d+(?:\.\d+)?)\s*([a-zµ]+)\s*$', re.IGNORECASE)


def _as_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() avoids carrying binary float noise into the digits
    return Decimal(str(value))


def _scale(value: Number, from_unit: TimeUnit, to_unit: TimeUnit) -> Decimal:
    return _as_decimal(value) * from_unit.nanoseconds / to_unit.nanoseconds


def _quantize(amount: Decimal, decimals: int, rounding: str) -> str:
    quantum = Decimal(1).scaleb(-decimals)
    return f"{amount.quantize(quantum, rounding=rounding):f}"


def convert(value: Number, from_unit=TimeUnit.NS, to_unit=TimeUnit.MIN) -> float:
    """Convert a value between units."""
    return float(_scale(value, TimeUnit.coerce(from_unit), TimeUnit.coerce(to_unit)))


def select_unit(value: Number, unit=TimeUnit.NS) -> TimeUnit:
    """
    Pick the largest unit in which the magnitude of value is at least 1.

    Args:
        value: Duration in the given unit
        unit: Unit of value

    Returns:
        The chosen unit (nanoseconds for zero or sub-nanosecond values)
    """
    unit = TimeUnit.coerce(unit)
    magnitude = abs(_as_decimal(value)) * unit.nanoseconds
    for name in ADAPTIVE_UNITS:
        candidate = TimeUnit(name)
        if magnitude >= candidate.nanoseconds:
            return candidate
    return TimeUnit.NS


def format_duration(value: Number, unit=TimeUnit.NS) -> str:
    """
    Format a duration in the largest readable unit.

    Digits beyond the third decimal are truncated rather than rounded so a
    value just under a unit boundary never displays as the next unit.

    Examples:
        format_duration(1_500_000) -> '1.500 ms'
        format_duration(59_999_999_999) -> '59.999 s'
        format_duration(60_000_000_000) -> '1.000 min'
        format_duration(42) -> '42 ns'
    """
    unit = TimeUnit.coerce(unit)
    target = select_unit(value, unit)
    amount = _scale(value, unit, target)
    decimals = 0 if target is TimeUnit.NS else ADAPTIVE_DECIMALS
    return f"{_quantize(amount, decimals, ROUND_DOWN)} {target.label}"


def fixed_precision(span: Optional[Number], unit=TimeUnit.NS, target=TimeUnit.MIN) -> int:
    """
    Decimal places for values in the target unit given the visible range.

    A range under 1e-6 target units gets 8 decimals; each wider decade drops
    one decimal, down to 2.
    """
    if span is None:
        return FIXED_MIN_DECIMALS
    width = abs(_scale(span, TimeUnit.coerce(unit), TimeUnit.coerce(target)))
    if width == 0:
        return FIXED_MAX_DECIMALS
    for bound, decimals in FIXED_PRECISION_STEPS:
        if width < _as_decimal(bound):
            return decimals
    return FIXED_MIN_DECIMALS


def format_fixed(
    value: Number,
    unit=TimeUnit.NS,
    target=TimeUnit.MIN,
    span: Optional[Number] = None,
    with_unit: bool = False,
) -> str:
    """
    Format a value in a fixed target unit for axis alignment.

    Args:
        value: Timestamp or duration in the canonical unit
        unit: Canonical unit of value and span
        target: Unit to render in
        span: Width of the full visible range (drives precision)
        with_unit: Append the unit label

    Returns:
        Formatted string, e.g. '0.00000250' or '1.25 min'
    """
    unit = TimeUnit.coerce(unit)
    target = TimeUnit.coerce(target)
    decimals = fixed_precision(span, unit, target)
    text = _quantize(_scale(value, unit, target), decimals, ROUND_HALF_UP)
    return f"{text} {target.label}" if with_unit else text


def parse_duration(text: str, unit=TimeUnit.NS) -> int:
    """
    Parse a formatted duration back into an integer in the given unit.

    Raises:
        ValueError: If text is not '<number> <unit>'
    """
    match = _DURATION_PATTERN.match(text)
    if not match:
        raise ValueError(f"Cannot parse duration: {text!r}")
    amount, label = match.groups()
    source = TimeUnit.coerce(label)
    value = _scale(Decimal(amount), source, TimeUnit.coerce(unit))
    return int(value.to_integral_value(rounding=ROUND_HALF_UP))
