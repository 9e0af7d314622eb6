"""
Intermediate span produced by the format-specific parsers.
"""

import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..errors import MalformedRecordError


@dataclass
class RawSpan:
    """A resolved start/end pair before naming and categorization."""
    name: Optional[str]
    start: int
    end: int
    ongoing: bool = False
    original: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)


def to_canonical(value: Any, field_name: str, record_index: Optional[int] = None) -> Optional[int]:
    """
    Coerce a raw time value to an integer in the canonical unit.

    None stays None. Integers and integer strings are kept exact; floats
    are rounded to the nearest unit.

    Raises:
        MalformedRecordError: If the value is not a finite number
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise MalformedRecordError(f"'{field_name}' is not a number: {value!r}", record_index)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
    if isinstance(value, numbers.Integral):
        return int(value)
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise MalformedRecordError(
            f"'{field_name}' is not a number: {value!r}", record_index
        ) from e
    if not math.isfinite(number):
        raise MalformedRecordError(f"'{field_name}' is not finite: {value!r}", record_index)
    return int(round(number))
