"""
Record normalization.
Turns any accepted payload shape into the canonical interval list.
"""

import json
from collections import Counter
from pathlib import Path
from typing import Any, List, Sequence

import pandas as pd

from ..config import DEFAULT_SYNTHETIC_SPAN, UNKNOWN_CATEGORY
from ..errors import EmptyTraceError, LoadFailure, MalformedRecordError
from ..logger import setup_logger, log_trace_stats
from ..models.interval import Interval, Trace
from ..models.units import TimeUnit
from ..analytics.categorization import category_from_name, get_color_scheme
from ..utils.time_format import format_duration
from .csv_parser import parse_table
from .duration_parser import parse_duration_records
from .event_parser import parse_event_stream, parse_task_events
from .raw_span import RawSpan

logger = setup_logger(__name__)


def detect_format(payload: Any) -> str:
    """
    Identify the payload shape.

    Returns:
        'duration', 'events', 'task_events' or 'table'

    Raises:
        LoadFailure: If the shape is not recognized
    """
    if isinstance(payload, (str, pd.DataFrame, Path)):
        return 'table'
    if isinstance(payload, dict) and 'd' in payload:
        return 'events'
    if isinstance(payload, dict) and 'events' in payload:
        return 'task_events'
    if isinstance(payload, (list, tuple)):
        if payload and isinstance(payload[0], dict) and 'taskId' in payload[0]:
            return 'task_events'
        return 'duration'
    raise LoadFailure(f"Unrecognized trace payload of type {type(payload).__name__}")


def decode_payload(text: str) -> Any:
    """
    Decode payload text: JSON for arrays and objects, tabular otherwise.

    Raises:
        LoadFailure: If JSON-looking text does not parse
    """
    stripped = text.lstrip()
    if stripped[:1] in ('[', '{'):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError as e:
            raise LoadFailure(f"Invalid JSON payload: {e}") from e
    return text


def display_name(base_name: str, occurrence: int, duration: int, unit: TimeUnit) -> str:
    """Presentation label, e.g. 'MEM_load #2 (1.500 ms)'."""
    return f"{base_name} #{occurrence} ({format_duration(duration, unit)})"


def build_intervals(spans: Sequence[RawSpan], time_unit=TimeUnit.NS) -> List[Interval]:
    """
    Name, number and color resolved spans.

    Occurrence numbers count repeats of a base name in span order, so the
    same trace always numbers the same way.
    """
    time_unit = TimeUnit.coerce(time_unit)
    seen: Counter = Counter()
    intervals = []
    for index, span in enumerate(spans):
        base_name = span.name if span.name else UNKNOWN_CATEGORY
        seen[base_name] += 1
        occurrence = seen[base_name]
        category, subtask = category_from_name(span.name)
        duration = span.end - span.start
        intervals.append(Interval(
            index=index,
            base_name=base_name,
            occurrence=occurrence,
            display_name=display_name(base_name, occurrence, duration, time_unit),
            category=category,
            subtask=subtask,
            start=span.start,
            end=span.end,
            duration=duration,
            color_scheme=get_color_scheme(category),
            ongoing=span.ongoing,
            original=span.original,
            extra=span.extra,
        ))
    return intervals


def normalize(
    payload: Any,
    time_unit=TimeUnit.NS,
    synthetic_span: int = DEFAULT_SYNTHETIC_SPAN,
) -> Trace:
    """
    Normalize a raw payload into a Trace.

    Args:
        payload: Duration records (list of dicts), an event stream dict
            ``{h, t, c, d}``, task-keyed events ``{epoch, tasks, events}`` (or
            a bare list of ``{taskId, action, offsetFromEpoch}``), a
            DataFrame / Path of tabular events, or the text of any of these
        time_unit: Canonical unit of every time value in the payload
        synthetic_span: Span given to tasks that begin but never end

    Returns:
        Trace with intervals in source order

    Raises:
        LoadFailure: If the payload shape is not recognized or does not parse
        EmptyTraceError: If no valid interval remains
    """
    time_unit = TimeUnit.coerce(time_unit)
    if isinstance(synthetic_span, bool) or not isinstance(synthetic_span, int) or synthetic_span < 0:
        raise ValueError(f"synthetic_span must be a non-negative integer, got {synthetic_span!r}")

    if isinstance(payload, bytes):
        payload = payload.decode('utf-8')
    if isinstance(payload, str):
        if not payload.strip():
            raise EmptyTraceError()
        payload = decode_payload(payload)
    if payload is None:
        raise EmptyTraceError()
    source_format = detect_format(payload)

    diagnostics: List[str] = []
    try:
        if source_format == 'duration':
            spans = parse_duration_records(payload, diagnostics)
        elif source_format == 'events':
            spans = parse_event_stream(payload, synthetic_span, diagnostics)
        elif source_format == 'task_events':
            spans = parse_task_events(payload, synthetic_span, diagnostics)
        else:
            spans = parse_table(payload, synthetic_span, diagnostics)
    except MalformedRecordError as e:
        # Only payload-level fields (e.g. a bad epoch) escape the parsers
        raise LoadFailure(f"Malformed payload: {e}") from e

    intervals = build_intervals(spans, time_unit)
    if not intervals:
        logger.warning(f"Normalization produced no intervals ({len(diagnostics)} diagnostics)")
        raise EmptyTraceError()

    trace = Trace(intervals, time_unit=time_unit, source_format=source_format, diagnostics=diagnostics)
    log_trace_stats(trace, logger, "Normalized trace")
    return trace
