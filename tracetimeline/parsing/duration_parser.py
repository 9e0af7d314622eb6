"""
Duration-form records: [{name, start?, duration, end?, ...}].
"""

from typing import Any, List, Sequence

from ..errors import MalformedRecordError
from ..logger import setup_logger
from .raw_span import RawSpan, to_canonical

logger = setup_logger(__name__)

CORE_FIELDS = ('name', 'start', 'duration', 'end')


def _parse_record(record: Any, index: int, cursor: int) -> tuple[RawSpan, bool]:
    if not isinstance(record, dict):
        raise MalformedRecordError(f"expected an object, got {type(record).__name__}", index)

    start = to_canonical(record.get('start'), 'start', index)
    duration = to_canonical(record.get('duration'), 'duration', index)
    end = to_canonical(record.get('end'), 'end', index)

    if duration is None and end is None:
        raise MalformedRecordError("missing 'duration' and 'end'", index)
    if duration is not None and duration < 0:
        raise MalformedRecordError(f"negative duration {duration}", index)

    explicit_start = start is not None
    if not explicit_start:
        start = cursor
    if end is None:
        end = start + duration
    if end < start:
        raise MalformedRecordError(f"end {end} is before start {start}", index)

    name = record.get('name')
    span = RawSpan(
        name=None if name is None else str(name),
        start=start,
        end=end,
        original=record,
        extra={k: v for k, v in record.items() if k not in CORE_FIELDS},
    )
    return span, explicit_start


def parse_duration_records(records: Sequence[Any], diagnostics: List[str]) -> List[RawSpan]:
    """
    Resolve duration-form records into spans, in input order.

    Records without a start are laid out back to back: they begin where the
    previous start-less record ended. Malformed records are skipped and
    reported in diagnostics.

    Args:
        records: Raw records
        diagnostics: Collects one message per skipped record

    Returns:
        List of spans, one per valid record
    """
    spans = []
    cursor = 0
    for index, record in enumerate(records):
        try:
            span, explicit_start = _parse_record(record, index, cursor)
        except MalformedRecordError as e:
            logger.warning(f"Skipping malformed record: {e}")
            diagnostics.append(str(e))
            continue
        if not explicit_start:
            cursor = span.end
        spans.append(span)

    logger.debug(f"Duration records: {len(spans)} of {len(records)} usable")
    return spans
