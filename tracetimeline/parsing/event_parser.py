"""
Begin/end event reconstruction.

Handles the compact event stream ``{h, t, c, d}`` and task-keyed event
objects with a task table, and provides the pairing algorithm shared with
the tabular parser.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional, Sequence

from ..config import EVENT_ACTION_BEGIN, EVENT_ACTION_END
from ..errors import MalformedRecordError, UnmatchedEventError
from ..logger import setup_logger
from .raw_span import RawSpan, to_canonical

logger = setup_logger(__name__)


@dataclass
class TraceEvent:
    """One begin or end event at an absolute time."""
    time: int
    key: Hashable
    name: Optional[str]
    is_begin: bool
    raw: Any = None
    task: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)


def _span_from(begin: TraceEvent, end_time: int, end_raw: Any, ongoing: bool) -> RawSpan:
    return RawSpan(
        name=begin.name,
        start=begin.time,
        end=end_time,
        ongoing=ongoing,
        original={'task': begin.task, 'begin': begin.raw, 'end': end_raw},
        extra=dict(begin.extra),
    )


def reconstruct_spans(
    events: Sequence[TraceEvent],
    synthetic_span: int,
    diagnostics: List[str],
) -> List[RawSpan]:
    """
    Pair begin and end events into spans.

    Events are processed in time order (ties keep input order). A begin
    while the same task is still open force-closes the open span at the new
    begin time. An end with no open span is dropped. Spans left open are
    ongoing and get ``start + synthetic_span`` as their end.

    Returns:
        Spans in the order their begin events occurred
    """
    slots: List[Optional[RawSpan]] = []
    open_spans: Dict[Hashable, tuple[int, TraceEvent]] = {}

    for event in sorted(events, key=lambda e: e.time):
        if event.is_begin:
            if event.key in open_spans:
                slot, begin = open_spans.pop(event.key)
                slots[slot] = _span_from(begin, event.time, None, ongoing=False)
                message = f"Task '{begin.name}' began again at {event.time} before ending; closed previous span"
                logger.warning(message)
                diagnostics.append(message)
            slots.append(None)
            open_spans[event.key] = (len(slots) - 1, event)
            continue

        if event.key not in open_spans:
            error = UnmatchedEventError(str(event.name), event.time)
            logger.warning(f"Dropping event: {error}")
            diagnostics.append(str(error))
            continue
        slot, begin = open_spans.pop(event.key)
        slots[slot] = _span_from(begin, event.time, event.raw, ongoing=False)

    for slot, begin in open_spans.values():
        message = f"Task '{begin.name}' never ended; using synthetic span of {synthetic_span}"
        logger.info(message)
        diagnostics.append(message)
        slots[slot] = _span_from(begin, begin.time + synthetic_span, None, ongoing=True)

    return [span for span in slots if span is not None]


def _parse_event(raw: Any, index: int, epoch: int, tasks: Sequence[Any], colors: Sequence[Any]) -> TraceEvent:
    if not isinstance(raw, (list, tuple)) or len(raw) < 3:
        raise MalformedRecordError(f"expected [taskIndex, action, offset], got {raw!r}", index)
    task_index, action, offset = raw[0], raw[1], raw[2]

    if isinstance(task_index, bool) or not isinstance(task_index, int):
        raise MalformedRecordError(f"task index {task_index!r} is not an integer", index)
    if not 0 <= task_index < len(tasks):
        raise MalformedRecordError(f"task index {task_index} out of range", index)
    if action not in (EVENT_ACTION_BEGIN, EVENT_ACTION_END) or isinstance(action, bool):
        raise MalformedRecordError(f"unknown action {action!r}", index)

    offset = to_canonical(offset, 'offset', index)
    if offset is None:
        raise MalformedRecordError("missing offset", index)

    name = tasks[task_index]
    color = colors[task_index] if task_index < len(colors) else None
    return TraceEvent(
        time=epoch + offset,
        key=task_index,
        name=None if name is None else str(name),
        is_begin=action == EVENT_ACTION_BEGIN,
        raw=list(raw),
        task={'id': task_index, 'name': name, 'color': color},
        extra={'color': color} if color is not None else {},
    )


def parse_event_stream(payload: dict, synthetic_span: int, diagnostics: List[str]) -> List[RawSpan]:
    """
    Reconstruct spans from a compact event stream.

    Args:
        payload: ``{h: epoch, t: task names, c: colors, d: [[task, action, offset], ...]}``
            where action 0 is begin and 1 is end
        synthetic_span: End offset for spans that never end
        diagnostics: Collects messages for skipped or repaired events

    Returns:
        Spans in begin order
    """
    epoch = to_canonical(payload.get('h', 0), 'h') or 0
    tasks = payload.get('t') or []
    colors = payload.get('c') or []
    raw_events = payload.get('d') or []

    events = []
    for index, raw in enumerate(raw_events):
        try:
            events.append(_parse_event(raw, index, epoch, tasks, colors))
        except MalformedRecordError as e:
            logger.warning(f"Skipping malformed event: {e}")
            diagnostics.append(str(e))

    logger.debug(f"Event stream: {len(events)} of {len(raw_events)} events usable, {len(tasks)} tasks")
    return reconstruct_spans(events, synthetic_span, diagnostics)


def _task_table(tasks: Any) -> Dict[Any, Dict[str, Any]]:
    """Index a ``[{id, name, color}, ...]`` task table by id."""
    table = {}
    for position, task in enumerate(tasks or []):
        if not isinstance(task, dict):
            raise MalformedRecordError(f"task entry {position} is not an object: {task!r}")
        table[task.get('id', position)] = task
    return table


def _parse_task_event(raw: Any, index: int, epoch: int, table: Dict[Any, Dict[str, Any]]) -> TraceEvent:
    if not isinstance(raw, dict):
        raise MalformedRecordError(f"expected an event object, got {raw!r}", index)
    task_id = raw.get('taskId')
    if task_id is None or isinstance(task_id, bool):
        raise MalformedRecordError(f"invalid taskId {task_id!r}", index)

    if table:
        if task_id not in table:
            raise MalformedRecordError(f"unknown taskId {task_id!r}", index)
        task = table[task_id]
    else:
        task = {'id': task_id, 'name': raw.get('name')}

    action = raw.get('action')
    if isinstance(action, str):
        action = action.strip().lower()
    if action in ('begin', EVENT_ACTION_BEGIN) and not isinstance(action, bool):
        is_begin = True
    elif action in ('end', EVENT_ACTION_END) and not isinstance(action, bool):
        is_begin = False
    else:
        raise MalformedRecordError(f"unknown action {raw.get('action')!r}", index)

    offset = to_canonical(raw.get('offsetFromEpoch'), 'offsetFromEpoch', index)
    if offset is None:
        raise MalformedRecordError("missing offsetFromEpoch", index)

    name = task.get('name')
    color = task.get('color')
    return TraceEvent(
        time=epoch + offset,
        key=task_id,
        name=None if name is None else str(name),
        is_begin=is_begin,
        raw=dict(raw),
        task=dict(task),
        extra={'color': color} if color is not None else {},
    )


def parse_task_events(payload: Any, synthetic_span: int, diagnostics: List[str]) -> List[RawSpan]:
    """
    Reconstruct spans from task-keyed event objects.

    Args:
        payload: ``{epoch, tasks: [{id, name, color}], events: [...]}`` or a
            bare list of events. Each event is
            ``{taskId, action: 'begin'|'end', offsetFromEpoch}``; without a
            task table the event's own ``name`` is used.
        synthetic_span: End offset for spans that never end
        diagnostics: Collects messages for skipped or repaired events

    Returns:
        Spans in begin order
    """
    if isinstance(payload, dict):
        epoch = to_canonical(payload.get('epoch', 0), 'epoch') or 0
        table = _task_table(payload.get('tasks'))
        raw_events = payload.get('events') or []
    else:
        epoch, table, raw_events = 0, {}, payload

    events = []
    for index, raw in enumerate(raw_events):
        try:
            events.append(_parse_task_event(raw, index, epoch, table))
        except MalformedRecordError as e:
            logger.warning(f"Skipping malformed event: {e}")
            diagnostics.append(str(e))

    logger.debug(f"Task events: {len(events)} of {len(raw_events)} events usable, {len(table)} tasks")
    return reconstruct_spans(events, synthetic_span, diagnostics)
