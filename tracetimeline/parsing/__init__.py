"""Parsing package for trace ingestion and interval reconstruction."""

from .raw_span import RawSpan
from .duration_parser import parse_duration_records
from .event_parser import TraceEvent, parse_event_stream, parse_task_events, reconstruct_spans
from .csv_parser import parse_table, read_table, validate_table
from .normalizer import build_intervals, decode_payload, detect_format, normalize
