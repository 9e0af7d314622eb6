"""
Tabular trace parsing.
Handles delimited text with timestamp, task_name, action columns.
"""

import io
from pathlib import Path
from typing import Any, List, Optional, Union

import pandas as pd

from ..config import (
    CSV_REQUIRED_COLUMNS,
    CSV_OPTIONAL_COLUMNS,
    CSV_BEGIN_ACTIONS,
    CSV_END_ACTIONS,
    CSV_DELIMITERS,
)
from ..errors import LoadFailure, MalformedRecordError
from ..logger import setup_logger
from .event_parser import TraceEvent, reconstruct_spans
from .raw_span import RawSpan, to_canonical

logger = setup_logger(__name__)


def sniff_delimiter(text: str) -> str:
    """Pick the delimiter that occurs most often in the header line."""
    header = text.lstrip().splitlines()[0] if text.strip() else ""
    return max(CSV_DELIMITERS, key=header.count)


def read_table(source: Union[str, Path, pd.DataFrame]) -> pd.DataFrame:
    """
    Read delimited trace text (or a file path) into a DataFrame.

    Comma, semicolon, tab and pipe delimiters are recognized.

    Raises:
        LoadFailure: If the text cannot be parsed as a table
    """
    if isinstance(source, pd.DataFrame):
        return source.copy()

    try:
        if isinstance(source, Path):
            logger.info(f"Parsing trace table: {source.name}")
            source = source.read_text(encoding='utf-8')
        df = pd.read_csv(
            io.StringIO(source), sep=sniff_delimiter(source), skipinitialspace=True, dtype=str,
        )
        logger.debug(f"Table loaded: {len(df)} rows, {len(df.columns)} columns")
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, OSError) as e:
        logger.error(f"Failed to read table: {e}")
        raise LoadFailure(f"Invalid tabular trace: {e}") from e
    return df


def _timestamp(value: Any) -> Optional[int]:
    try:
        return to_canonical(value, 'timestamp')
    except MalformedRecordError:
        return None


def _core_id(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return value.strip()
    return value


def validate_table(df: pd.DataFrame) -> tuple[pd.DataFrame, list[str]]:
    """
    Validate and clean a trace table.

    Args:
        df: Raw table

    Returns:
        Tuple of (cleaned_df, warnings)

    Raises:
        LoadFailure: If required columns are missing
    """
    warnings = []

    df = df.rename(columns=lambda c: str(c).strip().lower())
    missing = [col for col in CSV_REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise LoadFailure(f"Table missing required columns: {missing}")

    df = df.copy()
    df['row'] = range(len(df))
    # Python ints in an object column keep nanosecond epochs exact
    df['timestamp'] = pd.Series(
        [_timestamp(value) for value in df['timestamp']], index=df.index, dtype=object
    )
    if 'core_id' in df.columns:
        df['core_id'] = pd.Series(
            [_core_id(value) for value in df['core_id']], index=df.index, dtype=object
        )
    df['action'] = df['action'].astype(str).str.strip().str.lower()
    df['task_name'] = df['task_name'].astype('string').str.strip()

    bad_time = df['timestamp'].isna()
    if bad_time.any():
        for row in df.loc[bad_time, 'row']:
            warnings.append(f"Record {row}: missing or non-numeric timestamp")
        df = df[~bad_time]

    bad_name = df['task_name'].fillna('').eq('').astype(bool)
    if bad_name.any():
        for row in df.loc[bad_name, 'row']:
            warnings.append(f"Record {row}: missing task_name")
        df = df[~bad_name]

    known_actions = CSV_BEGIN_ACTIONS | CSV_END_ACTIONS
    bad_action = ~df['action'].isin(known_actions)
    if bad_action.any():
        for row, action in df.loc[bad_action, ['row', 'action']].itertuples(index=False):
            warnings.append(f"Record {row}: unknown action '{action}'")
        df = df[~bad_action]

    return df, warnings


def _optional_fields(row: dict) -> dict:
    extra = {}
    for col in CSV_OPTIONAL_COLUMNS:
        value = row.get(col)
        if value is not None and not pd.isna(value):
            extra[col] = value
    return extra


def parse_table(
    source: Union[str, Path, pd.DataFrame],
    synthetic_span: int,
    diagnostics: List[str],
) -> List[RawSpan]:
    """
    Reconstruct spans from a begin/end event table.

    A task is identified by its name together with its core id, so the
    same task running on two cores yields two independent spans.

    Args:
        source: Delimited text, a file path, or an already loaded DataFrame
        synthetic_span: End offset for spans that never end
        diagnostics: Collects messages for skipped or repaired rows

    Returns:
        Spans in begin order
    """
    df, warnings = validate_table(read_table(source))
    for warning in warnings:
        logger.warning(f"Skipping malformed row: {warning}")
    diagnostics.extend(warnings)

    events = []
    for row in df.to_dict('records'):
        extra = _optional_fields(row)
        name = str(row['task_name'])
        events.append(TraceEvent(
            time=row['timestamp'],
            key=(name, extra.get('core_id')),
            name=name,
            is_begin=row['action'] in CSV_BEGIN_ACTIONS,
            raw={k: v for k, v in row.items() if k != 'row'},
            task={'name': name, **extra},
            extra=extra,
        ))

    logger.debug(f"Table: {len(events)} usable events")
    return reconstruct_spans(events, synthetic_span, diagnostics)
