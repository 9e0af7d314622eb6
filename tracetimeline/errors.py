"""
Error taxonomy for trace loading, normalization and filtering.
"""

from typing import Optional


class TraceError(Exception):
    """Base class for all trace engine errors."""


class MalformedRecordError(TraceError):
    """A raw record is missing required fields or carries unusable values."""

    def __init__(self, message: str, record_index: Optional[int] = None):
        self.record_index = record_index
        if record_index is not None:
            message = f"Record {record_index}: {message}"
        super().__init__(message)


class UnmatchedEventError(TraceError):
    """An 'end' event arrived for a task with no open interval."""

    def __init__(self, task: str, timestamp: int):
        self.task = task
        self.timestamp = timestamp
        super().__init__(f"End event for '{task}' at {timestamp} has no matching begin")


class EmptyTraceError(TraceError):
    """Normalization produced no intervals."""

    def __init__(self, message: str = "No valid data in trace"):
        super().__init__(message)


class InvalidFilterConfigError(TraceError):
    """A proposed filter configuration was rejected."""


class LoadFailure(TraceError):
    """Fetching or parsing a trace payload failed."""


def user_message(error: Exception) -> str:
    """Turn an error into the single string shown to the user."""
    if isinstance(error, EmptyTraceError):
        return "No valid data: the trace contains no usable intervals."
    if isinstance(error, InvalidFilterConfigError):
        return f"Invalid filter: {error}"
    if isinstance(error, LoadFailure):
        return f"Could not load trace: {error}"
    if isinstance(error, TraceError):
        return str(error)
    return f"Unexpected error: {error}"
