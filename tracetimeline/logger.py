"""
Logging configuration for the trace timeline engine.
Provides centralized logging setup.
"""

import logging
import sys
from pathlib import Path
from .config import LOG_LEVEL, LOG_FORMAT

# Log file path
LOG_DIR = Path(__file__).parent.parent / "logs"
LOG_DIR.mkdir(exist_ok=True)
LOG_FILE = LOG_DIR / "tracetimeline.log"


def setup_logger(name: str) -> logging.Logger:
    """
    Set up a logger with both file and console handlers.

    Args:
        name: Name of the logger (typically __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, LOG_LEVEL))

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    # File handler - detailed logs
    file_handler = logging.FileHandler(LOG_FILE)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)

    # Console handler - INFO and above
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    return logger


def log_trace_stats(trace, logger: logging.Logger, name: str = "Trace"):
    """Log statistics about a normalized trace."""
    if not trace.intervals:
        logger.warning(f"{name}: No intervals")
        return

    logger.info(
        f"{name}: {len(trace.intervals)} intervals, "
        f"{len(trace.categories)} categories, "
        f"time range: {trace.min_time} to {trace.max_time} {trace.time_unit.value}"
    )
    if trace.diagnostics:
        logger.info(f"{name}: {len(trace.diagnostics)} record(s) skipped or repaired")
