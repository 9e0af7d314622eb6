"""
Configuration constants for the trace timeline engine.
Centralized configuration for units, categories, colors, and behavior.
"""

from typing import Dict, List, Tuple

# Canonical time unit when the source does not say otherwise
DEFAULT_TIME_UNIT = "ns"

# Sizes of the supported units, in nanoseconds
UNIT_NANOSECONDS: Dict[str, int] = {
    'ns': 1,
    'us': 1_000,
    'ms': 1_000_000,
    's': 1_000_000_000,
    'min': 60_000_000_000,
}

UNIT_LABELS: Dict[str, str] = {
    'ns': 'ns',
    'us': 'µs',
    'ms': 'ms',
    's': 's',
    'min': 'min',
}

# Adaptive formatter: candidate units from largest to smallest
ADAPTIVE_UNITS: List[str] = ['min', 's', 'ms', 'us', 'ns']
ADAPTIVE_DECIMALS = 3

# Fixed-unit formatter: (span upper bound in target units, decimals)
FIXED_PRECISION_STEPS: List[Tuple[float, int]] = [
    (1e-6, 8),
    (1e-5, 7),
    (1e-4, 6),
    (1e-3, 5),
    (1e-2, 4),
    (1e-1, 3),
]
FIXED_MIN_DECIMALS = 2
FIXED_MAX_DECIMALS = 8

# Axis unit used by the chart adapter
AXIS_UNIT = "min"

# Ongoing intervals (begin without end) get this span, in canonical units
DEFAULT_SYNTHETIC_SPAN = 100

# Naming convention: "<CATEGORY>_<subtask>"
CATEGORY_SEPARATOR = "_"
UNKNOWN_CATEGORY = "UNKNOWN"

# Task Category Colors (primary, secondary, border)
CATEGORY_COLORS: Dict[str, Tuple[str, str, str]] = {
    'MAIN': ('#4CAF50', '#81C784', '#2E7D32'),
    'ROM': ('#2196F3', '#64B5F6', '#1565C0'),
    'INPUT': ('#FF9800', '#FFB74D', '#E65100'),
    'MEM': ('#9C27B0', '#BA68C8', '#6A1B9A'),
    'BINARY': ('#00BCD4', '#4DD0E1', '#00838F'),
    'ARITH': ('#E91E63', '#F06292', '#AD1457'),
    'HASHFN': ('#8BC34A', '#AED581', '#558B2F'),
}
DEFAULT_COLORS: Tuple[str, str, str] = ('#9E9E9E', '#BDBDBD', '#616161')

# Chart theme
CHART_BACKGROUND = '#16302b'
CHART_ACCENT_TEXT = '#A3E635'
CHART_GRID = '#1E3D38'
TIMELINE_ROW_HEIGHT = 22
TIMELINE_MIN_HEIGHT = 300
DEFAULT_CHART_HEIGHT = 350

# Tabular input
CSV_REQUIRED_COLUMNS: List[str] = ['timestamp', 'task_name', 'action']
CSV_OPTIONAL_COLUMNS: List[str] = ['core_id', 'file_source']
CSV_BEGIN_ACTIONS = {'begin', '0'}
CSV_END_ACTIONS = {'end', '1'}
CSV_DELIMITERS: List[str] = [',', ';', '\t', '|']

# Compact event stream
EVENT_ACTION_BEGIN = 0
EVENT_ACTION_END = 1

# Payload fetch
FETCH_TIMEOUT_SECONDS = 30.0

# Logging
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
