"""
Task categorization.
Derives a task's category from its name and maps categories to colors.
"""

from functools import lru_cache
from typing import Dict, Iterable, Optional, Tuple

from ..config import (
    CATEGORY_COLORS,
    CATEGORY_SEPARATOR,
    DEFAULT_COLORS,
    UNKNOWN_CATEGORY,
)
from ..models.interval import ColorScheme


def category_from_name(name: Optional[str]) -> Tuple[str, str]:
    """Split a task name into (category, subtask).

    The category is the text before the first separator. Names without a
    separator are their own category with an empty subtask.

    Examples:
        'MEM_load_word' -> ('MEM', 'load_word')
        'MAIN' -> ('MAIN', '')
        None -> ('UNKNOWN', '')
    """
    if name is None:
        return UNKNOWN_CATEGORY, ""
    name = str(name).strip()
    if not name:
        return UNKNOWN_CATEGORY, ""
    category, _, subtask = name.partition(CATEGORY_SEPARATOR)
    return (category or UNKNOWN_CATEGORY), subtask


@lru_cache(maxsize=256)
def get_color_scheme(category: Optional[str]) -> ColorScheme:
    """Get the color scheme for a category, with fallback to grey.

    Never raises: unknown, empty or non-string categories get DEFAULT.
    """
    key = str(category).strip().upper() if category is not None else ""
    primary, secondary, border = CATEGORY_COLORS.get(key, DEFAULT_COLORS)
    return ColorScheme(primary=primary, secondary=secondary, border=border)


def is_known_category(category: Optional[str]) -> bool:
    return category is not None and str(category).strip().upper() in CATEGORY_COLORS


def build_color_map(categories: Iterable[str]) -> Dict[str, ColorScheme]:
    """Build a color map for categories."""
    return {cat: get_color_scheme(cat) for cat in categories}
