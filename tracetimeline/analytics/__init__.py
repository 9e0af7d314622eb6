"""
Analytics subpackage: categorization and legend lookup.
"""

from .categorization import (
    category_from_name,
    get_color_scheme,
    is_known_category,
    build_color_map,
)

from .legend import (
    LegendEntry,
    LegendIndex,
)

__all__ = [
    # Categorization
    "category_from_name",
    "get_color_scheme",
    "is_known_category",
    "build_color_map",
    # Legend
    "LegendEntry",
    "LegendIndex",
]
