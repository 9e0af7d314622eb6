"""
Visualization package - chart adapter and renderer.
"""

from .charts import create_category_pie, create_timeline_figure, to_chart_records, visible_span
from .renderer import ChartRenderer

__all__ = [
    'create_category_pie',
    'create_timeline_figure',
    'to_chart_records',
    'visible_span',
    'ChartRenderer',
]
