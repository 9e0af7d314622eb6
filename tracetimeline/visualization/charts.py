"""
Chart adapter for Plotly.
Turns intervals into chart records and builds the timeline and pie figures.
"""

from typing import List, Optional, Sequence

import plotly.graph_objects as go

from ..config import (
    AXIS_UNIT,
    CHART_ACCENT_TEXT,
    CHART_BACKGROUND,
    CHART_GRID,
    DEFAULT_CHART_HEIGHT,
    TIMELINE_MIN_HEIGHT,
    TIMELINE_ROW_HEIGHT,
)
from ..models.interval import Interval
from ..models.units import TimeUnit
from ..analytics.categorization import get_color_scheme
from ..utils.time_format import convert, fixed_precision, format_duration, format_fixed


def visible_span(intervals: Sequence[Interval]) -> int:
    """Width of the range the intervals cover."""
    if not intervals:
        return 0
    return max(iv.end for iv in intervals) - min(iv.start for iv in intervals)


def to_chart_records(
    intervals: Optional[Sequence[Interval]],
    time_unit=TimeUnit.NS,
    axis_unit=AXIS_UNIT,
) -> List[dict]:
    """
    Convert intervals into records for the timeline chart.

    Start and end are formatted in the axis unit with precision scaled to
    the visible range; the duration uses the adaptive formatter.

    Args:
        intervals: Displayed intervals
        time_unit: Canonical unit of the intervals
        axis_unit: Unit of the time axis

    Returns:
        One record per interval, in display order
    """
    if not intervals:
        return []

    span = visible_span(intervals)
    records = []
    for interval in intervals:
        scheme = interval.color_scheme
        records.append({
            'x': [interval.start, interval.end],
            'y': interval.display_name,
            'backgroundColor': scheme.primary,
            'hoverBackgroundColor': scheme.secondary,
            'borderColor': scheme.border,
            'custom': {
                'duration': interval.duration,
                'category': interval.category,
                'subtask': interval.subtask,
                'ongoing': interval.ongoing,
                'formattedStart': format_fixed(interval.start, time_unit, axis_unit, span),
                'formattedEnd': format_fixed(interval.end, time_unit, axis_unit, span),
                'formattedDuration': format_duration(interval.duration, time_unit),
                'extra': dict(interval.extra),
            },
        })
    return records


def _empty_figure(message: str) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(
        text=message,
        xref="paper", yref="paper",
        x=0.5, y=0.5, showarrow=False,
        font=dict(size=16, color=CHART_ACCENT_TEXT)
    )
    fig.update_layout(paper_bgcolor=CHART_BACKGROUND, plot_bgcolor=CHART_BACKGROUND)
    return fig


def create_timeline_figure(
    records: Sequence[dict],
    title: str = 'Trace Timeline',
    time_unit=TimeUnit.NS,
    axis_unit=AXIS_UNIT,
) -> go.Figure:
    """
    Create a Gantt-style timeline from chart records.

    Bars are placed in the axis unit, with tick precision scaled to the
    visible range the same way as the hover labels.

    Args:
        records: Output of to_chart_records
        title: Figure title
        time_unit: Canonical unit of the records
        axis_unit: Unit of the time axis

    Returns:
        Plotly Figure with one horizontal bar per record
    """
    if not records:
        return _empty_figure("No valid data")

    axis_unit = TimeUnit.coerce(axis_unit)
    span = max(r['x'][1] for r in records) - min(r['x'][0] for r in records)
    decimals = fixed_precision(span, time_unit, axis_unit)

    fig = go.Figure(go.Bar(
        base=[convert(r['x'][0], time_unit, axis_unit) for r in records],
        x=[convert(r['x'][1] - r['x'][0], time_unit, axis_unit) for r in records],
        y=[r['y'] for r in records],
        orientation='h',
        marker=dict(
            color=[r['backgroundColor'] for r in records],
            line=dict(color=[r['borderColor'] for r in records], width=1),
        ),
        customdata=[
            [
                r['custom']['category'],
                r['custom']['subtask'],
                r['custom']['formattedStart'],
                r['custom']['formattedEnd'],
                r['custom']['formattedDuration'],
            ]
            for r in records
        ],
        hovertemplate=(
            '<b>%{y}</b><br>'
            'Category: %{customdata[0]}<br>'
            'Subtask: %{customdata[1]}<br>'
            'Start: %{customdata[2]}<br>'
            'End: %{customdata[3]}<br>'
            'Duration: %{customdata[4]}<extra></extra>'
        ),
    ))

    fig.update_layout(
        title=title,
        xaxis_title=f'Time ({axis_unit.label})',
        yaxis_title='Task',
        showlegend=False,
        hovermode='closest',
        height=max(TIMELINE_MIN_HEIGHT, TIMELINE_ROW_HEIGHT * len(records)),
        paper_bgcolor=CHART_BACKGROUND,
        plot_bgcolor=CHART_BACKGROUND,
        font=dict(color=CHART_ACCENT_TEXT),
    )
    fig.update_xaxes(gridcolor=CHART_GRID, tickformat=f'.{decimals}f')
    fig.update_yaxes(gridcolor=CHART_GRID, autorange='reversed')

    return fig


def create_category_pie(categories: Sequence[dict], color_map: Optional[dict] = None) -> go.Figure:
    """
    Create a pie chart showing time distribution by category.

    Args:
        categories: Rows from a StatsReport (category, total_duration, percentage)
        color_map: Optional category -> ColorScheme

    Returns:
        Plotly Figure with the pie chart
    """
    if not categories:
        return _empty_figure("No valid data")

    labels = [row['category'] for row in categories]
    colors = None
    if color_map:
        colors = [color_map.get(label, get_color_scheme(label)).primary for label in labels]

    fig = go.Figure(data=[go.Pie(
        labels=labels,
        values=[row['total_duration'] for row in categories],
        marker=dict(colors=colors),
        hole=0.4,
        textinfo='label+percent',
        textposition='outside',
        hovertemplate='<b>%{label}</b><br>%{value}<br>%{percent}<extra></extra>'
    )])

    fig.update_layout(
        title='Time Distribution by Category',
        showlegend=False,
        height=DEFAULT_CHART_HEIGHT,
        paper_bgcolor=CHART_BACKGROUND,
        font=dict(color=CHART_ACCENT_TEXT),
    )

    return fig
