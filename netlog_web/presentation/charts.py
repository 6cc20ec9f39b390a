"""Plotly figures for the dashboard. Values are plotted exactly as the model returned them."""
from __future__ import annotations

from typing import Iterable

import plotly.graph_objects as go

from netlog_web.domain.models import EventCount, SeverityCounts

# (label, attribute on SeverityCounts, color)
SEVERITY_SLICES = (
    ("Info", "info", "#3b82f6"),
    ("Warning", "warning", "#eab308"),
    ("Error", "error", "#f97316"),
    ("Critical", "critical", "#ef4444"),
)

TOP_EVENTS_COLOR = "#10b981"

_LAYOUT = dict(
    template="plotly_dark",
    paper_bgcolor="rgba(0,0,0,0)",
    plot_bgcolor="rgba(0,0,0,0)",
    font=dict(color="#94a3b8", size=12),
    height=256,
)


def severity_pie(counts: SeverityCounts) -> go.Figure:
    # zero-valued buckets are left out of the pie entirely
    slices = [(label, getattr(counts, attr), color) for label, attr, color in SEVERITY_SLICES if getattr(counts, attr) > 0]

    fig = go.Figure(
        go.Pie(
            labels=[s[0] for s in slices],
            values=[s[1] for s in slices],
            marker=dict(colors=[s[2] for s in slices]),
            hole=0.6,
            sort=False,
            textinfo="value",
        )
    )
    fig.update_layout(margin=dict(t=10, b=10, l=10, r=10), showlegend=True, **_LAYOUT)
    return fig


def top_events_bar(events: Iterable[EventCount]) -> go.Figure:
    events = list(events)
    fig = go.Figure(
        go.Bar(
            x=[e.value for e in events],
            y=[e.name for e in events],
            orientation="h",
            marker_color=TOP_EVENTS_COLOR,
        )
    )
    fig.update_layout(margin=dict(t=5, b=5, l=40, r=30), **_LAYOUT)
    fig.update_xaxes(visible=False)
    # first event on top, like a ranked list
    fig.update_yaxes(autorange="reversed")
    return fig


def figure_html(fig: go.Figure, div_id: str) -> str:
    """Embeddable <div> for a figure. The page loads plotly.js once itself."""
    return fig.to_html(
        full_html=False,
        include_plotlyjs=False,
        div_id=div_id,
        config={"displayModeBar": False, "responsive": True},
    )
