from typing import Sequence

import pandas as pd
import plotly.graph_objects as go

from .config import (
    AGE_BAR_COLOR,
    ETHNICITY_BAR_COLOR,
    PIE_COLORS,
    TOP_ETHNICITY_SLICES,
)
from .models import ChartPoint


# ============================================================
# Configuration / constants
# ============================================================

HOVER_TEMPLATE_BAR = "%{x}<br>People: %{y:,}<extra></extra>"
HOVER_TEMPLATE_PIE = "%{label}<br>People: %{value:,}<br>%{percent}<extra></extra>"

BASE_LAYOUT = dict(
    height=360,
    margin=dict(t=60, l=50, r=30, b=40),
    plot_bgcolor="#f5f7fb",
)


# ============================================================
# Helper functions
# ============================================================


def _to_frame(points: Sequence[ChartPoint]) -> pd.DataFrame:
    """
    Chart points as a frame; always has ``name`` and ``value`` columns.
    """
    return pd.DataFrame(list(points), columns=["name", "value"])


def _bar(df: pd.DataFrame, title: str, color: str, x_title: str) -> go.Figure:
    fig = go.Figure(
        go.Bar(
            x=df["name"],
            y=df["value"],
            marker=dict(color=color),
            hovertemplate=HOVER_TEMPLATE_BAR,
        )
    )
    fig.update_xaxes(title_text=x_title)
    fig.update_yaxes(title_text="People", tickformat=",", rangemode="tozero")
    fig.update_layout(title=f"<b>{title}</b>", **BASE_LAYOUT)
    return fig


# ============================================================
# Chart builders
# ============================================================


def create_age_chart(
    points: Sequence[ChartPoint], *, color: str = AGE_BAR_COLOR
) -> go.Figure:
    """Bar chart of population per age group, in the order given."""
    df = _to_frame(points)
    if df.empty:
        return go.Figure()
    return _bar(df, "Population by Age Group", color, "Age group")


def create_ethnicity_pie(
    points: Sequence[ChartPoint], *, top_n: int = TOP_ETHNICITY_SLICES
) -> go.Figure:
    """
    Pie chart of the ``top_n`` largest ethnic groups.

    ``points`` are expected to be ranked already (see
    ``data_manager.by_ethnicity``); only the first ``top_n`` are drawn.
    """
    df = _to_frame(points).head(top_n)
    if df.empty:
        return go.Figure()

    fig = go.Figure(
        go.Pie(
            labels=df["name"],
            values=df["value"],
            hole=0.0,
            sort=False,
            marker=dict(colors=PIE_COLORS[: len(df)]),
            hovertemplate=HOVER_TEMPLATE_PIE,
        )
    )
    fig.update_layout(title="<b>Ethnicity Breakdown</b>", **BASE_LAYOUT)
    return fig


def create_ethnicity_chart(
    points: Sequence[ChartPoint], *, color: str = ETHNICITY_BAR_COLOR
) -> go.Figure:
    """Bar chart of every ethnic group."""
    df = _to_frame(points)
    if df.empty:
        return go.Figure()
    fig = _bar(df, "Detailed Ethnicity Breakdown", color, "Ethnic group")
    fig.update_xaxes(tickangle=-35)
    fig.update_layout(height=480)
    return fig
