"""Plotly visualisation helpers for the budget tracker.

Each function accepts plain data produced by :mod:`analytics` or the store
and returns a `plotly.graph_objects.Figure` that Streamlit renders via
``st.plotly_chart``.
"""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .config import PROGRESS_DANGER_THRESHOLD, PROGRESS_WARNING_THRESHOLD


def _empty_figure(title: str) -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def create_category_pie_chart(breakdown: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Generate a pie chart of current-month spending by category.

    Parameters
    ----------
    breakdown : pandas.DataFrame
        Output of :func:`analytics.category_breakdown`.
    title : str, optional
        Title for the chart.

    Returns
    -------
    plotly.graph_objects.Figure
        Pie chart colored with each category's configured color.
    """
    if breakdown.empty:
        return _empty_figure("No spending data available")
    fig = px.pie(
        breakdown,
        names="Category",
        values="Amount",
        color="Category",
        color_discrete_map=dict(zip(breakdown["Category"], breakdown["Color"])),
    )
    fig.update_traces(
        marker=dict(line=dict(color="#ffffff", width=3)),
        hovertemplate="%{label}: %{value:,.2f} (%{percent})<extra></extra>",
        sort=False,
    )
    fig.update_layout(title=title or "Category breakdown", showlegend=False)
    return fig


def progress_color(used_percentage: float) -> str:
    """Bar color for a budget usage level."""
    if used_percentage >= PROGRESS_DANGER_THRESHOLD:
        return "#e74c3c"
    if used_percentage >= PROGRESS_WARNING_THRESHOLD:
        return "#f39c12"
    return "#2ecc71"


def create_budget_progress_chart(used_percentage: float, title: str | None = None) -> go.Figure:
    """Horizontal progress bar of budget used, capped at 100%.

    Parameters
    ----------
    used_percentage : float
        Share of the monthly budget spent so far.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Single-bar chart whose color reflects the warning tier.
    """
    filled = min(max(used_percentage, 0.0), 100.0)
    fig = go.Figure(
        go.Bar(
            x=[filled],
            y=["Budget"],
            orientation="h",
            marker_color=progress_color(used_percentage),
            text=[f"{used_percentage:.1f}% used"],
            textposition="auto",
        )
    )
    fig.update_layout(
        title=title,
        xaxis=dict(range=[0, 100], ticksuffix="%"),
        yaxis=dict(showticklabels=False),
        height=140,
        margin=dict(t=30 if title else 10, b=10, l=10, r=10),
    )
    return fig


def create_cumulative_spending_chart(
    cumulative: pd.DataFrame, monthly_budget: float, title: str | None = None
) -> go.Figure:
    """Line chart of cumulative spending with the monthly budget as a reference line.

    Parameters
    ----------
    cumulative : pandas.DataFrame
        Output of :func:`analytics.daily_cumulative_spending`.
    monthly_budget : float
        Budget drawn as a horizontal line when positive.
    title : str, optional
        Chart title.
    """
    if cumulative.empty:
        return _empty_figure("No data to display")
    df = cumulative.reset_index()
    fig = px.line(df, x="Day", y="Spent", markers=True)
    if monthly_budget > 0:
        fig.add_hline(y=monthly_budget, line_dash="dash", annotation_text="Budget")
    fig.update_layout(
        title=title or "Spending this month",
        xaxis_title="Day",
        yaxis_title="Cumulative spent",
    )
    return fig
