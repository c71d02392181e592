"""Plotly figures for the budget tracker.

Each function takes the DataFrame or list produced by one of the core
modules and returns a ``plotly.graph_objects.Figure``.  How the figure is
shown (notebook, HTML export, a web front end) is up to the caller.
Empty input gives an empty figure titled "No data to display".
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .evaluator import BudgetStatus

# Named colors from the category tables mapped to plotly-friendly values
COLOR_MAP = {
    'orange': '#FF9500',
    'purple': '#AF52DE',
    'blue': '#007AFF',
    'pink': '#FF2D55',
    'red': '#FF3B30',
    'brown': '#A2845E',
    'green': '#34B34D',
    'yellow': '#FFCC00',
    'teal': '#30B0C7',
    'indigo': '#5856D6',
    'cyan': '#32ADE6',
    'mint': '#00C7BE',
    'gray': '#8E8E93',
}


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def _hex(color: str) -> str:
    return COLOR_MAP.get(color, COLOR_MAP['gray'])


def create_budget_breakdown_chart(breakdown: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Donut chart of how the monthly budget is allocated.

    Parameters
    ----------
    breakdown : pandas.DataFrame
        Output of :func:`recommendation.budget_breakdown` with Name,
        Amount and Color columns.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Donut chart, one slice per allocation.
    """
    if breakdown.empty or breakdown['Amount'].sum() <= 0:
        return _empty_figure()
    fig = go.Figure(
        go.Pie(
            labels=breakdown['Name'],
            values=breakdown['Amount'],
            hole=0.55,
            marker=dict(colors=[_hex(c) for c in breakdown['Color']]),
            sort=False,
        )
    )
    fig.update_layout(title=title or "Budget Breakdown")
    return fig


def create_category_progress_chart(statuses: Sequence[BudgetStatus], title: str | None = None) -> go.Figure:
    """Horizontal bars of percentage used per category.

    Bars use the clamped display percentage and the status color band;
    the hover text shows the real spend and cap.
    """
    if not statuses:
        return _empty_figure()
    names = [s.name for s in statuses]
    display = np.array([s.display_percentage for s in statuses], dtype=float)
    hover = [
        f"${s.spent:,.2f} of ${s.budgeted:,.2f} ({s.percentage_used:.1f}%)"
        for s in statuses
    ]
    fig = go.Figure(
        go.Bar(
            x=display,
            y=names,
            orientation='h',
            marker_color=[_hex(s.status_color) for s in statuses],
            hovertext=hover,
            hoverinfo='text',
        )
    )
    fig.update_layout(
        title=title or "Budget Progress",
        xaxis=dict(title="Percent Used", range=[0, 100]),
        yaxis_title="Category",
    )
    return fig


def create_monthly_spending_chart(monthly: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Line chart of total spend per month.

    Parameters
    ----------
    monthly : pandas.DataFrame
        Output of :func:`ledger.monthly_totals` (Month, Spent).
    title : str, optional
        Chart title.
    """
    if monthly.empty:
        return _empty_figure()
    fig = px.line(monthly, x="Month", y="Spent", markers=True)
    fig.update_layout(
        title=title or "Monthly Spending",
        xaxis_title="Month",
        yaxis_title="Spent",
    )
    return fig


def create_summary_history_chart(summaries: Sequence, title: str | None = None) -> go.Figure:
    """Grouped bars of income, spend and savings for stored monthly summaries."""
    if not summaries:
        return _empty_figure()
    df = pd.DataFrame(
        [
            {
                'Period': f"{s.year}-{s.month:02d}",
                'Income': s.total_income,
                'Spent': s.total_spent,
                'Saved': s.total_saved,
            }
            for s in summaries
        ]
    ).sort_values('Period')
    melted = df.melt(id_vars='Period', var_name='Measure', value_name='Amount')
    fig = px.bar(melted, x='Period', y='Amount', color='Measure', barmode='group')
    fig.update_layout(title=title or "Monthly History")
    return fig
