"""
Visualization generator module for creating interactive Plotly charts.

This module provides functions to chart how a quiz was put together
(requested versus sampled questions per domain) and how an attempt
scored per domain.
"""

from typing import Dict, List, Optional

import plotly.graph_objects as go

from ..core.models import DomainScore


PLOT_CONFIG = {
    'displayModeBar': True,
    'displaylogo': False,
    'modeBarButtonsToRemove': ['lasso2d', 'select2d']
}


def _score_color(percentage: float, passing_percentage: float) -> str:
    """
    Assign color based on a domain percentage.

    Args:
        percentage: Domain percentage
        passing_percentage: Percentage needed to pass

    Returns:
        Color hex code string
    """
    if percentage >= passing_percentage:
        return "#28a745"  # Green for passing
    elif percentage >= passing_percentage * 0.75:
        return "#ffc107"  # Yellow for close
    else:
        return "#dc3545"  # Red for weak


def create_allocation_chart(allocation: Dict[str, int], breakdown: Dict[str, int],
                            group_names: Optional[Dict[str, str]] = None) -> str:
    """
    Create a grouped bar chart of requested versus sampled questions per group.

    Args:
        allocation: Requested question count per group
        breakdown: Sampled question count per group
        group_names: Optional display names keyed by group id

    Returns:
        Plotly HTML div string for embedding
    """
    group_ids = list(allocation) + [g for g in breakdown if g not in allocation]
    if not group_ids:
        return "<div>No allocation to visualize</div>"

    group_names = group_names or {}
    labels = [group_names.get(g, g) for g in group_ids]

    requested = go.Bar(
        x=labels,
        y=[allocation.get(g, 0) for g in group_ids],
        name='Requested',
        marker=dict(color='#667eea'),
        hovertemplate='%{x}<br>Requested: %{y}<extra></extra>'
    )
    sampled = go.Bar(
        x=labels,
        y=[breakdown.get(g, 0) for g in group_ids],
        name='Sampled',
        marker=dict(color='#764ba2'),
        hovertemplate='%{x}<br>Sampled: %{y}<extra></extra>'
    )

    fig = go.Figure(data=[requested, sampled])
    fig.update_layout(
        title={
            'text': 'Questions per Domain',
            'x': 0.5,
            'xanchor': 'center',
            'font': {'size': 20}
        },
        barmode='group',
        xaxis=dict(title='Domain'),
        yaxis=dict(title='Questions', gridcolor='rgba(200, 200, 200, 0.3)'),
        plot_bgcolor='white',
        legend=dict(
            x=0.02,
            y=0.98,
            bgcolor='rgba(255, 255, 255, 0.8)',
            bordercolor='rgba(0, 0, 0, 0.2)',
            borderwidth=1
        ),
        height=500
    )

    return fig.to_html(include_plotlyjs='cdn', div_id='allocation-chart', config=PLOT_CONFIG)


def create_domain_score_chart(domain_scores: List[DomainScore],
                              passing_percentage: float = 70.0) -> str:
    """
    Create a bar chart of the attempt's percentage per domain.

    Args:
        domain_scores: Per-domain scores
        passing_percentage: Percentage drawn as the passing line

    Returns:
        Plotly HTML div string for embedding
    """
    if not domain_scores:
        return "<div>No domain scores to visualize</div>"

    names = [d.domain_name for d in domain_scores]
    percentages = [d.percentage for d in domain_scores]
    hover_texts = []
    for d in domain_scores:
        weight = f"{d.weight:g}%" if d.weight is not None else "n/a"
        hover_texts.append(
            f"<b>{d.domain_name}</b><br>"
            f"<b>Correct:</b> {d.score}/{d.total_questions}<br>"
            f"<b>Score:</b> {d.percentage}%<br>"
            f"<b>Exam Weight:</b> {weight}"
        )

    bars = go.Bar(
        x=names,
        y=percentages,
        marker=dict(
            color=[_score_color(p, passing_percentage) for p in percentages],
            line=dict(width=1, color='white')
        ),
        text=[f"{p}%" for p in percentages],
        textposition='outside',
        hovertext=hover_texts,
        hovertemplate='%{hovertext}<extra></extra>',
        name='Domain Score'
    )

    fig = go.Figure(data=[bars])
    fig.add_hline(
        y=passing_percentage,
        line=dict(color='rgba(0, 0, 0, 0.5)', width=2, dash='dash'),
        annotation_text=f"Passing ({passing_percentage:g}%)",
        annotation_position='top left'
    )
    fig.update_layout(
        title={
            'text': 'Performance by Domain',
            'x': 0.5,
            'xanchor': 'center',
            'font': {'size': 20}
        },
        xaxis=dict(title='Domain'),
        yaxis=dict(title='Score (%)', range=[0, 110], gridcolor='rgba(200, 200, 200, 0.3)'),
        plot_bgcolor='white',
        showlegend=False,
        height=500
    )

    return fig.to_html(include_plotlyjs='cdn', div_id='domain-score-chart', config=PLOT_CONFIG)
