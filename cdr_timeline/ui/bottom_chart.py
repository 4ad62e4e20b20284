"""ImpactChart - Plotly chart of CO2 impact along the event sequence.

Shows per-event signed impacts as bars (removals green, emissions red)
and the running total as a line. During playback the current event is
marked with a vertical line.
"""

import logging
from collections.abc import Sequence
from itertools import accumulate

import plotly.graph_objects as go

from cdr_timeline.constants import StyleConfig
from cdr_timeline.model.event import LifecycleEvent

logger = logging.getLogger(__name__)


class ImpactChart:
    """Renders cumulative CO2 impact using Plotly.

    Example:
        chart = ImpactChart(width=800, height=220)
        fig = chart.render(events=project.events, current_index=playback.index)
        st.plotly_chart(fig)
    """

    def __init__(self, width: int | None = None, height: int = 220) -> None:
        """Initialize impact chart renderer.

        Args:
            width: Chart width in pixels (None lets the container decide)
            height: Chart height in pixels
        """
        self.width = width
        self.height = height

    @staticmethod
    def cumulative_impact(events: Sequence[LifecycleEvent]) -> list[float]:
        """Running total of co2_impact in event order."""
        return list(accumulate(event.co2_impact for event in events))

    def render(self, events: Sequence[LifecycleEvent], current_index: int | None = None) -> go.Figure:
        """Render impact bars and running total.

        Args:
            events: Events in project order
            current_index: Event to mark (playback position or selection)

        Returns:
            Plotly Figure object.
        """
        steps = list(range(1, len(events) + 1))
        impacts = [event.co2_impact for event in events]
        colors = [
            StyleConfig.POSITIVE_IMPACT_COLOR if impact >= 0 else StyleConfig.NEGATIVE_IMPACT_COLOR
            for impact in impacts
        ]
        titles = [event.title for event in events]

        fig = go.Figure()
        fig.add_trace(
            go.Bar(
                x=steps,
                y=impacts,
                marker_color=colors,
                customdata=titles,
                name="Event impact",
                hovertemplate="%{customdata}<br>%{y:+.2f} tCO₂e<extra></extra>",
            )
        )
        fig.add_trace(
            go.Scatter(
                x=steps,
                y=self.cumulative_impact(events),
                mode="lines+markers",
                line=dict(color="#334155", width=2),
                name="Cumulative",
                hovertemplate="Step %{x}<br>Total %{y:.2f} tCO₂e<extra></extra>",
            )
        )

        if current_index is not None and 0 <= current_index < len(events):
            fig.add_vline(x=current_index + 1, line=dict(color=StyleConfig.HIGHLIGHT_PATH_COLOR, width=2, dash="dash"))

        fig.update_layout(
            width=self.width,
            height=self.height,
            margin=dict(l=10, r=10, t=10, b=10),
            xaxis=dict(title="Event", dtick=1),
            yaxis=dict(title="tCO₂e"),
            plot_bgcolor="white",
            showlegend=False,
        )
        return fig
