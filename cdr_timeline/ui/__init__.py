"""UI components: state machines, scheduling and Streamlit/pydeck rendering.

- PlaybackController: Timed playback state machine with a single timer
- SelectionStateMachine: Toggle-style event selection
- MapSession: Wires selection, playback and viewport for one project
- PollingScheduler / AsyncioScheduler: Cancellable delayed callbacks
- MapRenderer: Pydeck map rendering
- ImpactChart: Plotly cumulative CO2 impact chart
- IconResolver: Event and location icons
- EventDetailPanel / BatchCompositionPanel / GrossRemovalsPanel: Detail cards
"""

from cdr_timeline.ui.bottom_chart import ImpactChart
from cdr_timeline.ui.center_map import MapMarker, MapRenderer, Polyline
from cdr_timeline.ui.detail_panel import BatchCompositionPanel, EventDetailPanel, GrossRemovalsPanel
from cdr_timeline.ui.icons import IconResolver, IconSpec
from cdr_timeline.ui.map_session import MapSession
from cdr_timeline.ui.playback import PlaybackContext, PlaybackController, PlaybackStateMachine
from cdr_timeline.ui.scheduler import AsyncioScheduler, PollingScheduler, ScheduledTask, Scheduler
from cdr_timeline.ui.selection import SelectionStateMachine

__all__ = [
    "PlaybackContext",
    "PlaybackStateMachine",
    "PlaybackController",
    "SelectionStateMachine",
    "MapSession",
    "Scheduler",
    "ScheduledTask",
    "PollingScheduler",
    "AsyncioScheduler",
    "MapRenderer",
    "MapMarker",
    "Polyline",
    "ImpactChart",
    "IconResolver",
    "IconSpec",
    "EventDetailPanel",
    "BatchCompositionPanel",
    "GrossRemovalsPanel",
]
