"""MapSession - wires selection, playback and the viewport engine together.

One session per opened project. The session owns both state machines
and forwards their transitions to subscribers, so the rendering layer
redraws on change notifications instead of re-deriving state.

Selection ownership:
    While playback is active the playback index drives the map and user
    selection requests are rejected. Starting playback clears the user
    selection; completion of playback closes it and hands control back.
"""

import logging
from collections.abc import Callable

from statemachine import State

from cdr_timeline.core.declusterer import PlacedMarker, layout_markers
from cdr_timeline.core.location_classifier import IndexedEvent, group_events_by_location
from cdr_timeline.core.path_resolver import HighlightedPath, path_length_m
from cdr_timeline.core.viewport import ViewportController, ViewportTarget
from cdr_timeline.model.canonical_location import LocationRole
from cdr_timeline.model.event import LifecycleEvent
from cdr_timeline.model.project import Project
from cdr_timeline.ui.playback import PlaybackController
from cdr_timeline.ui.scheduler import Scheduler
from cdr_timeline.ui.selection import SelectionStateMachine

logger = logging.getLogger(__name__)


class MapSession:
    """Interactive state of one project's map page.

    Example:
        session = MapSession(project, PollingScheduler())
        session.subscribe(lambda: st.rerun())
        session.select_event(2)
        deck = renderer.render(session.current_viewport(), ...)
    """

    def __init__(self, project: Project, scheduler: Scheduler) -> None:
        self.project = project
        self.viewport = ViewportController(project)
        self.selection = SelectionStateMachine()
        self.playback = PlaybackController(scheduler)
        self._subscribers: list[Callable[[], None]] = []

        self.selection.add_listener(self)
        self.playback.add_listener(self)
        self.playback.on_complete(self._on_playback_complete)

    # ==========================================================================
    # Change Notifications
    # ==========================================================================

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a change callback. Returns a function that unsubscribes."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def after_transition(self, event: str, source: State, target: State) -> None:
        """Listener hook for both state machines."""
        self._notify()

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback()

    # ==========================================================================
    # Selection
    # ==========================================================================

    def select_event(self, index: int) -> bool:
        """Toggle the user selection of an event.

        Returns:
            False if playback owns the selection or the index is out of range.
        """
        if self.playback.is_active:
            logger.warning(f"Ignoring selection of event {index}: playback is active")
            return False
        if not 0 <= index < len(self.project.events):
            logger.warning(f"Ignoring selection of event {index}: out of range")
            return False
        return self.selection.try_transition("select", index=index)

    def clear_selection(self) -> bool:
        if self.playback.is_active:
            return False
        return self.selection.try_transition("clear")

    # ==========================================================================
    # Playback
    # ==========================================================================

    def start_playback(self) -> None:
        """Open playback over all project events."""
        if self.selection.has_selection:
            self.selection.try_transition("clear")
        self.playback.open(self.project)

    def stop_playback(self) -> None:
        self.playback.close()

    def _on_playback_complete(self) -> None:
        logger.info(f"Playback of {self.project.id} complete (run {self.playback.completed_runs}), closing")
        self.playback.close()

    # ==========================================================================
    # Derived View State
    # ==========================================================================

    @property
    def active_index(self) -> int | None:
        """Index driving the map: playback position, else user selection."""
        if self.playback.is_active:
            return self.playback.index if self.playback.current_event is not None else None
        return self.selection.selected_index

    @property
    def active_event(self) -> LifecycleEvent | None:
        return self.project.event_at(self.active_index)

    def current_viewport(self) -> ViewportTarget:
        return self.viewport.for_event(self.active_index, zoom_to_path=True)

    def current_highlighted_path(self) -> HighlightedPath | None:
        return self.viewport.highlighted_path(self.active_index)

    def current_route_length_m(self) -> float | None:
        """Length of the highlighted transport leg, None without one."""
        path = self.current_highlighted_path()
        return path_length_m(path) if path is not None else None

    def visible_markers(self, show_all: bool = False) -> list[PlacedMarker]:
        """Declustered event markers.

        Args:
            show_all: Place every project event instead of only the active one
        """
        if show_all:
            return layout_markers(self.project.events)
        index = self.active_index
        if index is None:
            return []
        return layout_markers([self.project.events[index]], indices=[index])

    def timeline(self) -> dict[LocationRole, list[IndexedEvent]]:
        """Timeline sections per canonical location."""
        return group_events_by_location(self.project)

    def close(self) -> None:
        self.playback.close()
        self._subscribers.clear()

    def __enter__(self) -> "MapSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
