"""CDR Lifecycle Map - Interactive timeline of carbon-removal projects.

Shows a project's lifecycle events grouped by canonical location, draws
them on a map and plays them back as a timed tour.

Run: streamlit run cdr_timeline/app.py
"""

import logging
import traceback

import streamlit as st

from cdr_timeline.constants import AppConfig, PlaybackConfig
from cdr_timeline.model.project import Project
from cdr_timeline.model.repository import ProjectRepository
from cdr_timeline.ui import (
    BatchCompositionPanel,
    EventDetailPanel,
    GrossRemovalsPanel,
    IconResolver,
    ImpactChart,
    MapRenderer,
    MapSession,
    PollingScheduler,
)
from cdr_timeline.ui.center_map import event_markers, location_markers, path_polylines

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# SESSION STATE
# =============================================================================


@st.cache_resource
def load_repository() -> ProjectRepository:
    """Bundled projects, validated once per server process."""
    return ProjectRepository.default()


def init_session_state() -> None:
    """Initialize scheduler, renderers and the map version counter."""
    if "scheduler" not in st.session_state:
        st.session_state.scheduler = PollingScheduler()

    if "map_renderer" not in st.session_state:
        st.session_state.map_renderer = MapRenderer()

    if "icons" not in st.session_state:
        st.session_state.icons = IconResolver()

    if "map_version" not in st.session_state:
        st.session_state.map_version = 0


def bump_map_version() -> None:
    st.session_state.map_version = st.session_state.get("map_version", 0) + 1


def get_session(project: Project) -> MapSession:
    """MapSession for the project, replacing the session of another project."""
    session: MapSession | None = st.session_state.get("map_session")
    if session is not None and session.project.id == project.id:
        return session

    if session is not None:
        logger.info(f"Switching project {session.project.id} -> {project.id}")
        session.close()

    session = MapSession(project=project, scheduler=st.session_state.scheduler)
    session.subscribe(bump_map_version)
    st.session_state.map_session = session
    return session


def reset_ui_state() -> None:
    """Drop the current map session after an error.

    Closing the session cancels any pending playback timer. The project
    repository is kept.
    """
    logger.info("Resetting UI state due to error recovery")
    session: MapSession | None = st.session_state.pop("map_session", None)
    if session is not None:
        session.close()
    st.session_state.scheduler = PollingScheduler()
    bump_map_version()


# =============================================================================
# PANELS
# =============================================================================


def render_project_sidebar(repository: ProjectRepository) -> Project | None:
    """Project picker and headline figures."""
    projects = repository.list()
    if not projects:
        st.sidebar.warning("No projects available")
        return None

    names = {project.id: project.name for project in projects}
    project_id = st.sidebar.selectbox("Project", options=list(names), format_func=names.get)
    project = repository.get(project_id)
    if project is None:
        st.sidebar.error(f"Project {project_id} not found")
        return None

    with st.sidebar:
        st.metric("Net removals", f"{project.co2_quantity:,.2f} tCO₂e")
        GrossRemovalsPanel().render(project)
        BatchCompositionPanel().render(project)
    st.sidebar.caption(f"Methodology: {project.methodology.value.replace('_', ' ')}")
    if project.protocol:
        st.sidebar.caption(f"Protocol: {project.protocol}")
    if project.registry_project_id:
        st.sidebar.caption(f"Registry ID: {project.registry_project_id}")
    if project.design_document_url:
        st.sidebar.link_button("Project design document", project.design_document_url)
    return project


def render_timeline(session: MapSession) -> None:
    """Events grouped by canonical location, oldest first."""
    icons: IconResolver = st.session_state.icons
    project = session.project
    active = session.active_index
    locked = session.playback.is_active

    grouped: set[int] = set()
    for role, entries in session.timeline().items():
        location = project.canonical_location(role)
        st.markdown(f"**{icons.for_location(project.methodology, role).emoji} {location.label}**")
        if not entries:
            st.caption("No events yet")
        for entry in entries:
            grouped.add(entry.index)
            _event_button(session, entry.index, active, locked)

    others = [i for i in range(len(project.events)) if i not in grouped]
    if others:
        st.markdown("**📍 Other locations**")
        for index in others:
            _event_button(session, index, active, locked)


def _event_button(session: MapSession, index: int, active: int | None, locked: bool) -> None:
    event = session.project.events[index]
    icon = st.session_state.icons.for_event(event.category)
    st.button(
        f"{icon.emoji} {event.title}",
        key=f"event_{session.project.id}_{index}",
        type="primary" if index == active else "secondary",
        disabled=locked,
        on_click=session.select_event,
        args=(index,),
        help=f"{event.timestamp:%Y-%m-%d}",
    )


def render_map(session: MapSession, show_all: bool) -> None:
    renderer: MapRenderer = st.session_state.map_renderer
    icons: IconResolver = st.session_state.icons

    markers = location_markers(session.project, session.viewport.anchors, icons)
    markers += event_markers(session.visible_markers(show_all=show_all), icons)
    polylines = path_polylines(session.viewport.main_paths, session.current_highlighted_path())

    deck = renderer.render(viewport=session.current_viewport(), markers=markers, polylines=polylines)
    logger.debug(f"[RENDER] Map version {st.session_state.map_version}, active={session.active_index}")
    st.pydeck_chart(deck, key=f"map_{st.session_state.map_version}")


def render_playback_controls(session: MapSession) -> None:
    playback = session.playback
    if not playback.is_active:
        st.button(
            "▶️ Play tour",
            type="primary",
            disabled=not session.project.events,
            on_click=session.start_playback,
        )
        if playback.completed_runs:
            st.caption(f"Tours completed: {playback.completed_runs}")
        return

    st.progress(playback.progress, text=f"Event {playback.progress_label}")
    prev_col, pause_col, next_col, close_col = st.columns(4)
    prev_col.button("⏮️", on_click=playback.step_previous, disabled=playback.index == 0)
    pause_col.button("▶️" if playback.is_paused else "⏸️", on_click=playback.toggle_pause)
    next_col.button("⏭️", on_click=playback.step_next, disabled=playback.is_at_last_event)
    close_col.button("✖️", on_click=session.stop_playback)

    labels = {ms: label for label, ms in PlaybackConfig.SPEEDS_MS.items()}
    speed = st.radio(
        "Speed",
        options=list(labels),
        index=list(labels).index(playback.speed_ms),
        format_func=labels.get,
        horizontal=True,
    )
    playback.set_speed(speed)


@st.fragment(run_every=AppConfig.PLAYBACK_POLL_INTERVAL_S)
def playback_ticker() -> None:
    """Fire due playback timers and rerun the app when one fired."""
    scheduler: PollingScheduler = st.session_state.scheduler
    if scheduler.poll():
        st.rerun()


# =============================================================================
# MAIN
# =============================================================================


def main() -> None:
    """Application entry point."""
    st.set_page_config(page_title=AppConfig.TITLE, page_icon=AppConfig.ICON, layout=AppConfig.LAYOUT)
    init_session_state()

    st.title(AppConfig.TITLE)

    try:
        _run_app_ui()
    except Exception as e:
        # Log full traceback for debugging
        error_msg = f"{type(e).__name__}: {e}"
        full_traceback = traceback.format_exc()
        logger.error(f"[UI] UI error caught: {error_msg}\n{full_traceback}")

        st.error(f"⚠️ [UI] Something went wrong: {error_msg}")

        reset_ui_state()

        if st.button("🔄 Reset and Continue", type="primary"):
            st.rerun()


def _run_app_ui() -> None:
    """Run the main application UI. Separated for error handling wrapper."""
    project = render_project_sidebar(load_repository())
    if project is None:
        return

    session = get_session(project)
    logger.info(
        f"[MAIN] Render cycle: project={project.id}, playback={session.playback.state_name}, "
        f"selection={session.selection.selected_index}"
    )

    show_all = st.sidebar.toggle("Show all events", value=False)

    col_timeline, col_map = st.columns([1, 3])
    with col_timeline:
        render_timeline(session)
    with col_map:
        render_map(session, show_all=show_all)
        render_playback_controls(session)
        event = session.active_event
        if event is not None:
            EventDetailPanel(st.session_state.icons).render(event, session.current_route_length_m())
        st.plotly_chart(ImpactChart().render(project.events, session.active_index))

    if session.playback.has_pending_timer:
        playback_ticker()


if __name__ == "__main__":
    main()
