"""CDR Lifecycle Map - Timeline and playback of carbon-removal projects.

Shows the geotagged lifecycle events of a project on an interactive map
and plays them back as a timed tour.

Modules:
    core: Geospatial engine (classification, declustering, paths, viewports)
    model: Data structures (Coordinate, LifecycleEvent, Project, repository)
    ui: State machines, scheduler and Streamlit/pydeck rendering adapters

Example:
    from cdr_timeline.model import ProjectRepository
    from cdr_timeline.core.viewport import ViewportController
"""
