"""Viewport Controller - computes the target map view for a selection.

compute_viewport() is pure: it has no memory of prior viewports and any
transition animation is the renderer's business. Priority, first match
wins:

1. Focus bounds supplied (area of interest around a non-transport event)
2. Highlighted path with path zoom requested: union of known anchors,
   connector paths and the highlighted path
3. A single selected coordinate: center on it
4. Nothing selected: project home

Every bounds target is classified by its north-south extent: below
LOCATION_BOUNDS_MAX_NS_DEG it is a single site (tight padding, high zoom
cap), otherwise a route (loose padding, lower zoom cap).
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from cdr_timeline.constants import MapConfig, ViewportConfig
from cdr_timeline.core.geo_calculator import GeoCalculator
from cdr_timeline.core.geometry import Bounds
from cdr_timeline.core.location_classifier import resolve_anchor_coordinates
from cdr_timeline.core.path_resolver import (
    HighlightedPath,
    is_transport_event,
    main_location_paths,
    resolve_highlighted_path,
)
from cdr_timeline.model.canonical_location import LocationRole
from cdr_timeline.model.coordinate import Coordinate
from cdr_timeline.model.project import Project

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CenterView:
    """Center the map on a coordinate at a fixed zoom."""

    center: Coordinate
    zoom: int


@dataclass(frozen=True)
class BoundsView:
    """Fit the map to a rectangle.

    Attributes:
        bounds: Rectangle to show
        padding_px: Padding around the rectangle on every side
        max_zoom: Upper limit for the fitted zoom
    """

    bounds: Bounds
    padding_px: int
    max_zoom: int

    @property
    def is_location_bound(self) -> bool:
        """True when the bounds cover a single site rather than a route."""
        return _is_single_site(self.bounds)


ViewportTarget = CenterView | BoundsView


def _is_single_site(bounds: Bounds) -> bool:
    return bounds.ns_extent < ViewportConfig.LOCATION_BOUNDS_MAX_NS_DEG


def fit_bounds(bounds: Bounds) -> BoundsView:
    """Bounds target with padding and zoom cap chosen by extent."""
    if _is_single_site(bounds):
        return BoundsView(
            bounds=bounds,
            padding_px=ViewportConfig.LOCATION_PADDING_PX,
            max_zoom=ViewportConfig.LOCATION_MAX_ZOOM,
        )
    return BoundsView(
        bounds=bounds,
        padding_px=ViewportConfig.PATH_PADDING_PX,
        max_zoom=ViewportConfig.PATH_MAX_ZOOM,
    )


def area_of_interest_bounds(
    coordinate: Coordinate,
    side_m: float = ViewportConfig.AREA_OF_INTEREST_SIDE_M,
) -> Bounds:
    """Square of the given side length centered on a coordinate."""
    return Bounds.around(coordinate, GeoCalculator.meters_to_degrees(side_m) / 2)


def compute_viewport(
    selected: Coordinate | None,
    *,
    home: Coordinate,
    focus_bounds: Bounds | None = None,
    highlighted_path: HighlightedPath | None = None,
    zoom_to_path: bool = False,
    anchors: Mapping[LocationRole, Coordinate] | None = None,
    main_paths: Sequence[HighlightedPath] = (),
) -> ViewportTarget:
    """Target view for the current selection.

    Args:
        selected: Coordinate of the selected (or playing) event
        home: Project home coordinate
        focus_bounds: Explicit rectangle for the selection
        highlighted_path: Active transport leg
        zoom_to_path: Whether a highlighted path should drive the view
        anchors: Known anchor coordinates
        main_paths: Always-shown connector paths

    Returns:
        CenterView or BoundsView.
    """
    if focus_bounds is not None:
        return fit_bounds(focus_bounds)

    if highlighted_path and zoom_to_path:
        coordinates = list((anchors or {}).values())
        for path in main_paths:
            coordinates.extend(path)
        coordinates.extend(highlighted_path)
        return fit_bounds(Bounds.from_coordinates(coordinates))

    if selected is not None:
        return CenterView(center=selected, zoom=MapConfig.EVENT_ZOOM)

    return CenterView(center=home, zoom=MapConfig.HOME_ZOOM)


class ViewportController:
    """Per-project viewport computation.

    Anchors and connector paths depend only on the project, so they are
    computed once. Selection changes then only resolve the event's path
    and focus bounds.

    Example:
        controller = ViewportController(project)
        target = controller.for_event(3)
    """

    def __init__(self, project: Project) -> None:
        self.project = project
        self.anchors: dict[LocationRole, Coordinate] = resolve_anchor_coordinates(
            project.events, project.canonical_locations
        )
        self.main_paths: list[HighlightedPath] = main_location_paths(self.anchors)

    def highlighted_path(self, index: int | None) -> HighlightedPath | None:
        return resolve_highlighted_path(self.project.event_at(index), self.project.methodology, self.anchors)

    def focus_bounds(self, index: int | None) -> Bounds | None:
        """Area of interest around a non-transport event."""
        event = self.project.event_at(index)
        if event is None or is_transport_event(event.category, self.project.methodology):
            return None
        return area_of_interest_bounds(event.coordinate)

    def for_event(self, index: int | None, zoom_to_path: bool = True) -> ViewportTarget:
        """Viewport for the event at index (None or out of range: nothing selected)."""
        event = self.project.event_at(index)
        target = compute_viewport(
            event.coordinate if event else None,
            home=self.project.home,
            focus_bounds=self.focus_bounds(index),
            highlighted_path=self.highlighted_path(index),
            zoom_to_path=zoom_to_path,
            anchors=self.anchors,
            main_paths=self.main_paths,
        )
        logger.debug(f"Viewport for event {index}: {target}")
        return target
