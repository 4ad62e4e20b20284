"""Tests for viewport computation.

Tests: fit_bounds, area_of_interest_bounds, compute_viewport, ViewportController
Focus: Priority order and the tight/loose classification of bounds targets
"""

import pytest

from cdr_timeline.constants import MapConfig, ViewportConfig
from cdr_timeline.core.geometry import Bounds
from cdr_timeline.core.viewport import (
    BoundsView,
    CenterView,
    ViewportController,
    area_of_interest_bounds,
    compute_viewport,
    fit_bounds,
)
from cdr_timeline.model.canonical_location import LocationRole
from cdr_timeline.model.coordinate import Coordinate
from cdr_timeline.model.project import Project, parse_project
from conftest import BIOCHAR_PLANT, event_dict, project_dict

HOME = Coordinate(lat=20.0, lng=-156.0)
SELECTED = Coordinate(lat=20.5, lng=-156.5)
PATH = (Coordinate(lat=20.0, lng=-156.0), Coordinate(lat=20.1, lng=-156.2))


def square(ns_extent: float) -> Bounds:
    return Bounds(south=0.0, west=0.0, north=ns_extent, east=ns_extent)


class TestFitBounds:
    @pytest.mark.parametrize(
        "ns_extent,padding,max_zoom",
        [
            (0.0, 100, 18),
            (0.01, 100, 18),
            (0.0199, 100, 18),
            (0.02, 50, 16),
            (0.05, 50, 16),
            (1.0, 50, 16),
        ],
    )
    def test_classification(self, ns_extent: float, padding: int, max_zoom: int) -> None:
        view = fit_bounds(square(ns_extent))
        assert (view.padding_px, view.max_zoom) == (padding, max_zoom)
        assert view.is_location_bound is (padding == ViewportConfig.LOCATION_PADDING_PX)

    def test_location_bound_follows_extent_not_padding(self) -> None:
        site = BoundsView(bounds=square(0.01), padding_px=ViewportConfig.PATH_PADDING_PX, max_zoom=16)
        route = BoundsView(bounds=square(0.05), padding_px=ViewportConfig.LOCATION_PADDING_PX, max_zoom=18)
        assert site.is_location_bound
        assert not route.is_location_bound

    def test_only_north_south_extent_counts(self) -> None:
        wide = Bounds(south=0.0, west=0.0, north=0.01, east=5.0)
        assert fit_bounds(wide).is_location_bound

    def test_area_of_interest(self) -> None:
        bounds = area_of_interest_bounds(SELECTED)
        side_deg = ViewportConfig.AREA_OF_INTEREST_SIDE_M / MapConfig.METERS_PER_DEGREE
        assert bounds.ns_extent == pytest.approx(side_deg)
        assert bounds.ew_extent == pytest.approx(side_deg)
        assert bounds.center.lat == pytest.approx(SELECTED.lat)
        assert bounds.center.lng == pytest.approx(SELECTED.lng)
        assert fit_bounds(bounds).is_location_bound


class TestComputeViewport:
    def test_nothing_selected_shows_home(self) -> None:
        assert compute_viewport(None, home=HOME) == CenterView(center=HOME, zoom=MapConfig.HOME_ZOOM)

    def test_selected_point_centers(self) -> None:
        assert compute_viewport(SELECTED, home=HOME) == CenterView(center=SELECTED, zoom=MapConfig.EVENT_ZOOM)

    def test_focus_bounds_win(self) -> None:
        focus = square(0.01)
        view = compute_viewport(SELECTED, home=HOME, focus_bounds=focus, highlighted_path=PATH, zoom_to_path=True)
        assert view == fit_bounds(focus)

    def test_path_zoom_unions_everything(self) -> None:
        anchors = {LocationRole.APPLICATION: Coordinate(lat=19.0, lng=-157.0)}
        main_paths = [(Coordinate(lat=21.0, lng=-155.0), Coordinate(lat=20.2, lng=-156.1))]
        view = compute_viewport(
            SELECTED,
            home=HOME,
            highlighted_path=PATH,
            zoom_to_path=True,
            anchors=anchors,
            main_paths=main_paths,
        )
        assert isinstance(view, BoundsView)
        assert view.bounds == Bounds(south=19.0, west=-157.0, north=21.0, east=-155.0)
        assert not view.is_location_bound

    def test_path_without_zoom_request_centers(self) -> None:
        view = compute_viewport(SELECTED, home=HOME, highlighted_path=PATH, zoom_to_path=False)
        assert view == CenterView(center=SELECTED, zoom=MapConfig.EVENT_ZOOM)

    def test_empty_path_ignored(self) -> None:
        view = compute_viewport(None, home=HOME, highlighted_path=(), zoom_to_path=True)
        assert view == CenterView(center=HOME, zoom=MapConfig.HOME_ZOOM)


class TestViewportController:
    def test_home_when_nothing_selected(self, biochar_project: Project) -> None:
        controller = ViewportController(biochar_project)
        assert controller.for_event(None) == CenterView(center=biochar_project.home, zoom=MapConfig.HOME_ZOOM)
        assert controller.for_event(99) == CenterView(center=biochar_project.home, zoom=MapConfig.HOME_ZOOM)

    def test_non_transport_event_gets_area_of_interest(self, biochar_project: Project) -> None:
        controller = ViewportController(biochar_project)
        view = controller.for_event(2)
        assert isinstance(view, BoundsView)
        assert view.is_location_bound
        assert view.bounds.contains(biochar_project.events[2].coordinate)
        assert controller.highlighted_path(2) is None

    def test_unmatched_event_gets_area_of_interest(self, biochar_project: Project) -> None:
        view = ViewportController(biochar_project).for_event(5)
        assert isinstance(view, BoundsView)
        assert view.bounds.center.lat == pytest.approx(biochar_project.events[5].lat)

    def test_transport_event_fits_route(self, biochar_project: Project) -> None:
        """Maui anchors span ~0.014 deg north-south, so the route fit is tight."""
        controller = ViewportController(biochar_project)
        path = controller.highlighted_path(1)
        assert path == (
            controller.anchors[LocationRole.PROJECT_PREP],
            controller.anchors[LocationRole.PROCESSING],
        )
        assert controller.focus_bounds(1) is None

        view = controller.for_event(1)
        assert isinstance(view, BoundsView)
        assert all(view.bounds.contains(c) for c in controller.anchors.values())
        assert view.is_location_bound

    def test_long_route_is_loose(self, erw_project: Project) -> None:
        view = ViewportController(erw_project).for_event(1)
        assert isinstance(view, BoundsView)
        assert view.padding_px == ViewportConfig.PATH_PADDING_PX
        assert view.max_zoom == ViewportConfig.PATH_MAX_ZOOM

    def test_transport_without_known_anchors_centers(self) -> None:
        """A delivery with no prep-site events has no path and no area of interest."""
        project = parse_project(project_dict("p", [event_dict("d", "feedstock_delivery", BIOCHAR_PLANT)]))
        controller = ViewportController(project)
        assert controller.highlighted_path(0) is None
        assert controller.for_event(0) == CenterView(center=project.events[0].coordinate, zoom=MapConfig.EVENT_ZOOM)

    def test_anchors_and_connectors(self, biochar_project: Project, erw_project: Project) -> None:
        assert len(ViewportController(biochar_project).main_paths) == 2
        assert set(ViewportController(erw_project).anchors) == set(LocationRole)
