"""Tests for cdr_timeline core geometry and marker declustering.

Tests: GeoCalculator, Bounds, grid layout, layout_markers
Focus: Exact degree arithmetic and grid centering invariants

Note: Fixtures are defined in conftest.py (events, projects).
"""

from collections.abc import Callable

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

from cdr_timeline.constants import DeclusterConfig, MapConfig
from cdr_timeline.core.declusterer import (
    decluster_group,
    grid_offsets,
    grid_shape,
    group_by_rounded_coordinate,
    layout_markers,
)
from cdr_timeline.core.geo_calculator import GeoCalculator
from cdr_timeline.core.geometry import Bounds, bounds_union, tolerance_box
from cdr_timeline.model.coordinate import Coordinate
from cdr_timeline.model.event import LifecycleEvent
from conftest import BIOCHAR_FIELD, BIOCHAR_PLANT, UNMATCHED

BASE = DeclusterConfig.BASE_OFFSET_DEG


# =============================================================================
# GEO CALCULATOR
# =============================================================================


class TestGeoCalculator:
    def test_haversine_zero(self) -> None:
        assert GeoCalculator.haversine_distance_m(20.9, -156.3, 20.9, -156.3) == 0.0

    def test_haversine_symmetric(self) -> None:
        a = GeoCalculator.haversine_distance_m(43.4862, -116.1265, 43.8055, -115.8672)
        b = GeoCalculator.haversine_distance_m(43.8055, -115.8672, 43.4862, -116.1265)
        assert a == pytest.approx(b)
        assert 40_000 < a < 45_000

    def test_meters_to_degrees(self) -> None:
        assert GeoCalculator.meters_to_degrees(MapConfig.METERS_PER_DEGREE) == pytest.approx(1.0)
        assert GeoCalculator.meters_to_degrees(632) == pytest.approx(0.0056773, rel=1e-4)

    @pytest.mark.parametrize(
        "dlat,dlng,expected",
        [
            (0.0, 0.0, True),
            (0.25, -0.25, True),
            (0.5, 0.0, False),
            (0.0, -0.5, False),
            (0.75, 0.75, False),
        ],
    )
    def test_is_within_tolerance(self, dlat: float, dlng: float, expected: bool) -> None:
        assert GeoCalculator.is_within_tolerance(0.0, 0.0, dlat, dlng, tolerance_deg=0.5) is expected


# =============================================================================
# BOUNDS
# =============================================================================


class TestBounds:
    def test_from_coordinates(self) -> None:
        bounds = Bounds.from_coordinates(
            [Coordinate(lat=1.0, lng=5.0), Coordinate(lat=-2.0, lng=7.0), Coordinate(lat=0.5, lng=6.0)]
        )
        assert bounds == Bounds(south=-2.0, west=5.0, north=1.0, east=7.0)
        assert bounds.ns_extent == 3.0
        assert bounds.ew_extent == 2.0
        assert bounds.center == Coordinate(lat=-0.5, lng=6.0)

    def test_single_point_has_zero_extent(self) -> None:
        bounds = Bounds.from_coordinates([Coordinate(lat=1.0, lng=2.0)])
        assert bounds.ns_extent == 0.0
        assert bounds.contains(Coordinate(lat=1.0, lng=2.0))

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValueError, match="zero coordinates"):
            Bounds.from_coordinates([])

    def test_inverted_rejected(self) -> None:
        with pytest.raises(ValueError, match="Inverted"):
            Bounds(south=1.0, west=0.0, north=0.0, east=1.0)

    def test_around(self) -> None:
        bounds = Bounds.around(Coordinate(lat=10.0, lng=20.0), 0.5)
        assert (bounds.south, bounds.west, bounds.north, bounds.east) == (9.5, 19.5, 10.5, 20.5)
        assert bounds.north_west == Coordinate(lat=10.5, lng=19.5)
        assert bounds.south_east == Coordinate(lat=9.5, lng=20.5)

    def test_union(self) -> None:
        a = Bounds(south=0.0, west=0.0, north=1.0, east=1.0)
        b = Bounds(south=-1.0, west=0.5, north=0.5, east=3.0)
        assert bounds_union(a, b) == Bounds(south=-1.0, west=0.0, north=1.0, east=3.0)
        assert bounds_union(a) == a

    def test_union_needs_bounds(self) -> None:
        with pytest.raises(ValueError):
            bounds_union()

    def test_tolerance_box_is_lng_lat(self) -> None:
        box = tolerance_box(Coordinate(lat=10.0, lng=20.0), 0.5)
        assert box.bounds == (19.5, 9.5, 20.5, 10.5)
        assert box.area == pytest.approx(1.0)


# =============================================================================
# DECLUSTERER
# =============================================================================


class TestGridLayout:
    @pytest.mark.parametrize(
        "n,shape",
        [(0, (0, 0)), (1, (1, 1)), (2, (1, 2)), (3, (2, 2)), (4, (2, 2)), (5, (2, 3)), (9, (3, 3)), (10, (3, 4))],
    )
    def test_grid_shape(self, n: int, shape: tuple[int, int]) -> None:
        assert grid_shape(n) == shape

    def test_single_marker_not_moved(self) -> None:
        assert grid_offsets(1, BASE).tolist() == [[0.0, 0.0]]

    def test_empty_group(self) -> None:
        assert grid_offsets(0, BASE).shape == (0, 2)

    def test_four_markers_form_square(self) -> None:
        offsets = grid_offsets(4, 1.0)
        assert offsets.tolist() == [[-0.5, -0.5], [-0.5, 0.5], [0.5, -0.5], [0.5, 0.5]]

    def test_three_markers_leave_last_cell_empty(self) -> None:
        offsets = grid_offsets(3, 1.0)
        assert offsets.tolist() == [[-0.5, -0.5], [-0.5, 0.5], [0.5, -0.5]]

    @given(side=st.integers(min_value=1, max_value=8), columns_extra=st.integers(min_value=0, max_value=1))
    @settings(max_examples=30)
    def test_complete_grid_centroid_is_zero(self, side: int, columns_extra: int) -> None:
        """N = rows * columns: the mean offset is exactly zero."""
        n = side * (side + columns_extra)
        rows, columns = grid_shape(n)
        if rows * columns != n:
            return
        offsets = grid_offsets(n, BASE)
        assert np.allclose(offsets.mean(axis=0), 0.0, atol=1e-12)

    @given(n=st.integers(min_value=1, max_value=60))
    @settings(max_examples=60)
    def test_bounding_box_centered(self, n: int) -> None:
        offsets = grid_offsets(n, BASE)
        assert np.allclose(offsets.min(axis=0) + offsets.max(axis=0), 0.0, atol=1e-12)

    @given(n=st.integers(min_value=1, max_value=60))
    @settings(max_examples=60)
    def test_offsets_unique(self, n: int) -> None:
        offsets = grid_offsets(n, BASE)
        assert len({tuple(row) for row in offsets.round(12).tolist()}) == n


class TestLayoutMarkers:
    def test_group_uses_own_coordinates(self, make_event: Callable[..., LifecycleEvent]) -> None:
        """Slightly different coordinates in one group keep their own base point."""
        a = make_event("a", location=BIOCHAR_PLANT)
        b = make_event("b", location=(BIOCHAR_PLANT[0] + 0.00001, BIOCHAR_PLANT[1]))
        positions = decluster_group([a, b], base_offset_deg=1.0)
        assert positions[0] == a.coordinate.offset(dlat=0.0, dlng=-0.5)
        assert positions[1] == b.coordinate.offset(dlat=0.0, dlng=0.5)

    def test_grouping_by_rounded_coordinate(self, make_event: Callable[..., LifecycleEvent]) -> None:
        events = [
            make_event("a", location=BIOCHAR_PLANT),
            make_event("b", location=BIOCHAR_FIELD),
            make_event("c", location=BIOCHAR_PLANT),
        ]
        groups = group_by_rounded_coordinate(events, decimals=4)
        assert list(groups.values()) == [[0, 2], [1]]

    def test_isolated_events_stay_put(self, make_event: Callable[..., LifecycleEvent]) -> None:
        events = [make_event("a", location=BIOCHAR_PLANT), make_event("b", location=UNMATCHED)]
        placed = layout_markers(events)
        assert [m.position for m in placed] == [e.coordinate for e in events]

    def test_output_order_matches_input(self, make_event: Callable[..., LifecycleEvent]) -> None:
        events = [
            make_event("a", location=BIOCHAR_PLANT),
            make_event("b", location=BIOCHAR_FIELD),
            make_event("c", location=BIOCHAR_PLANT),
            make_event("d", location=BIOCHAR_FIELD),
        ]
        placed = layout_markers(events, indices=[10, 11, 12, 13])
        assert [m.event.id for m in placed] == ["a", "b", "c", "d"]
        assert [m.index for m in placed] == [10, 11, 12, 13]
        assert placed[0].position != placed[2].position
        assert len({m.position for m in placed}) == 4

    def test_indices_length_mismatch(self, make_event: Callable[..., LifecycleEvent]) -> None:
        with pytest.raises(ValueError, match="indices"):
            layout_markers([make_event()], indices=[0, 1])

    def test_empty(self) -> None:
        assert layout_markers([]) == []
