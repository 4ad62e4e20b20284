"""Rectangular lat/lng bounds.

Bounds are plain degree rectangles (south, west, north, east). Shapely
does the min/max reduction and box intersection work; no projection is
applied.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from shapely.geometry import MultiPoint, Polygon, box

from cdr_timeline.model.coordinate import Coordinate


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned lat/lng rectangle.

    Attributes:
        south: Minimum latitude
        west: Minimum longitude
        north: Maximum latitude
        east: Maximum longitude
    """

    south: float
    west: float
    north: float
    east: float

    def __post_init__(self) -> None:
        """Validate data after initialization."""
        if self.south > self.north or self.west > self.east:
            raise ValueError(f"Inverted bounds: {self}")

    @classmethod
    def from_coordinates(cls, coordinates: Iterable[Coordinate]) -> "Bounds":
        """Smallest rectangle containing all coordinates.

        Raises:
            ValueError: If no coordinates are given.
        """
        points = [c.lng_lat for c in coordinates]
        if not points:
            raise ValueError("Cannot build bounds from zero coordinates")
        min_lng, min_lat, max_lng, max_lat = MultiPoint(points).bounds
        return cls(south=min_lat, west=min_lng, north=max_lat, east=max_lng)

    @classmethod
    def around(cls, center: Coordinate, half_side_deg: float) -> "Bounds":
        """Square of side 2 * half_side_deg centered on a coordinate."""
        return cls(
            south=center.lat - half_side_deg,
            west=center.lng - half_side_deg,
            north=center.lat + half_side_deg,
            east=center.lng + half_side_deg,
        )

    @property
    def ns_extent(self) -> float:
        """North-south extent in degrees."""
        return self.north - self.south

    @property
    def ew_extent(self) -> float:
        """East-west extent in degrees."""
        return self.east - self.west

    @property
    def center(self) -> Coordinate:
        return Coordinate(lat=(self.south + self.north) / 2, lng=(self.west + self.east) / 2)

    @property
    def south_west(self) -> Coordinate:
        return Coordinate(lat=self.south, lng=self.west)

    @property
    def north_east(self) -> Coordinate:
        return Coordinate(lat=self.north, lng=self.east)

    @property
    def north_west(self) -> Coordinate:
        return Coordinate(lat=self.north, lng=self.west)

    @property
    def south_east(self) -> Coordinate:
        return Coordinate(lat=self.south, lng=self.east)

    def contains(self, coordinate: Coordinate) -> bool:
        """True if the coordinate lies inside or on the edge."""
        return self.south <= coordinate.lat <= self.north and self.west <= coordinate.lng <= self.east

    def union(self, other: "Bounds") -> "Bounds":
        return Bounds(
            south=min(self.south, other.south),
            west=min(self.west, other.west),
            north=max(self.north, other.north),
            east=max(self.east, other.east),
        )

    def to_box(self) -> Polygon:
        """Shapely polygon in (lng, lat) order."""
        return box(self.west, self.south, self.east, self.north)


def bounds_union(*bounds: Bounds) -> Bounds:
    """Smallest rectangle containing all given bounds.

    Raises:
        ValueError: If no bounds are given.
    """
    if not bounds:
        raise ValueError("bounds_union needs at least one Bounds")
    result = bounds[0]
    for other in bounds[1:]:
        result = result.union(other)
    return result


def tolerance_box(center: Coordinate, tolerance_deg: float) -> Polygon:
    """Shapely box of all points within a rectangular tolerance of center."""
    return Bounds.around(center, tolerance_deg).to_box()
