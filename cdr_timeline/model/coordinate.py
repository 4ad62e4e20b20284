"""Coordinate - The geometry atom of the lifecycle map.

A Coordinate is a (latitude, longitude) pair in decimal degrees.
It is copied by value everywhere and never mutated.
"""

import math
from dataclasses import dataclass

from cdr_timeline.core.geo_calculator import GeoCalculator


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 point.

    Attributes:
        lat: Latitude in decimal degrees
        lng: Longitude in decimal degrees

    Example:
        reactor = Coordinate(lat=20.9211, lng=-156.3087)
    """

    lat: float
    lng: float

    def __post_init__(self) -> None:
        """Validate data after initialization."""
        if math.isnan(self.lat) or math.isnan(self.lng):
            raise ValueError(f"Coordinate cannot contain NaN ({self.lat}, {self.lng})")
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude {self.lat} outside [-90, 90]")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"Longitude {self.lng} outside [-180, 180]")

    @property
    def lat_lng(self) -> tuple[float, float]:
        """Return (lat, lng) tuple - standard geographic order."""
        return (self.lat, self.lng)

    @property
    def lng_lat(self) -> tuple[float, float]:
        """Return (lng, lat) tuple - GeoJSON/Pydeck order."""
        return (self.lng, self.lat)

    def offset(self, dlat: float, dlng: float) -> "Coordinate":
        """Return a new coordinate shifted by the given degrees."""
        return Coordinate(lat=self.lat + dlat, lng=self.lng + dlng)

    def rounded_key(self, decimals: int) -> str:
        """Grouping key with both components formatted to fixed decimals."""
        return f"{self.lat:.{decimals}f},{self.lng:.{decimals}f}"

    def distance_to(self, other: "Coordinate") -> float:
        """Great-circle distance to another coordinate in meters."""
        return GeoCalculator.haversine_distance_m(
            lat1=self.lat,
            lng1=self.lng,
            lat2=other.lat,
            lng2=other.lng,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "Coordinate":
        """Create Coordinate from a {"lat": ..., "lng": ...} mapping."""
        return cls(lat=float(data["lat"]), lng=float(data["lng"]))

    def __repr__(self) -> str:
        return f"Coordinate(lat={self.lat:.5f}, lng={self.lng:.5f})"
