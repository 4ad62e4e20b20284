"""Geodesic helpers on Earth's surface.

Provides the small set of geographic calculations the map engine needs:
- Distance calculation (Haversine formula)
- Meter to degree conversion for fixed-size areas of interest
- Rectangular proximity test in degree space

All calculations use WGS84 spherical Earth approximation (R = 6,371 km).
"""

from math import atan2, cos, radians, sin, sqrt

from cdr_timeline.constants import MapConfig

# Earth's radius in meters (WGS84 spherical approximation)
EARTH_RADIUS_M = 6_371_000


class GeoCalculator:
    """Static methods for geodesic calculations.

    Coordinates are in decimal degrees (WGS84).
    Distances are in meters.
    """

    EARTH_RADIUS_M = EARTH_RADIUS_M

    @staticmethod
    def haversine_distance_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
        """Calculate great-circle distance between two points using Haversine formula.

        Args:
            lat1: Latitude of first point (decimal degrees)
            lng1: Longitude of first point (decimal degrees)
            lat2: Latitude of second point (decimal degrees)
            lng2: Longitude of second point (decimal degrees)

        Returns:
            Distance in meters.
        """
        dlat = radians(lat2 - lat1)
        dlng = radians(lng2 - lng1)
        a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlng / 2) ** 2
        return EARTH_RADIUS_M * 2 * atan2(sqrt(a), sqrt(1 - a))

    @staticmethod
    def meters_to_degrees(meters: float) -> float:
        """Convert a ground distance to degrees using the equatorial scale.

        Applied to both axes: the map engine works with plain lat/lng
        rectangles, not projected areas.
        """
        return meters / MapConfig.METERS_PER_DEGREE

    @staticmethod
    def is_within_tolerance(
        lat1: float,
        lng1: float,
        lat2: float,
        lng2: float,
        tolerance_deg: float,
    ) -> bool:
        """True if both |Δlat| and |Δlng| are strictly below the tolerance."""
        return abs(lat1 - lat2) < tolerance_deg and abs(lng1 - lng2) < tolerance_deg
