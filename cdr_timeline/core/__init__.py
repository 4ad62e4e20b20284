"""Core engine: geometry, classification, declustering, paths and viewports.

- GeoCalculator: Geodesic calculations (distances, tolerance tests)
- Bounds: lat/lng rectangles (import from geometry)
- classify / group_events_by_location (import from location_classifier)
- layout_markers (import from declusterer)
- resolve_highlighted_path (import from path_resolver)
- compute_viewport / ViewportController (import from viewport)

Only GeoCalculator is re-exported here. The other modules import the
model package, which itself imports GeoCalculator; import them directly.
"""

from cdr_timeline.core.geo_calculator import GeoCalculator

__all__ = [
    "GeoCalculator",
]
