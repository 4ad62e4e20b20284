"""Location Classifier - matches event coordinates to canonical anchors.

Classification is first-match-wins over anchors in LocationRole order
(project prep -> processing -> application). A correctly configured
project never has a coordinate inside two anchors' tolerance boxes;
validate_canonical_locations() enforces this at project load so that
classify() never has to break ties.

Unmatched coordinates are a normal result (None), not an error.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from itertools import combinations
from typing import TYPE_CHECKING

from cdr_timeline.core.geo_calculator import GeoCalculator
from cdr_timeline.core.geometry import tolerance_box
from cdr_timeline.model.canonical_location import CanonicalLocation, LocationRole
from cdr_timeline.model.coordinate import Coordinate
from cdr_timeline.model.errors import CanonicalLocationError
from cdr_timeline.model.event import LifecycleEvent

if TYPE_CHECKING:
    from cdr_timeline.model.project import Project

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexedEvent:
    """An event together with its position in the project sequence."""

    index: int
    event: LifecycleEvent


def _in_role_order(locations: Iterable[CanonicalLocation]) -> list[CanonicalLocation]:
    order = list(LocationRole)
    return sorted(locations, key=lambda loc: order.index(loc.role))


def classify(coordinate: Coordinate, canonical_locations: Iterable[CanonicalLocation]) -> LocationRole | None:
    """Return the role of the first anchor whose tolerance box holds the coordinate.

    Args:
        coordinate: Point to classify
        canonical_locations: The project's anchors (any order; iterated in role order)

    Returns:
        Matching LocationRole, or None if the coordinate is unmatched.
    """
    for location in _in_role_order(canonical_locations):
        if GeoCalculator.is_within_tolerance(
            lat1=coordinate.lat,
            lng1=coordinate.lng,
            lat2=location.coordinate.lat,
            lng2=location.coordinate.lng,
            tolerance_deg=location.tolerance_deg,
        ):
            return location.role
    return None


def validate_canonical_locations(canonical_locations: Sequence[CanonicalLocation]) -> None:
    """Check a project's anchor configuration.

    Raises:
        CanonicalLocationError: If roles are missing or repeated, or if two
            anchors' tolerance boxes overlap.
    """
    roles = [loc.role for loc in canonical_locations]
    if set(roles) != set(LocationRole) or len(roles) != len(LocationRole):
        raise CanonicalLocationError(
            f"Expected exactly one anchor per role {[r.value for r in LocationRole]}, got {[r.value for r in roles]}"
        )

    for a, b in combinations(canonical_locations, 2):
        overlap = tolerance_box(a.coordinate, a.tolerance_deg).intersection(
            tolerance_box(b.coordinate, b.tolerance_deg)
        )
        # Tolerance tests are strict, so boxes that only touch never share a point
        if overlap.area > 0:
            raise CanonicalLocationError(
                f"Anchors {a.role.value} and {b.role.value} have overlapping tolerance regions "
                f"({a.coordinate} ±{a.tolerance_deg}°, {b.coordinate} ±{b.tolerance_deg}°)"
            )


def resolve_anchor_coordinates(
    events: Iterable[LifecycleEvent],
    canonical_locations: Sequence[CanonicalLocation],
) -> dict[LocationRole, Coordinate]:
    """Coordinates of the anchors that actually have events.

    For each role, the coordinate of the first event classified to it.
    Roles without any event are absent from the result.
    """
    anchors: dict[LocationRole, Coordinate] = {}
    for event in events:
        role = classify(event.coordinate, canonical_locations)
        if role is not None and role not in anchors:
            anchors[role] = event.coordinate
    missing = [role.value for role in LocationRole if role not in anchors]
    if missing:
        logger.debug(f"No events at canonical locations: {missing}")
    return anchors


def group_events_by_location(project: "Project") -> dict[LocationRole, list[IndexedEvent]]:
    """Timeline sections: events per canonical location, oldest first.

    Every role is present (possibly empty). Unmatched events are left out.
    Sorting is stable, so events with equal timestamps keep project order.
    """
    groups: dict[LocationRole, list[IndexedEvent]] = {role: [] for role in LocationRole}
    unmatched = 0
    for index, event in enumerate(project.events):
        role = classify(event.coordinate, project.canonical_locations)
        if role is None:
            unmatched += 1
            continue
        groups[role].append(IndexedEvent(index=index, event=event))

    for entries in groups.values():
        entries.sort(key=lambda entry: entry.event.timestamp)

    if unmatched:
        logger.info(f"Project {project.id}: {unmatched} event(s) outside canonical locations")
    return groups
