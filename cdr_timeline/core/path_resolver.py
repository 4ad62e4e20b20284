"""Path Resolver - transport legs and connector paths between anchors.

A transport event highlights the leg between two canonical locations,
looked up in PathConfig.TRANSPORT_LEGS for the project's methodology.
Each methodology has its own table; a category that is a transport leg
for one methodology is not one for the other.

Anchor coordinates come from resolve_anchor_coordinates(): a role
whose anchor has no events is unknown, and paths touching it are not
drawn.
"""

import logging
from collections.abc import Mapping, Sequence

from cdr_timeline.constants import PathConfig
from cdr_timeline.model.canonical_location import LocationRole, Methodology
from cdr_timeline.model.coordinate import Coordinate
from cdr_timeline.model.event import EventCategory, LifecycleEvent

logger = logging.getLogger(__name__)

HighlightedPath = tuple[Coordinate, ...]

# methodology -> category -> (origin, destination), built once from config
TRANSPORT_LEGS: dict[Methodology, dict[EventCategory, tuple[LocationRole, LocationRole]]] = {
    Methodology(methodology): {
        EventCategory(category): (LocationRole(origin), LocationRole(destination))
        for category, (origin, destination) in legs.items()
    }
    for methodology, legs in PathConfig.TRANSPORT_LEGS.items()
}
assert set(TRANSPORT_LEGS) == set(Methodology), "Every methodology needs a transport table"

MAIN_CONNECTORS: tuple[tuple[LocationRole, LocationRole], ...] = tuple(
    (LocationRole(origin), LocationRole(destination)) for origin, destination in PathConfig.MAIN_CONNECTORS
)


def transport_leg(category: EventCategory, methodology: Methodology) -> tuple[LocationRole, LocationRole] | None:
    """(origin, destination) roles of a transport category, or None."""
    return TRANSPORT_LEGS[methodology].get(category)


def is_transport_event(category: EventCategory, methodology: Methodology) -> bool:
    return transport_leg(category, methodology) is not None


def resolve_highlighted_path(
    event: LifecycleEvent | None,
    methodology: Methodology,
    anchors: Mapping[LocationRole, Coordinate],
) -> HighlightedPath | None:
    """Two-point path for a transport event, or None.

    Args:
        event: Selected event (None means nothing selected)
        methodology: Project methodology selecting the transport table
        anchors: Known anchor coordinates by role

    Returns:
        (origin, destination) when the event is a transport leg and both
        endpoint roles are known; None otherwise. Never raises.
    """
    if event is None:
        return None
    leg = transport_leg(event.category, methodology)
    if leg is None:
        return None
    origin, destination = leg
    if origin not in anchors or destination not in anchors:
        logger.debug(f"No path for {event.id}: anchor {origin.value} or {destination.value} unknown")
        return None
    return (anchors[origin], anchors[destination])


def main_location_paths(anchors: Mapping[LocationRole, Coordinate]) -> list[HighlightedPath]:
    """Always-shown connectors (prep -> processing -> application) between known anchors."""
    return [
        (anchors[origin], anchors[destination])
        for origin, destination in MAIN_CONNECTORS
        if origin in anchors and destination in anchors
    ]


def path_length_m(path: Sequence[Coordinate]) -> float:
    """Sum of great-circle leg lengths along a path in meters."""
    return sum(a.distance_to(b) for a, b in zip(path, path[1:]))
