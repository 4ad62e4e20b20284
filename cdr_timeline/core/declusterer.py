"""Marker Declusterer - spreads co-located event markers into a grid.

Events are grouped by their coordinate rounded to a fixed precision
(not by canonical location), so closely spaced events decluster even
away from the anchors. Within a group of N events the markers form a
grid of ceil(sqrt(N)) columns centered on the original coordinate:

    N=1: (0, 0)
    N=4: 2x2 grid, offsets of ±base/2
    N=3: 2 columns, 2 rows, last cell empty

For complete grids (N = rows * columns) the mean offset is exactly zero.
For partial grids the bounding box of the grid stays centered while the
mean shifts towards the filled cells.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from cdr_timeline.constants import DeclusterConfig
from cdr_timeline.model.coordinate import Coordinate
from cdr_timeline.model.event import LifecycleEvent


@dataclass(frozen=True)
class PlacedMarker:
    """An event with its on-map marker position.

    Attributes:
        index: Position of the event in the project sequence
        event: The event itself
        position: Declustered marker coordinate
    """

    index: int
    event: LifecycleEvent
    position: Coordinate


def grid_shape(n: int) -> tuple[int, int]:
    """Return (rows, columns) of the grid holding n markers."""
    if n <= 0:
        return (0, 0)
    columns = math.ceil(math.sqrt(n))
    rows = math.ceil(n / columns)
    return (rows, columns)


def grid_offsets(n: int, base_offset_deg: float = DeclusterConfig.BASE_OFFSET_DEG) -> np.ndarray:
    """Offsets for n grid cells filled row by row.

    Returns:
        Array of shape (n, 2) with (Δlat, Δlng) per item, in input order.
    """
    rows, columns = grid_shape(n)
    if n == 0:
        return np.zeros((0, 2))
    local = np.arange(n)
    row = local // columns
    col = local % columns
    dlat = (row - (rows - 1) / 2) * base_offset_deg
    dlng = (col - (columns - 1) / 2) * base_offset_deg
    return np.column_stack((dlat, dlng))


def decluster_group(
    events: Sequence[LifecycleEvent],
    base_offset_deg: float = DeclusterConfig.BASE_OFFSET_DEG,
) -> list[Coordinate]:
    """Marker positions for events sharing an approximate coordinate.

    The i-th output belongs to the i-th input event. Offsets are applied
    to each event's own coordinate.
    """
    offsets = grid_offsets(len(events), base_offset_deg)
    return [
        event.coordinate.offset(dlat=float(dlat), dlng=float(dlng))
        for event, (dlat, dlng) in zip(events, offsets, strict=True)
    ]


def group_by_rounded_coordinate(
    events: Sequence[LifecycleEvent],
    decimals: int = DeclusterConfig.GROUP_KEY_DECIMALS,
) -> dict[str, list[int]]:
    """Event indices grouped under their rounded "lat,lng" key.

    Groups appear in first-seen order and keep input order inside.
    """
    groups: dict[str, list[int]] = {}
    for index, event in enumerate(events):
        groups.setdefault(event.coordinate.rounded_key(decimals), []).append(index)
    return groups


def layout_markers(
    events: Sequence[LifecycleEvent],
    base_offset_deg: float = DeclusterConfig.BASE_OFFSET_DEG,
    decimals: int = DeclusterConfig.GROUP_KEY_DECIMALS,
    indices: Sequence[int] | None = None,
) -> list[PlacedMarker]:
    """Place all events, declustering each rounded-coordinate group.

    Args:
        events: Events to place
        base_offset_deg: Grid spacing
        decimals: Precision of the grouping key
        indices: Project sequence index of each event (defaults to 0..N-1)

    Returns:
        One PlacedMarker per event, in input order.
    """
    if indices is None:
        indices = range(len(events))
    elif len(indices) != len(events):
        raise ValueError(f"Got {len(indices)} indices for {len(events)} events")

    positions: list[Coordinate | None] = [None] * len(events)
    for members in group_by_rounded_coordinate(events, decimals).values():
        placed = decluster_group([events[i] for i in members], base_offset_deg)
        for local, position in zip(members, placed, strict=True):
            positions[local] = position

    return [
        PlacedMarker(index=index, event=event, position=position)
        for index, event, position in zip(indices, events, positions, strict=True)
    ]
