"""Data model classes for carbon-removal project timelines.

- Coordinate: Geometry atom (lat, lng)
- CanonicalLocation: Named anchor site with a proximity tolerance
- LifecycleEvent: Immutable geotagged project step
- Project: Ordered events, methodology and anchors
- ProjectRepository: JSON-backed project provider
"""

from cdr_timeline.model.canonical_location import (
    CanonicalLocation,
    LocationRole,
    Methodology,
    default_canonical_locations,
)
from cdr_timeline.model.coordinate import Coordinate
from cdr_timeline.model.errors import CanonicalLocationError, DataValidationError
from cdr_timeline.model.event import (
    BlockchainProof,
    EventCategory,
    FeedstockDetails,
    LifecycleEvent,
    SensorReading,
)
from cdr_timeline.model.project import BatchInfo, GrossRemovals, Project, parse_project
from cdr_timeline.model.repository import ProjectRepository

__all__ = [
    "Coordinate",
    "Methodology",
    "LocationRole",
    "CanonicalLocation",
    "default_canonical_locations",
    "EventCategory",
    "BlockchainProof",
    "FeedstockDetails",
    "SensorReading",
    "LifecycleEvent",
    "BatchInfo",
    "GrossRemovals",
    "Project",
    "parse_project",
    "ProjectRepository",
    "DataValidationError",
    "CanonicalLocationError",
]
