"""Project - A carbon-removal project and its ordered lifecycle events.

The Project owns its events exclusively. Event order is insertion order
(chronological intent); timestamps are only used to sort within timeline
sections.

Validation happens at load: a project that reaches the map engine has
parseable timestamps, known categories and a non-overlapping anchor
configuration.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from cdr_timeline.constants import ProjectConfig
from cdr_timeline.model.canonical_location import (
    CanonicalLocation,
    LocationRole,
    Methodology,
    default_canonical_locations,
)
from cdr_timeline.model.coordinate import Coordinate
from cdr_timeline.model.errors import CanonicalLocationError, DataValidationError
from cdr_timeline.model.event import LifecycleEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchMaterial:
    name: str
    percentage: float
    weight: float
    unit: str


@dataclass(frozen=True)
class BatchInfo:
    """Feedstock batch composition."""

    materials: tuple[BatchMaterial, ...] = ()
    total_weight: float = 0.0
    unit: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BatchInfo":
        return cls(
            materials=tuple(
                BatchMaterial(
                    name=m["name"],
                    percentage=float(m["percentage"]),
                    weight=float(m["weight"]),
                    unit=m["unit"],
                )
                for m in data.get("materials", [])
            ),
            total_weight=float(data.get("totalWeight", 0.0)),
            unit=data.get("unit", ""),
        )


@dataclass(frozen=True)
class GrossRemovals:
    """Inputs of the gross removals calculation shown on the project page."""

    material_amount: float = 0.0
    stable_carbon_factor: float = 0.0
    negative_emission_conversion: float = 0.0
    co2_c_ratio: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GrossRemovals":
        return cls(
            material_amount=float(data.get("materialAmount", 0.0)),
            stable_carbon_factor=float(data.get("stableCarbonFactor", 0.0)),
            negative_emission_conversion=float(data.get("negativeEmissionConversion", 0.0)),
            co2_c_ratio=data.get("co2CRatio", ""),
        )


@dataclass(frozen=True)
class Project:
    """A project with its events and canonical locations.

    Attributes:
        id: Project identifier used by the data provider
        name: Display name
        methodology: Biochar or enhanced rock weathering
        home: Project base coordinate (map home view)
        events: Lifecycle events in project order
        canonical_locations: Exactly three anchors in role order
        co2_quantity: Net CO2 removal credited to the project (tonnes)
    """

    id: str
    name: str
    methodology: Methodology
    home: Coordinate
    events: tuple[LifecycleEvent, ...]
    canonical_locations: tuple[CanonicalLocation, ...]
    co2_quantity: float = 0.0
    date: str = ""
    protocol: str | None = None
    registry_project_id: str | None = None
    design_document_url: str | None = None
    batch_info: BatchInfo = field(default_factory=BatchInfo)
    gross_removals: GrossRemovals = field(default_factory=GrossRemovals)

    @property
    def is_erw(self) -> bool:
        """True for enhanced rock weathering projects."""
        return self.methodology == Methodology.ENHANCED_ROCK_WEATHERING

    @property
    def event_count(self) -> int:
        return len(self.events)

    @property
    def gross_removals_t(self) -> float:
        """Displayed gross removals figure (tonnes CO2e)."""
        return self.co2_quantity + ProjectConfig.GROSS_REMOVALS_OFFSET_T

    @property
    def total_event_impact_t(self) -> float:
        """Sum of signed CO2 impacts over all events."""
        return sum(event.co2_impact for event in self.events)

    def canonical_location(self, role: LocationRole) -> CanonicalLocation:
        """Anchor for a role (every validated project has all three)."""
        for location in self.canonical_locations:
            if location.role == role:
                return location
        raise KeyError(f"Project {self.id} has no anchor for role {role.value}")

    def event_at(self, index: int | None) -> LifecycleEvent | None:
        """Event at a sequence index, or None if out of range."""
        if index is None or not 0 <= index < len(self.events):
            return None
        return self.events[index]

    def __repr__(self) -> str:
        return f"Project({self.id}, {self.methodology.value}, events={len(self.events)})"


def parse_project(data: dict[str, Any]) -> Project:
    """Build and validate a Project from the JSON format.

    Raises:
        DataValidationError: On missing fields, unknown methodology or
            invalid event data.
        CanonicalLocationError: On an invalid anchor configuration.
    """
    # Imported here: core modules import the model package
    from cdr_timeline.core.location_classifier import validate_canonical_locations

    project_id = data.get("id")
    if not project_id:
        raise DataValidationError(f"Project without id: {sorted(data)}")

    raw_methodology = data.get("methodology") or ProjectConfig.DEFAULT_METHODOLOGY
    try:
        methodology = Methodology(raw_methodology)
    except ValueError as e:
        raise DataValidationError(f"Project {project_id}: unknown methodology {raw_methodology!r}") from e

    try:
        home = Coordinate.from_dict(data["location"])
    except (KeyError, TypeError, ValueError) as e:
        raise DataValidationError(f"Project {project_id}: invalid home location {data.get('location')!r}") from e

    events = tuple(LifecycleEvent.from_dict(raw) for raw in data.get("events", []))
    seen: set[str] = set()
    for event in events:
        if event.id in seen:
            raise DataValidationError(f"Project {project_id}: duplicate event id {event.id}")
        seen.add(event.id)

    raw_anchors = data.get("canonicalLocations")
    if raw_anchors:
        try:
            anchors = tuple(CanonicalLocation.from_dict(raw) for raw in raw_anchors)
        except (KeyError, TypeError, ValueError) as e:
            raise CanonicalLocationError(f"Project {project_id}: malformed canonical location ({e})") from e
        order = list(LocationRole)
        anchors = tuple(sorted(anchors, key=lambda loc: order.index(loc.role)))
    else:
        anchors = default_canonical_locations(methodology)
    validate_canonical_locations(anchors)

    project = Project(
        id=project_id,
        name=data.get("name", project_id),
        methodology=methodology,
        home=home,
        events=events,
        canonical_locations=anchors,
        co2_quantity=float(data.get("co2Quantity", 0.0)),
        date=data.get("date", ""),
        protocol=data.get("protocol"),
        registry_project_id=data.get("projectId"),
        design_document_url=data.get("projectDesignDocument"),
        batch_info=BatchInfo.from_dict(data.get("batchInfo", {})),
        gross_removals=GrossRemovals.from_dict(data.get("grossRemovals", {})),
    )
    logger.info(f"Loaded {project!r}")
    return project
