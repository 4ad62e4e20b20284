"""CanonicalLocation - Named anchor sites of a project lifecycle.

Every project has exactly three anchors, one per LocationRole, whose
coordinates and labels depend on the project's methodology:

    biochar:                  project prep -> pyrolysis plant -> application field
    enhanced_rock_weathering: feedstock source -> staging grounds -> application field
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from cdr_timeline.constants import LocationConfig
from cdr_timeline.model.coordinate import Coordinate


class Methodology(str, Enum):
    """Carbon-removal methodology variant."""

    BIOCHAR = "biochar"
    ENHANCED_ROCK_WEATHERING = "enhanced_rock_weathering"


class LocationRole(str, Enum):
    """Canonical location role, declared in classification order."""

    PROJECT_PREP = "project_prep"
    PROCESSING = "processing"
    APPLICATION = "application"


assert [m.value for m in Methodology] == LocationConfig.METHODOLOGIES
assert [r.value for r in LocationRole] == LocationConfig.ROLES


@dataclass(frozen=True)
class CanonicalLocation:
    """A named anchor with a proximity tolerance.

    Attributes:
        role: Which lifecycle site this anchor represents
        coordinate: Anchor position
        tolerance_deg: Max |Δlat| and |Δlng| still considered "at" the anchor
        label: Long display name (timeline section header)
        short_label: Short display name (map popup)
    """

    role: LocationRole
    coordinate: Coordinate
    tolerance_deg: float = LocationConfig.TOLERANCE_DEG
    label: str = ""
    short_label: str = ""

    def __post_init__(self) -> None:
        """Validate data after initialization."""
        if self.tolerance_deg <= 0:
            raise ValueError(f"Tolerance for {self.role.value} must be positive, got {self.tolerance_deg}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CanonicalLocation":
        """Create CanonicalLocation from the project JSON format."""
        return cls(
            role=LocationRole(data["role"]),
            coordinate=Coordinate.from_dict(data["location"]),
            tolerance_deg=float(data.get("toleranceDeg", LocationConfig.TOLERANCE_DEG)),
            label=data.get("label", ""),
            short_label=data.get("shortLabel", ""),
        )


def default_canonical_locations(methodology: Methodology) -> tuple[CanonicalLocation, ...]:
    """Built-in anchors for a methodology, in role order."""
    anchors = LocationConfig.DEFAULT_ANCHORS[methodology.value]
    return tuple(
        CanonicalLocation(
            role=role,
            coordinate=Coordinate(lat=anchors[role.value][0], lng=anchors[role.value][1]),
            tolerance_deg=LocationConfig.TOLERANCE_DEG,
            label=anchors[role.value][2],
            short_label=anchors[role.value][3],
        )
        for role in LocationRole
    )
