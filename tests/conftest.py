"""Shared pytest fixtures for cdr_timeline tests.

Provides a fake clock driving PollingScheduler, event/project builders and
the bundled sample repository. No fixture touches the network.

COORDINATES:
    Biochar tests use the default Maui anchors, ERW tests the default Idaho
    anchors (see LocationConfig.DEFAULT_ANCHORS). Events placed exactly on
    an anchor classify to it; the "unmatched" coordinate is far from all.
"""

from collections.abc import Callable, Iterator
from typing import Any

import pytest

from cdr_timeline.constants import LocationConfig
from cdr_timeline.model.event import LifecycleEvent
from cdr_timeline.model.project import Project, parse_project
from cdr_timeline.model.repository import ProjectRepository
from cdr_timeline.ui.playback import PlaybackController
from cdr_timeline.ui.scheduler import PollingScheduler

BIOCHAR = LocationConfig.DEFAULT_ANCHORS["biochar"]
ERW = LocationConfig.DEFAULT_ANCHORS["enhanced_rock_weathering"]

BIOCHAR_PREP = (BIOCHAR["project_prep"][0], BIOCHAR["project_prep"][1])
BIOCHAR_PLANT = (BIOCHAR["processing"][0], BIOCHAR["processing"][1])
BIOCHAR_FIELD = (BIOCHAR["application"][0], BIOCHAR["application"][1])
ERW_SOURCE = (ERW["project_prep"][0], ERW["project_prep"][1])
ERW_STAGING = (ERW["processing"][0], ERW["processing"][1])
ERW_FIELD = (ERW["application"][0], ERW["application"][1])
UNMATCHED = (21.5, -157.5)


# =============================================================================
# CLOCK AND SCHEDULER
# =============================================================================


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler(clock: FakeClock) -> PollingScheduler:
    return PollingScheduler(clock=clock)


@pytest.fixture
def tick(clock: FakeClock, scheduler: PollingScheduler) -> Callable[[float], int]:
    """Advance the fake clock by seconds and poll. Returns callbacks fired."""

    def _tick(seconds: float) -> int:
        clock.advance(seconds)
        return scheduler.poll()

    return _tick


@pytest.fixture
def playback(scheduler: PollingScheduler) -> Iterator[PlaybackController]:
    controller = PlaybackController(scheduler)
    yield controller
    controller.close()


# =============================================================================
# EVENT AND PROJECT BUILDERS
# =============================================================================


def event_dict(
    event_id: str,
    event_type: str,
    location: tuple[float, float],
    timestamp: str = "2024-03-01T09:00:00Z",
    co2_impact: float = 0.0,
    **extra: Any,
) -> dict[str, Any]:
    """Raw event in the project JSON format."""
    return {
        "id": event_id,
        "type": event_type,
        "title": f"Event {event_id}",
        "description": f"{event_type} at {location}",
        "imageUrl": "",
        "location": {"lat": location[0], "lng": location[1]},
        "timestamp": timestamp,
        "co2Impact": co2_impact,
        **extra,
    }


def project_dict(
    project_id: str,
    events: list[dict[str, Any]],
    methodology: str | None = "biochar",
    home: tuple[float, float] = BIOCHAR_PLANT,
    **extra: Any,
) -> dict[str, Any]:
    """Raw project in the project JSON format."""
    data: dict[str, Any] = {
        "id": project_id,
        "name": f"Project {project_id}",
        "co2Quantity": 10.0,
        "location": {"lat": home[0], "lng": home[1]},
        "date": "2024-03-01",
        "events": events,
        **extra,
    }
    if methodology is not None:
        data["methodology"] = methodology
    return data


@pytest.fixture
def make_event() -> Callable[..., LifecycleEvent]:
    """Factory for single LifecycleEvents."""

    def _make(
        event_id: str = "e1",
        event_type: str = "pyrolysis",
        location: tuple[float, float] = BIOCHAR_PLANT,
        timestamp: str = "2024-03-01T09:00:00Z",
        co2_impact: float = 0.0,
    ) -> LifecycleEvent:
        return LifecycleEvent.from_dict(event_dict(event_id, event_type, location, timestamp, co2_impact))

    return _make


@pytest.fixture
def biochar_project() -> Project:
    """Biochar project with events at all anchors plus one unmatched.

    Index: type (location)
        0: feedstock_provisioning (prep)
        1: feedstock_delivery (plant)       transport prep -> plant
        2: pyrolysis (plant)
        3: biochar_delivery (field)         transport plant -> field
        4: biochar_application (field)
        5: sensor_reading (unmatched)
    """
    return parse_project(
        project_dict(
            "bc",
            [
                event_dict("bc-0", "feedstock_provisioning", BIOCHAR_PREP, "2024-03-01T09:00:00Z", -0.4),
                event_dict("bc-1", "feedstock_delivery", BIOCHAR_PLANT, "2024-03-03T09:00:00Z", -0.1),
                event_dict("bc-2", "pyrolysis", BIOCHAR_PLANT, "2024-03-02T09:00:00Z", -0.3),
                event_dict("bc-3", "biochar_delivery", BIOCHAR_FIELD, "2024-03-05T09:00:00Z", -0.1),
                event_dict("bc-4", "biochar_application", BIOCHAR_FIELD, "2024-03-06T09:00:00Z", 12.0),
                event_dict("bc-5", "sensor_reading", UNMATCHED, "2024-03-07T09:00:00Z"),
            ],
        )
    )


@pytest.fixture
def erw_project() -> Project:
    """ERW project with events at all three Idaho anchors.

    Index: type (location)
        0: rock_characterization (source)
        1: feedstock_delivery_source_to_staging (staging)
        2: feedstock_delivery_staging_to_field (field)
        3: rock_application (field)
    """
    return parse_project(
        project_dict(
            "erw",
            [
                event_dict("erw-0", "rock_characterization", ERW_SOURCE, "2024-05-10T09:00:00Z"),
                event_dict("erw-1", "feedstock_delivery_source_to_staging", ERW_STAGING, "2024-05-14T09:00:00Z", -1.8),
                event_dict("erw-2", "feedstock_delivery_staging_to_field", ERW_FIELD, "2024-05-20T09:00:00Z", -0.6),
                event_dict("erw-3", "rock_application", ERW_FIELD, "2024-05-21T09:00:00Z", 50.6),
            ],
            methodology="enhanced_rock_weathering",
            home=ERW_STAGING,
        )
    )


@pytest.fixture
def three_event_project() -> Project:
    """Three non-transport events at the reactor, for playback timing tests."""
    return parse_project(
        project_dict(
            "three",
            [
                event_dict(f"t-{i}", "pyrolysis", BIOCHAR_PLANT, f"2024-03-0{i + 1}T09:00:00Z")
                for i in range(3)
            ],
        )
    )


@pytest.fixture
def empty_project() -> Project:
    return parse_project(project_dict("empty", []))


@pytest.fixture
def repository() -> ProjectRepository:
    return ProjectRepository.default()
