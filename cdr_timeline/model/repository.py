"""ProjectRepository - JSON-backed project data provider.

Loads and validates every project of a JSON file once. Lookups by id
return None for unknown projects: "not found" is an expected outcome.
"""

import json
import logging
from pathlib import Path
from typing import Any

from cdr_timeline.constants import DEFAULT_PROJECTS_PATH
from cdr_timeline.model.errors import DataValidationError
from cdr_timeline.model.project import Project, parse_project

logger = logging.getLogger(__name__)


class ProjectRepository:
    """Immutable collection of validated projects keyed by id."""

    def __init__(self, projects: list[Project]) -> None:
        self._projects: dict[str, Project] = {}
        for project in projects:
            if project.id in self._projects:
                raise DataValidationError(f"Duplicate project id {project.id}")
            self._projects[project.id] = project

    @classmethod
    def from_records(cls, records: list[dict[str, Any]]) -> "ProjectRepository":
        """Parse raw project dicts. Any invalid project fails the whole load."""
        return cls([parse_project(record) for record in records])

    @classmethod
    def from_json(cls, path: Path | str) -> "ProjectRepository":
        """Load projects from a JSON file holding a list or {"projects": [...]}.

        Raises:
            FileNotFoundError: If the file does not exist.
            DataValidationError: If the file content is not a project list.
        """
        path = Path(path)
        with path.open(encoding="utf-8") as f:
            try:
                payload = json.load(f)
            except json.JSONDecodeError as e:
                raise DataValidationError(f"{path}: invalid JSON ({e})") from e

        records = payload.get("projects") if isinstance(payload, dict) else payload
        if not isinstance(records, list):
            raise DataValidationError(f"{path}: expected a list of projects")

        repository = cls.from_records(records)
        logger.info(f"Loaded {len(repository)} project(s) from {path.name}")
        return repository

    @classmethod
    def default(cls) -> "ProjectRepository":
        """Repository over the bundled sample projects."""
        return cls.from_json(DEFAULT_PROJECTS_PATH)

    def get(self, project_id: str) -> Project | None:
        project = self._projects.get(project_id)
        if project is None:
            logger.debug(f"Project {project_id} not found")
        return project

    def list(self) -> list[Project]:
        """All projects in file order."""
        return list(self._projects.values())

    def __len__(self) -> int:
        return len(self._projects)

    def __contains__(self, project_id: object) -> bool:
        return project_id in self._projects
