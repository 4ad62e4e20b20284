"""Tests for ProjectRepository (JSON data provider).

Note: The bundled sample file is loaded through the `repository` fixture.
"""

import json
from pathlib import Path

import pytest

from cdr_timeline.model.canonical_location import Methodology
from cdr_timeline.model.errors import DataValidationError
from cdr_timeline.model.repository import ProjectRepository
from conftest import BIOCHAR_PLANT, event_dict, project_dict


class TestBundledProjects:
    def test_default_loads_both_methodologies(self, repository: ProjectRepository) -> None:
        assert len(repository) == 2
        assert {p.methodology for p in repository.list()} == set(Methodology)

    def test_lookup(self, repository: ProjectRepository) -> None:
        project = repository.get("maui-biochar-001")
        assert project is not None
        assert project.event_count == 8
        assert "idaho-erw-001" in repository

    def test_unknown_project_is_none(self, repository: ProjectRepository) -> None:
        assert repository.get("no-such-project") is None
        assert "no-such-project" not in repository

    def test_list_keeps_file_order(self, repository: ProjectRepository) -> None:
        assert [p.id for p in repository.list()] == ["maui-biochar-001", "idaho-erw-001"]


class TestFromJson:
    def test_list_payload(self, tmp_path: Path) -> None:
        path = tmp_path / "projects.json"
        path.write_text(json.dumps([project_dict("a", [event_dict("e1", "pyrolysis", BIOCHAR_PLANT)])]))

        repository = ProjectRepository.from_json(path)
        assert [p.id for p in repository.list()] == ["a"]

    def test_wrapped_payload(self, tmp_path: Path) -> None:
        path = tmp_path / "projects.json"
        path.write_text(json.dumps({"projects": [project_dict("a", []), project_dict("b", [])]}))

        assert len(ProjectRepository.from_json(str(path))) == 2

    @pytest.mark.parametrize(
        "content,match",
        [
            ("{not json", "invalid JSON"),
            ('{"items": []}', "expected a list"),
            ('"projects"', "expected a list"),
        ],
    )
    def test_bad_file_rejected(self, tmp_path: Path, content: str, match: str) -> None:
        path = tmp_path / "projects.json"
        path.write_text(content)
        with pytest.raises(DataValidationError, match=match):
            ProjectRepository.from_json(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            ProjectRepository.from_json(tmp_path / "missing.json")

    def test_one_invalid_project_fails_load(self, tmp_path: Path) -> None:
        path = tmp_path / "projects.json"
        path.write_text(json.dumps([project_dict("a", []), project_dict("b", [], methodology="unknown")]))
        with pytest.raises(DataValidationError, match="unknown methodology"):
            ProjectRepository.from_json(path)

    def test_duplicate_project_ids(self) -> None:
        with pytest.raises(DataValidationError, match="Duplicate project id"):
            ProjectRepository.from_records([project_dict("a", []), project_dict("a", [])])
