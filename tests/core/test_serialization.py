"""
Tests for core.utils.serialization

Test Coverage:
- serialize_project(): Stored layout, null content
- deserialize_project(): Restoring state, lock latch, malformed records
"""

import json

import pytest

from deck_toolkit.core.errors import InvalidRatioError
from deck_toolkit.core.models import (
    DescriptionContent,
    OutlineContent,
    PageStatus,
    Project,
)
from deck_toolkit.core.utils import (
    PROJECT_SCHEMA_VERSION,
    deserialize_project,
    serialize_project,
)


@pytest.fixture
def sample_project() -> Project:
    project = Project.create("Launch plan", "4:3")
    project, first = project.add_page()
    project, second = project.add_page()
    project = project.set_outline(first.id, OutlineContent("Intro", ("Why", "How")))
    project = project.set_description(first.id, DescriptionContent("Opening slide", {"tone": "warm"}))
    project = project.record_generated_image(first.id, f"{project.id}/pages/one.png")
    project = project.mark_page_failed(second.id, PageStatus.OUTLINE_GENERATED)
    return project


def test_serialize_project_when_content_missing_then_null(sample_project):
    """Absent outline/description are stored as null, not dropped."""
    data = serialize_project(sample_project)

    second = data["pages"][1]
    assert second["outline_content"] is None
    assert second["description_content"] is None
    assert second["generated_image_path"] is None


def test_serialize_project_then_json_compatible(sample_project):
    data = serialize_project(sample_project)

    text = json.dumps(data)

    assert data["schema_version"] == PROJECT_SCHEMA_VERSION
    assert data["image_aspect_ratio"] == "4:3"
    assert json.loads(text)["ratio_locked"] is True


def test_deserialize_project_then_state_restored(sample_project):
    # Act
    restored = deserialize_project(json.loads(json.dumps(serialize_project(sample_project))))

    # Assert
    assert restored == sample_project
    first, second = restored.pages
    assert first.outline_content.points == ("Why", "How")
    assert first.description_content.extra == {"tone": "warm"}
    assert second.status is PageStatus.FAILED
    assert second.failed_target is PageStatus.OUTLINE_GENERATED
    assert restored.aspect_ratio_locked


def test_deserialize_project_when_pages_out_of_order_then_sorted(sample_project):
    data = serialize_project(sample_project)
    data["pages"].reverse()

    restored = deserialize_project(data)

    assert [p.order_index for p in restored.pages] == [0, 1]


def test_deserialize_project_when_field_missing_then_value_error(sample_project):
    data = serialize_project(sample_project)
    del data["id"]

    with pytest.raises(ValueError):
        deserialize_project(data)


def test_deserialize_project_when_ratio_unknown_then_raises(sample_project):
    data = serialize_project(sample_project)
    data["image_aspect_ratio"] = "7:5"

    with pytest.raises(InvalidRatioError):
        deserialize_project(data)
