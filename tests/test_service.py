"""
Tests for service.ProjectService

Test Coverage:
- Project lifecycle through the repository
- Payload validation (content dicts, image paths, stage names)
- Asset cleanup on project deletion
"""

import pytest

from deck_toolkit.core.errors import (
    AspectRatioLockedError,
    InvalidPayloadError,
    ProjectNotFoundError,
)
from deck_toolkit.core.models import AspectRatio, PageStatus, ProjectStatus


class TestProjects:
    def test_create_project_then_stored(self, service):
        project = service.create_project("Launch plan", "4:3")

        loaded = service.get_project(project.id)

        assert loaded.image_aspect_ratio is AspectRatio.STANDARD
        assert loaded.version == 1
        assert [p.id for p in service.list_projects()] == [project.id]

    def test_update_project_when_prompt_and_ratio_then_both_applied(self, service):
        project = service.create_project("Old", "16:9")

        updated = service.update_project(project.id, idea_prompt="New", image_aspect_ratio="1:1")

        assert updated.idea_prompt == "New"
        assert updated.image_aspect_ratio is AspectRatio.SQUARE
        assert updated.version == 2

    def test_update_project_when_locked_then_prompt_not_applied(self, service, project_with_pages):
        # Arrange
        project = project_with_pages("16:9", pages=1)
        page_id = project.pages[0].id
        service.record_generated_image(project.id, page_id, f"{project.id}/pages/a.png")

        # Act
        with pytest.raises(AspectRatioLockedError):
            service.update_project(project.id, idea_prompt="New", image_aspect_ratio="4:3")

        # Assert - the whole update is rejected
        assert service.get_project(project.id).idea_prompt == "Quarterly review"

    def test_delete_project_then_files_removed(self, service, asset_store, project_with_pages):
        # Arrange
        project = project_with_pages(pages=1)
        asset_store.publish(f"{project.id}/pages/a.png", b"png")
        asset_store.publish(f"{project.id}/exports/deck.pdf", b"pdf")

        # Act
        service.delete_project(project.id)

        # Assert
        with pytest.raises(ProjectNotFoundError):
            service.get_project(project.id)
        assert not asset_store.exists(f"{project.id}/pages/a.png")
        assert not asset_store.exists(f"{project.id}/exports/deck.pdf")


class TestPages:
    def test_add_page_then_returns_stored_page(self, service):
        project = service.create_project("Demo")

        project, page = service.add_page(project.id)

        assert page.order_index == 0
        assert project.get_page(page.id) == page
        assert project.version == 2

    def test_set_outline_when_dict_then_recorded(self, service, project_with_pages):
        project = project_with_pages(pages=1)
        page_id = project.pages[0].id

        project = service.set_outline(project.id, page_id, {"title": "Intro", "points": ["a", "b"]})

        page = project.get_page(page_id)
        assert page.display_title == "Intro"
        assert page.status is PageStatus.OUTLINE_GENERATED
        assert project.status is ProjectStatus.OUTLINE_GENERATED

    def test_set_outline_when_not_object_then_invalid_payload(self, service, project_with_pages):
        project = project_with_pages(pages=1)

        with pytest.raises(InvalidPayloadError):
            service.set_outline(project.id, project.pages[0].id, "Intro")

    def test_set_description_when_none_then_cleared(self, service, project_with_pages):
        project = project_with_pages(pages=1)
        page_id = project.pages[0].id
        service.set_description(project.id, page_id, {"text": "Body"})

        project = service.set_description(project.id, page_id, None)

        assert project.get_page(page_id).description_content is None

    def test_record_image_then_ratio_locked(self, service, project_with_pages):
        project = project_with_pages("4:3", pages=2)
        page_id = project.pages[1].id

        project = service.record_generated_image(project.id, page_id, f"/files/{project.id}/pages/b.png")

        assert project.aspect_ratio_locked
        assert project.get_page(page_id).generated_image_path == f"{project.id}/pages/b.png"
        with pytest.raises(AspectRatioLockedError):
            service.update_aspect_ratio(project.id, "16:9")

    @pytest.mark.parametrize("path", ["other/pages/a.png", "../x.png", "{pid}/exports/a.png", ""])
    def test_record_image_when_path_outside_pages_then_invalid_payload(
        self, service, project_with_pages, path
    ):
        project = project_with_pages(pages=1)

        with pytest.raises(InvalidPayloadError):
            service.record_generated_image(project.id, project.pages[0].id, path.format(pid=project.id))

        assert not service.get_project(project.id).aspect_ratio_locked

    def test_move_page_then_reordered(self, service, project_with_pages):
        project = project_with_pages(pages=3)
        ids = [p.id for p in project.pages]

        project = service.move_page(project.id, ids[0], 2)

        assert [p.id for p in project.pages] == [ids[1], ids[2], ids[0]]

    def test_mark_page_failed_when_unknown_stage_then_invalid_payload(self, service, project_with_pages):
        project = project_with_pages(pages=1)

        with pytest.raises(InvalidPayloadError):
            service.mark_page_failed(project.id, project.pages[0].id, "RENDERING")

    def test_mark_page_failed_then_retry_allowed(self, service, project_with_pages):
        project = project_with_pages(pages=1)
        page_id = project.pages[0].id

        service.mark_page_failed(project.id, page_id, "OUTLINE_GENERATED")
        project = service.set_outline(project.id, page_id, {"title": "Retry"})

        assert project.get_page(page_id).status is PageStatus.OUTLINE_GENERATED
