"""
Module: service

Purpose:
    Transactional boundary around the project aggregate. Each public
    method validates inputs, then runs one pure aggregate operation
    through ``ProjectRepository.update`` so the change is serialized per
    project.

Key Classes:
    - ProjectService: Project and page mutations used by the API

Dependencies:
    - core.models.Project: Pure aggregate operations
    - storage.ProjectRepository: Atomic per-project updates
    - storage.AssetStore: File cleanup on project deletion

Used By:
    - api.app: HTTP handlers
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from deck_toolkit.core.errors import AssetNotFoundError, InvalidPayloadError
from deck_toolkit.core.models import (
    DescriptionContent,
    OutlineContent,
    Page,
    PageStatus,
    Project,
)
from deck_toolkit.storage import (
    AssetStore,
    ProjectRepository,
    normalize_relative_path,
    project_pages_prefix,
)

logger = logging.getLogger(__name__)


class ProjectService:
    """
    Project/page mutations with per-project serialization.

    Example:
        >>> service = ProjectService(InMemoryProjectRepository())
        >>> project = service.create_project("Launch plan", "4:3")
        >>> project, page = service.add_page(project.id)
        >>> service.update_aspect_ratio(project.id, "1:1").image_aspect_ratio.value
        '1:1'
    """

    def __init__(
        self,
        repository: ProjectRepository,
        asset_store: Optional[AssetStore] = None,
    ) -> None:
        self.repository = repository
        self.asset_store = asset_store

    # ─────────────────────────────────────────────────────────────────────────
    # Projects
    # ─────────────────────────────────────────────────────────────────────────

    def create_project(
        self,
        idea_prompt: str,
        image_aspect_ratio: Optional[str] = None,
        *,
        creation_type: str = "idea",
    ) -> Project:
        """
        Create and store a project.

        Raises:
            InvalidRatioError: If the ratio token is not supported
        """
        project = Project.create(idea_prompt, image_aspect_ratio, creation_type=creation_type)
        stored = self.repository.add(project)
        logger.info(
            f"Created project {stored.id} ({stored.image_aspect_ratio.value}, {creation_type})"
        )
        return stored

    def get_project(self, project_id: str) -> Project:
        return self.repository.get(project_id)

    def list_projects(self) -> List[Project]:
        return self.repository.list_projects()

    def delete_project(self, project_id: str) -> None:
        """Delete a project, its pages and its stored files."""
        self.repository.delete(project_id)
        if self.asset_store is not None:
            self.asset_store.delete_prefix(project_id)
        logger.info(f"Deleted project {project_id}")

    def update_project(
        self,
        project_id: str,
        *,
        idea_prompt: Optional[str] = None,
        image_aspect_ratio: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> Project:
        """
        Update project metadata in one atomic step.

        Raises:
            AspectRatioLockedError: If a ratio is given and the project is locked
            InvalidRatioError: If the ratio token is not supported
        """

        def change(project: Project) -> Project:
            if image_aspect_ratio is not None:
                project = project.update_aspect_ratio(image_aspect_ratio)
            if idea_prompt is not None:
                project = project.update_idea_prompt(idea_prompt)
            return project

        return self.repository.update(project_id, change, expected_version=expected_version)

    def update_aspect_ratio(self, project_id: str, new_ratio: str) -> Project:
        """
        Change the project ratio (lock check and write are atomic).

        Raises:
            AspectRatioLockedError: If any page has a generated image
            InvalidRatioError: If the token is not supported
        """
        return self.repository.update(project_id, lambda p: p.update_aspect_ratio(new_ratio))

    # ─────────────────────────────────────────────────────────────────────────
    # Pages
    # ─────────────────────────────────────────────────────────────────────────

    def add_page(self, project_id: str, order_index: Optional[int] = None) -> Tuple[Project, Page]:
        """
        Insert a page.

        Returns:
            (stored project, stored page)
        """
        created: list[str] = []

        def change(project: Project) -> Project:
            project, page = project.add_page(order_index)
            created.append(page.id)
            return project

        stored = self.repository.update(project_id, change)
        return stored, stored.get_page(created[-1])

    def remove_page(self, project_id: str, page_id: str) -> Project:
        return self.repository.update(project_id, lambda p: p.remove_page(page_id))

    def move_page(self, project_id: str, page_id: str, new_index: int) -> Project:
        return self.repository.update(project_id, lambda p: p.move_page(page_id, new_index))

    def set_outline(self, project_id: str, page_id: str, outline: Optional[dict]) -> Project:
        content = _parse_content(OutlineContent, outline, "outline_content")
        return self.repository.update(project_id, lambda p: p.set_outline(page_id, content))

    def set_description(self, project_id: str, page_id: str, description: Optional[dict]) -> Project:
        content = _parse_content(DescriptionContent, description, "description_content")
        return self.repository.update(project_id, lambda p: p.set_description(page_id, content))

    def record_generated_image(self, project_id: str, page_id: str, image_path: str) -> Project:
        """
        Attach a generated image to a page; locks the project ratio.

        Args:
            project_id: Project id
            page_id: Page id
            image_path: Stored path under "<project_id>/pages/"

        Raises:
            InvalidPayloadError: If the path is not inside the project's pages folder
        """
        try:
            clean = normalize_relative_path(image_path)
        except AssetNotFoundError as e:
            raise InvalidPayloadError(e.message) from e
        if not clean.startswith(project_pages_prefix(project_id) + "/"):
            raise InvalidPayloadError(
                f"generated_image_path must be under {project_pages_prefix(project_id)}/"
            )
        return self.repository.update(
            project_id, lambda p: p.record_generated_image(page_id, clean)
        )

    def mark_page_completed(self, project_id: str, page_id: str) -> Project:
        return self.repository.update(project_id, lambda p: p.mark_page_completed(page_id))

    def mark_page_failed(self, project_id: str, page_id: str, attempted: str) -> Project:
        try:
            stage = PageStatus(attempted)
        except ValueError:
            raise InvalidPayloadError(f"Unknown page stage: {attempted!r}") from None
        return self.repository.update(project_id, lambda p: p.mark_page_failed(page_id, stage))


def _parse_content(model, payload, field_name: str):
    try:
        return model.from_dict(payload)
    except ValueError as e:
        raise InvalidPayloadError(f"Invalid {field_name}: {e}") from e

