"""
Module: projects

Purpose:
    Project aggregate - owns the ordered pages and project metadata and
    enforces the cross-page invariants. All operations are pure: each
    returns a new Project, persistence is the repository's job.

Key Classes:
    - ProjectStatus: Project lifecycle states
    - Project: Immutable aggregate (create/add_page/update_aspect_ratio/...)
    - ProjectSnapshot: Read view for export and the API

Dependencies:
    - dataclasses (std)
    - .aspect_ratio: Ratio policy
    - .pages: Page lifecycle

Used By:
    - service.ProjectService: Transactional mutations
    - storage.repository: Persistence
    - export.controller: Snapshots for rendering

Invariants (checked after every mutation):
    - Page order_index values are exactly 0..n-1
    - Page ids are unique and every page points back at this project
    - image_aspect_ratio is an AspectRatio member
    - ratio_locked never goes from True back to False
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Callable, Iterable, Optional, Union

from ..errors import (
    AspectRatioLockedError,
    InvalidOrderIndexError,
    PageNotFoundError,
)
from .aspect_ratio import (
    DEFAULT_ASPECT_RATIO,
    AspectRatio,
    is_locked,
    validate_ratio,
)
from .content import DescriptionContent, OutlineContent
from .pages import Page, PageStatus, utcnow

logger = logging.getLogger(__name__)


class ProjectStatus(str, Enum):
    """Project lifecycle states."""

    CREATED = "CREATED"
    OUTLINE_GENERATED = "OUTLINE_GENERATED"
    IMAGE_GENERATED = "IMAGE_GENERATED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


_PROJECT_RANKS = {
    ProjectStatus.CREATED: 0,
    ProjectStatus.OUTLINE_GENERATED: 1,
    ProjectStatus.IMAGE_GENERATED: 2,
    ProjectStatus.COMPLETED: 3,
}


def derive_status(current: ProjectStatus, pages: tuple[Page, ...]) -> ProjectStatus:
    """
    Advance project status from page progress (never lowers it).

    Args:
        current: Current project status
        pages: Project pages

    Returns:
        The higher of current and the status implied by the pages.
        FAILED is left alone; only an explicit operation clears it.
    """
    if current is ProjectStatus.FAILED or not pages:
        return current

    implied = ProjectStatus.CREATED
    if all(p.status is PageStatus.COMPLETED for p in pages):
        implied = ProjectStatus.COMPLETED
    elif all(p.has_image for p in pages):
        implied = ProjectStatus.IMAGE_GENERATED
    elif any(p.outline_content is not None for p in pages):
        implied = ProjectStatus.OUTLINE_GENERATED

    if _PROJECT_RANKS[implied] > _PROJECT_RANKS[current]:
        return implied
    return current


@dataclass(frozen=True)
class ProjectSnapshot:
    """
    Point-in-time read view of a project (immutable).

    Attributes:
        project_id: Project identifier
        idea_prompt: Prompt the project was created from
        image_aspect_ratio: Project-wide ratio
        status: Project status
        creation_type: How the project was created ("idea", ...)
        aspect_ratio_locked: Whether the ratio can still change
        pages: Pages sorted by order_index
        version: Persisted version the snapshot was taken from
        created_at: Creation time
        updated_at: Last change time
    """

    project_id: str
    idea_prompt: str
    image_aspect_ratio: AspectRatio
    status: ProjectStatus
    creation_type: str
    aspect_ratio_locked: bool
    pages: tuple[Page, ...]
    version: int
    created_at: datetime
    updated_at: datetime

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def is_empty(self) -> bool:
        return not self.pages


@dataclass(frozen=True)
class Project:
    """
    Presentation project aggregate (immutable).

    Attributes:
        id: Project identifier
        idea_prompt: Prompt text
        image_aspect_ratio: Project-wide ratio
        status: Lifecycle state
        creation_type: Origin of the project, recorded verbatim
        pages: Pages sorted by order_index
        ratio_locked: Latch set when the first image is recorded
        version: Persisted version (bumped by the repository)
        created_at: Creation time
        updated_at: Last change time

    Example:
        >>> project = Project.create("Quarterly review", "4:3")
        >>> project, page = project.add_page()
        >>> project = project.record_generated_image(page.id, f"{project.id}/pages/a.png")
        >>> project.aspect_ratio_locked
        True
    """

    id: str
    idea_prompt: str
    image_aspect_ratio: AspectRatio
    status: ProjectStatus = ProjectStatus.CREATED
    creation_type: str = "idea"
    pages: tuple[Page, ...] = ()
    ratio_locked: bool = False
    version: int = 0
    created_at: datetime = field(default_factory=utcnow, compare=False)
    updated_at: datetime = field(default_factory=utcnow, compare=False)

    def __post_init__(self) -> None:
        """Validate the aggregate on construction."""
        if not self.id:
            raise ValueError("project id must not be empty")
        if not isinstance(self.image_aspect_ratio, AspectRatio):
            object.__setattr__(
                self, "image_aspect_ratio", validate_ratio(self.image_aspect_ratio)
            )
        self._check_invariants()

    # ─────────────────────────────────────────────────────────────────────────
    # Factory
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def create(
        cls,
        idea_prompt: str,
        image_aspect_ratio: Union[str, AspectRatio, None] = None,
        *,
        creation_type: str = "idea",
        project_id: Optional[str] = None,
    ) -> Project:
        """
        Create an empty project.

        Args:
            idea_prompt: Prompt text
            image_aspect_ratio: Ratio token; None selects 16:9
            creation_type: Origin of the project
            project_id: Explicit id (generated when omitted)

        Returns:
            New project in CREATED status with no pages

        Raises:
            InvalidRatioError: If the ratio token is not supported
        """
        ratio = DEFAULT_ASPECT_RATIO if image_aspect_ratio is None else validate_ratio(image_aspect_ratio)
        now = utcnow()
        return cls(
            id=project_id or str(uuid.uuid4()),
            idea_prompt=idea_prompt or "",
            image_aspect_ratio=ratio,
            creation_type=creation_type or "idea",
            created_at=now,
            updated_at=now,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def aspect_ratio_locked(self) -> bool:
        """Latch OR any page currently holding an image."""
        return self.ratio_locked or is_locked(self.pages)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def get_page(self, page_id: str) -> Page:
        """
        Find a page by id.

        Raises:
            PageNotFoundError: If no page has this id
        """
        for page in self.pages:
            if page.id == page_id:
                return page
        raise PageNotFoundError(page_id, self.id)

    def snapshot(self) -> ProjectSnapshot:
        """Immutable read view with pages in render order."""
        return ProjectSnapshot(
            project_id=self.id,
            idea_prompt=self.idea_prompt,
            image_aspect_ratio=self.image_aspect_ratio,
            status=self.status,
            creation_type=self.creation_type,
            aspect_ratio_locked=self.aspect_ratio_locked,
            pages=self.pages,
            version=self.version,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Mutations (each returns a new Project)
    # ─────────────────────────────────────────────────────────────────────────

    def add_page(self, order_index: Optional[int] = None) -> tuple[Project, Page]:
        """
        Append or insert an empty page.

        Args:
            order_index: Insert position; None or a value past the end appends

        Returns:
            (updated project, the new page as stored)

        Raises:
            InvalidOrderIndexError: If order_index is negative or not an int
        """
        if order_index is None:
            order_index = len(self.pages)
        elif isinstance(order_index, bool) or not isinstance(order_index, int) or order_index < 0:
            raise InvalidOrderIndexError(f"order_index must be a non-negative integer: {order_index!r}")
        order_index = min(order_index, len(self.pages))

        page = Page.new(self.id, order_index)
        pages = list(self.pages)
        pages.insert(order_index, page)
        project = self._with_pages(pages)
        logger.debug(f"Added page {page.id} at {order_index} to project {self.id}")
        return project, project.get_page(page.id)

    def remove_page(self, page_id: str) -> Project:
        """
        Delete a page and renumber the rest.

        The ratio latch is kept: removing an imaged page does not unlock.
        """
        self.get_page(page_id)
        return self._with_pages([p for p in self.pages if p.id != page_id])

    def move_page(self, page_id: str, new_index: int) -> Project:
        """Move a page to a new position and renumber."""
        if isinstance(new_index, bool) or not isinstance(new_index, int) or new_index < 0:
            raise InvalidOrderIndexError(f"order_index must be a non-negative integer: {new_index!r}")
        page = self.get_page(page_id)
        pages = [p for p in self.pages if p.id != page_id]
        pages.insert(min(new_index, len(pages)), page)
        return self._with_pages(pages)

    def update_aspect_ratio(self, new_ratio: Union[str, AspectRatio]) -> Project:
        """
        Change the project ratio.

        Args:
            new_ratio: Ratio token

        Returns:
            Updated project

        Raises:
            AspectRatioLockedError: If any page has (or had) a generated image
            InvalidRatioError: If the token is not supported
        """
        if self.aspect_ratio_locked:
            raise AspectRatioLockedError(self.id, self.image_aspect_ratio.value)
        ratio = validate_ratio(new_ratio)
        if ratio is self.image_aspect_ratio:
            return self
        logger.info(
            f"Project {self.id} aspect ratio {self.image_aspect_ratio.value} -> {ratio.value}"
        )
        return self._touch(image_aspect_ratio=ratio)

    def update_idea_prompt(self, idea_prompt: str) -> Project:
        return self._touch(idea_prompt=idea_prompt or "")

    def record_generated_image(self, page_id: str, path: str) -> Project:
        """
        Attach a generated image to a page; locks the aspect ratio.

        Args:
            page_id: Target page
            path: Stored image path relative to the asset root

        Returns:
            Updated project with ratio_locked set

        Raises:
            PageNotFoundError: If the page does not exist
            InvalidTransitionError: If the page cannot reach IMAGE_GENERATED
        """
        project = self._update_page(page_id, lambda p: p.with_image(path))
        if not self.ratio_locked:
            logger.info(
                f"Project {self.id} aspect ratio locked at {self.image_aspect_ratio.value}"
            )
        return project._touch(ratio_locked=True)

    def set_outline(self, page_id: str, outline: Optional[OutlineContent]) -> Project:
        return self._update_page(page_id, lambda p: p.with_outline(outline))

    def set_description(self, page_id: str, description: Optional[DescriptionContent]) -> Project:
        return self._update_page(page_id, lambda p: p.with_description(description))

    def mark_page_completed(self, page_id: str) -> Project:
        return self._update_page(page_id, lambda p: p.mark_completed())

    def mark_page_failed(self, page_id: str, attempted: PageStatus) -> Project:
        return self._update_page(page_id, lambda p: p.mark_failed(attempted))

    def mark_failed(self) -> Project:
        return self._touch(status=ProjectStatus.FAILED)

    def with_version(self, version: int) -> Project:
        """Copy with a new persisted version (repository use only)."""
        return replace(self, version=version)

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _update_page(self, page_id: str, change: Callable[[Page], Page]) -> Project:
        target = self.get_page(page_id)
        updated = change(target)
        pages = [updated if p.id == page_id else p for p in self.pages]
        return self._with_pages(pages)

    def _with_pages(self, pages: Iterable[Page]) -> Project:
        renumbered = tuple(p.with_order_index(i) for i, p in enumerate(pages))
        return self._touch(
            pages=renumbered,
            status=derive_status(self.status, renumbered),
        )

    def _touch(self, **changes) -> Project:
        # replace() re-runs __post_init__, so invariants are checked on every mutation
        return replace(self, updated_at=utcnow(), **changes)

    def _check_invariants(self) -> None:
        indexes = [p.order_index for p in self.pages]
        if indexes != list(range(len(self.pages))):
            raise ValueError(f"page order_index values must be 0..n-1, got {indexes}")
        ids = [p.id for p in self.pages]
        if len(set(ids)) != len(ids):
            raise ValueError(f"duplicate page ids in project {self.id}")
        foreign = [p.id for p in self.pages if p.project_id != self.id]
        if foreign:
            raise ValueError(f"pages {foreign} do not belong to project {self.id}")
