"""
Module: pages

Purpose:
    Page model and its lifecycle. A page moves through
    DRAFT → OUTLINE_GENERATED → DESCRIPTION_GENERATED → IMAGE_GENERATED
    → COMPLETED, may drop to FAILED from any non-terminal state, and may
    be retried from FAILED toward the stage that failed.

Key Functions:
    - can_transition(current, target, failed_target): Lifecycle rule
    - transition(page, target): Strict status change
    - advance(page, target): Monotonic status change (never moves back)

Key Classes:
    - PageStatus: Lifecycle states
    - Page: Immutable page with null-safe content accessors

Dependencies:
    - dataclasses (std)
    - .content: OutlineContent, DescriptionContent

Used By:
    - core.models.projects.Project
    - export.layout.engine

Invariants:
    - Status never moves to a lower rank (except via FAILED retry rules)
    - COMPLETED is terminal
    - Content accessors never raise on missing content
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ..errors import InvalidTransitionError
from .content import DescriptionContent, OutlineContent


def utcnow() -> datetime:
    """Timezone-aware current time (single seam for timestamps)."""
    return datetime.now(timezone.utc)


class PageStatus(str, Enum):
    """Page lifecycle states."""

    DRAFT = "DRAFT"
    OUTLINE_GENERATED = "OUTLINE_GENERATED"
    DESCRIPTION_GENERATED = "DESCRIPTION_GENERATED"
    IMAGE_GENERATED = "IMAGE_GENERATED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def rank(self) -> Optional[int]:
        """Position in the forward pipeline; None for FAILED."""
        return _RANKS.get(self)

    @property
    def is_terminal(self) -> bool:
        return self is PageStatus.COMPLETED


_RANKS = {
    PageStatus.DRAFT: 0,
    PageStatus.OUTLINE_GENERATED: 1,
    PageStatus.DESCRIPTION_GENERATED: 2,
    PageStatus.IMAGE_GENERATED: 3,
    PageStatus.COMPLETED: 4,
}


def can_transition(
    current: PageStatus,
    target: PageStatus,
    failed_target: Optional[PageStatus] = None,
) -> bool:
    """
    Check a status change against the lifecycle.

    Args:
        current: Current status
        target: Requested status
        failed_target: Stage that was being attempted when the page failed
            (only meaningful when current is FAILED)

    Returns:
        True if the change is allowed

    Example:
        >>> can_transition(PageStatus.DRAFT, PageStatus.IMAGE_GENERATED)
        True
        >>> can_transition(PageStatus.COMPLETED, PageStatus.FAILED)
        False
    """
    if current is target:
        return True
    if target is PageStatus.FAILED:
        return not current.is_terminal
    if current is PageStatus.FAILED:
        # Retry: re-enter the attempted stage or anything beyond it
        floor = failed_target.rank if failed_target and failed_target.rank is not None else 0
        return target.rank >= floor
    return target.rank > current.rank


@dataclass(frozen=True)
class Page:
    """
    One slide-equivalent unit within a project (immutable).

    Attributes:
        id: Page identifier
        project_id: Owning project (back-reference only)
        order_index: Zero-based render position, unique within the project
        outline_content: Outline stage output, None when absent
        description_content: Description stage output, None when absent
        generated_image_path: Storage path of the generated image,
            relative to the asset root (e.g. "<project>/pages/x.png")
        status: Lifecycle state
        failed_target: Stage being attempted when status became FAILED
        created_at: Creation time
        updated_at: Last change time

    Example:
        >>> page = Page.new("p1", order_index=1)
        >>> page.display_title
        'Page 2'
    """

    id: str
    project_id: str
    order_index: int
    outline_content: Optional[OutlineContent] = None
    description_content: Optional[DescriptionContent] = None
    generated_image_path: Optional[str] = None
    status: PageStatus = PageStatus.DRAFT
    failed_target: Optional[PageStatus] = None
    created_at: datetime = field(default_factory=utcnow, compare=False)
    updated_at: datetime = field(default_factory=utcnow, compare=False)

    def __post_init__(self) -> None:
        """Validate page on construction."""
        if self.order_index < 0:
            raise ValueError(f"order_index must be >= 0: {self.order_index}")
        if not self.id:
            raise ValueError("page id must not be empty")

    @classmethod
    def new(cls, project_id: str, order_index: int, *, page_id: Optional[str] = None) -> Page:
        """Create an empty DRAFT page."""
        now = utcnow()
        return cls(
            id=page_id or str(uuid.uuid4()),
            project_id=project_id,
            order_index=order_index,
            created_at=now,
            updated_at=now,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Null-safe accessors
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def placeholder_title(self) -> str:
        """Stable title derived from the page position."""
        return f"Page {self.order_index + 1}"

    @property
    def display_title(self) -> str:
        """Outline title, or the positional placeholder when missing/blank."""
        if self.outline_content is not None and self.outline_content.title.strip():
            return self.outline_content.title
        return self.placeholder_title

    @property
    def outline_points(self) -> tuple[str, ...]:
        if self.outline_content is None:
            return ()
        return self.outline_content.points

    @property
    def description_text(self) -> str:
        if self.description_content is None:
            return ""
        return self.description_content.text

    @property
    def has_image(self) -> bool:
        return bool(self.generated_image_path)

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    def with_order_index(self, order_index: int) -> Page:
        if order_index == self.order_index:
            return self
        return replace(self, order_index=order_index, updated_at=utcnow())

    def with_outline(self, outline: Optional[OutlineContent]) -> Page:
        """Record outline output and advance to OUTLINE_GENERATED."""
        page = replace(self, outline_content=outline, updated_at=utcnow())
        return advance(page, PageStatus.OUTLINE_GENERATED)

    def with_description(self, description: Optional[DescriptionContent]) -> Page:
        """Record description output and advance to DESCRIPTION_GENERATED."""
        page = replace(self, description_content=description, updated_at=utcnow())
        return advance(page, PageStatus.DESCRIPTION_GENERATED)

    def with_image(self, path: str) -> Page:
        """Record a generated image and advance to IMAGE_GENERATED."""
        if not path:
            raise ValueError("generated image path must not be empty")
        page = replace(self, generated_image_path=path, updated_at=utcnow())
        return advance(page, PageStatus.IMAGE_GENERATED)

    def mark_completed(self) -> Page:
        return transition(self, PageStatus.COMPLETED)

    def mark_failed(self, attempted: PageStatus) -> Page:
        """
        Move to FAILED while remembering the attempted stage.

        Args:
            attempted: Stage the failed generation step was producing

        Raises:
            InvalidTransitionError: If the page is COMPLETED or the
                attempted stage is FAILED itself
        """
        if attempted is PageStatus.FAILED:
            raise InvalidTransitionError(self.status.value, attempted.value)
        page = transition(self, PageStatus.FAILED)
        return replace(page, failed_target=attempted)


def transition(page: Page, target: PageStatus) -> Page:
    """
    Strict status change.

    Args:
        page: Page to change
        target: Requested status

    Returns:
        New page with the target status

    Raises:
        InvalidTransitionError: If the lifecycle forbids the change
    """
    if not can_transition(page.status, target, page.failed_target):
        raise InvalidTransitionError(page.status.value, target.value)
    if page.status is target:
        return page
    failed_target = page.failed_target if target is PageStatus.FAILED else None
    return replace(page, status=target, failed_target=failed_target, updated_at=utcnow())


def advance(page: Page, target: PageStatus) -> Page:
    """
    Monotonic status change used when content arrives.

    Leaves the status untouched if the page is already past ``target``
    (e.g. regenerating an outline on an IMAGE_GENERATED page).

    Args:
        page: Page to change
        target: Stage whose content just arrived

    Returns:
        New page at max(current, target)

    Raises:
        InvalidTransitionError: If the page is FAILED below the retry floor
    """
    if page.status is not PageStatus.FAILED and page.status.rank >= target.rank:
        return page
    return transition(page, target)
