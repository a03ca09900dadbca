"""
Module: core.errors

Purpose:
    Error taxonomy shared by the models, storage, export pipeline and API.
    Every error carries a stable machine-readable ``kind`` plus a human
    message so callers can surface it without string matching.

Key Classes:
    - DeckError: Base class for all toolkit errors
    - InvalidRatioError, AspectRatioLockedError: Aspect ratio policy
    - ProjectNotFoundError, PageNotFoundError: Missing identities
    - EmptyProjectError, ExportRenderError: Export failures

Used By:
    - core.models: Invariant checks
    - storage: Repository and asset lookups
    - export.controller: Export pipeline
    - api.app: HTTP status mapping
"""

from __future__ import annotations

from typing import Any, Optional


class DeckError(Exception):
    """Base error with a stable ``kind`` identifier."""

    kind = "deck_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses."""
        return {"kind": self.kind, "message": self.message}


# ─────────────────────────────────────────────────────────────────────────────
# Validation
# ─────────────────────────────────────────────────────────────────────────────

class InvalidRatioError(DeckError):
    """Aspect ratio token is not one of the supported values."""

    kind = "invalid_aspect_ratio"

    def __init__(self, value: Any, allowed: tuple[str, ...]) -> None:
        super().__init__(
            f"Unsupported aspect ratio {value!r}; expected one of: {', '.join(allowed)}"
        )
        self.value = value
        self.allowed = allowed


class InvalidOrderIndexError(DeckError):
    """Page order index outside the acceptable range."""

    kind = "invalid_order_index"


class InvalidTransitionError(DeckError):
    """Page status change not permitted by the lifecycle."""

    kind = "invalid_transition"

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move page from {current} to {target}")
        self.current = current
        self.target = target


class InvalidPayloadError(DeckError):
    """Request body is malformed or missing required fields."""

    kind = "invalid_payload"


class UnsupportedFormatError(DeckError):
    """Export format other than PDF or PPTX."""

    kind = "unsupported_format"


# ─────────────────────────────────────────────────────────────────────────────
# Invariants / concurrency
# ─────────────────────────────────────────────────────────────────────────────

class AspectRatioLockedError(DeckError):
    """Aspect ratio change attempted after a page received an image."""

    kind = "aspect_ratio_locked"

    def __init__(self, project_id: str, current: str) -> None:
        super().__init__(
            f"Cannot change aspect ratio of project {project_id}: images have "
            f"already been generated at {current}"
        )
        self.project_id = project_id
        self.current = current


class ConcurrentModificationError(DeckError):
    """Project changed since the caller last read it."""

    kind = "concurrent_modification"

    def __init__(self, project_id: str, expected: int, actual: int) -> None:
        super().__init__(
            f"Project {project_id} is at version {actual}, expected {expected}"
        )
        self.project_id = project_id
        self.expected = expected
        self.actual = actual


# ─────────────────────────────────────────────────────────────────────────────
# Lookups
# ─────────────────────────────────────────────────────────────────────────────

class ProjectNotFoundError(DeckError):
    """No project with the given id."""

    kind = "project_not_found"

    def __init__(self, project_id: str) -> None:
        super().__init__(f"Project not found: {project_id}")
        self.project_id = project_id


class PageNotFoundError(DeckError):
    """No page with the given id in the project."""

    kind = "page_not_found"

    def __init__(self, page_id: str, project_id: Optional[str] = None) -> None:
        where = f" in project {project_id}" if project_id else ""
        super().__init__(f"Page not found: {page_id}{where}")
        self.page_id = page_id
        self.project_id = project_id


class AssetNotFoundError(DeckError):
    """Stored file missing or outside the storage root."""

    kind = "asset_not_found"


# ─────────────────────────────────────────────────────────────────────────────
# Export
# ─────────────────────────────────────────────────────────────────────────────

class EmptyProjectError(DeckError):
    """Export attempted on a project without pages."""

    kind = "empty_project"

    def __init__(self, project_id: str) -> None:
        super().__init__(f"Project {project_id} has no pages to export")
        self.project_id = project_id


class ExportRenderError(DeckError):
    """Document assembly failed; nothing was published."""

    kind = "export_render_failed"
