"""
Serialization Utilities

Provides to/from dict helpers for the project and page models.

The stored form mirrors the ``projects`` and ``pages`` columns
(``id, status, idea_prompt, image_aspect_ratio, created_at, updated_at``
and ``id, project_id, order_index, outline_content, description_content,
generated_image_path, status``) so the JSON repository and any relational
implementation share one shape. Derived values (display titles, lock
state from pages) are never stored; only the ratio latch is, because it
must survive page deletion.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from ..models.aspect_ratio import validate_ratio
from ..models.content import DescriptionContent, OutlineContent
from ..models.pages import Page, PageStatus, utcnow
from ..models.projects import Project, ProjectStatus


PROJECT_SCHEMA_VERSION = 1


# ─────────────────────────────────────────────────────────────────────────────
# Timestamps
# ─────────────────────────────────────────────────────────────────────────────

def _dump_time(value: datetime) -> str:
    return value.isoformat()


def _load_time(value: Optional[str]) -> datetime:
    if not value:
        return utcnow()
    return datetime.fromisoformat(value)


# ─────────────────────────────────────────────────────────────────────────────
# Page Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_page(page: Page) -> dict[str, Any]:
    """
    Serialize a Page to a dictionary.

    Args:
        page: Page instance

    Returns:
        Dictionary suitable for JSON; absent content stays None
    """
    return {
        "id": page.id,
        "project_id": page.project_id,
        "order_index": page.order_index,
        "outline_content": page.outline_content.to_dict() if page.outline_content else None,
        "description_content": (
            page.description_content.to_dict() if page.description_content else None
        ),
        "generated_image_path": page.generated_image_path,
        "status": page.status.value,
        "failed_target": page.failed_target.value if page.failed_target else None,
        "created_at": _dump_time(page.created_at),
        "updated_at": _dump_time(page.updated_at),
    }


def deserialize_page(data: dict[str, Any]) -> Page:
    """
    Deserialize a Page from a dictionary.

    Args:
        data: Dictionary from storage

    Returns:
        Page instance

    Raises:
        ValueError: If required fields are missing or invalid
    """
    try:
        failed_target = data.get("failed_target")
        return Page(
            id=data["id"],
            project_id=data["project_id"],
            order_index=int(data["order_index"]),
            outline_content=OutlineContent.from_dict(data.get("outline_content")),
            description_content=DescriptionContent.from_dict(data.get("description_content")),
            generated_image_path=data.get("generated_image_path") or None,
            status=PageStatus(data.get("status", PageStatus.DRAFT.value)),
            failed_target=PageStatus(failed_target) if failed_target else None,
            created_at=_load_time(data.get("created_at")),
            updated_at=_load_time(data.get("updated_at")),
        )
    except KeyError as e:
        raise ValueError(f"Page record missing field: {e}") from e


# ─────────────────────────────────────────────────────────────────────────────
# Project Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_project(project: Project) -> dict[str, Any]:
    """
    Serialize a Project (with its pages) to a dictionary.

    Note:
        Pages are written in order_index order.
    """
    return {
        "schema_version": PROJECT_SCHEMA_VERSION,
        "id": project.id,
        "status": project.status.value,
        "idea_prompt": project.idea_prompt,
        "image_aspect_ratio": project.image_aspect_ratio.value,
        "creation_type": project.creation_type,
        "ratio_locked": project.ratio_locked,
        "version": project.version,
        "created_at": _dump_time(project.created_at),
        "updated_at": _dump_time(project.updated_at),
        "pages": [serialize_page(p) for p in project.pages],
    }


def deserialize_project(data: dict[str, Any]) -> Project:
    """
    Deserialize a Project from a dictionary.

    Args:
        data: Dictionary from storage

    Returns:
        Project instance (invariants re-checked on construction)

    Raises:
        ValueError: If the record is malformed
        InvalidRatioError: If the stored ratio is not supported
    """
    try:
        pages = sorted(
            (deserialize_page(p) for p in data.get("pages", [])),
            key=lambda p: p.order_index,
        )
        return Project(
            id=data["id"],
            idea_prompt=data.get("idea_prompt", ""),
            image_aspect_ratio=validate_ratio(data["image_aspect_ratio"]),
            status=ProjectStatus(data.get("status", ProjectStatus.CREATED.value)),
            creation_type=data.get("creation_type", "idea"),
            pages=tuple(pages),
            ratio_locked=bool(data.get("ratio_locked", False)),
            version=int(data.get("version", 0)),
            created_at=_load_time(data.get("created_at")),
            updated_at=_load_time(data.get("updated_at")),
        )
    except KeyError as e:
        raise ValueError(f"Project record missing field: {e}") from e
