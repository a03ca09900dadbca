"""
Module: api.payloads

Purpose:
    JSON representations of projects and pages for the HTTP API,
    including the UI-facing aspect-ratio fields (lock flag, option list
    with disabled flags, hint text).

Key Functions:
    - project_to_dict(): Full project with pages
    - project_summary(): Project without pages (list view)
    - page_to_dict(): Single page

Used By:
    - api.routes: Response bodies
"""

from __future__ import annotations

from typing import Any, Optional

from deck_toolkit.core.models import AspectRatioPolicy, Page, Project
from deck_toolkit.storage import AssetStore, normalize_relative_path
from deck_toolkit.storage.assets import FILES_URL_PREFIX

LOCKED_RATIO_HINT = "Cannot change aspect ratio after images have been generated"
UNLOCKED_RATIO_HINT = "Set the aspect ratio for generated slides"


def aspect_ratio_fields(project: Project) -> dict[str, Any]:
    """Lock flag, selectable options and hint for the ratio setting."""
    locked = project.aspect_ratio_locked
    return {
        "aspect_ratio_locked": locked,
        "aspect_ratio_options": AspectRatioPolicy.options(project.pages, locked=project.ratio_locked),
        "aspect_ratio_hint": LOCKED_RATIO_HINT if locked else UNLOCKED_RATIO_HINT,
    }


def project_summary(project: Project) -> dict[str, Any]:
    return {
        "project_id": project.id,
        "idea_prompt": project.idea_prompt,
        "creation_type": project.creation_type,
        "image_aspect_ratio": project.image_aspect_ratio.value,
        "status": project.status.value,
        "page_count": project.page_count,
        "version": project.version,
        "created_at": project.created_at.isoformat(),
        "updated_at": project.updated_at.isoformat(),
        **aspect_ratio_fields(project),
    }


def project_to_dict(project: Project, asset_store: Optional[AssetStore] = None) -> dict[str, Any]:
    """Project with its pages in order."""
    data = project_summary(project)
    data["pages"] = [page_to_dict(page, asset_store) for page in project.pages]
    return data


def page_to_dict(page: Page, asset_store: Optional[AssetStore] = None) -> dict[str, Any]:
    return {
        "page_id": page.id,
        "project_id": page.project_id,
        "order_index": page.order_index,
        "display_title": page.display_title,
        "outline_content": page.outline_content.to_dict() if page.outline_content else None,
        "description_content": (
            page.description_content.to_dict() if page.description_content else None
        ),
        "generated_image_path": page.generated_image_path,
        "generated_image_url": _image_url(page, asset_store),
        "status": page.status.value,
        "created_at": page.created_at.isoformat(),
        "updated_at": page.updated_at.isoformat(),
    }


def _image_url(page: Page, asset_store: Optional[AssetStore]) -> Optional[str]:
    if not page.generated_image_path:
        return None
    if asset_store is not None:
        return asset_store.url_for(page.generated_image_path)
    return FILES_URL_PREFIX + normalize_relative_path(page.generated_image_path)
