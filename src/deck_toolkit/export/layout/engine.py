"""
Module: export.layout.engine

Purpose:
    Turn a project snapshot into a DocumentLayout: one document size from
    the project ratio and one full-bleed frame per page, in page order.

Key Functions:
    - build_layout(): Main layout function

Dependencies:
    - core.models: ProjectSnapshot, dimensions_for

Used By:
    - export.controller: Pipeline orchestration
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from deck_toolkit.core.errors import EmptyProjectError
from deck_toolkit.core.models import Page, ProjectSnapshot, UnitSystem, dimensions_for

from .models import DocumentLayout, FitPolicy, FrameBox, PageFrame

if TYPE_CHECKING:
    from deck_toolkit.export.config import ExportConfig

logger = logging.getLogger(__name__)

SUBTITLE_MAX_CHARS = 160


def build_layout(
    snapshot: ProjectSnapshot,
    unit: UnitSystem,
    config: Optional[ExportConfig] = None,
) -> DocumentLayout:
    """
    Lay out a project for export.

    Args:
        snapshot: Frozen project view
        unit: POINTS for PDF, EMU for PPTX
        config: Optional export config (long-side sizes)

    Returns:
        DocumentLayout with frames in strictly increasing order_index

    Raises:
        EmptyProjectError: If the project has no pages

    Example:
        >>> layout = build_layout(project.snapshot(), UnitSystem.EMU)
        >>> layout.size
        (9144000, 6858000)
    """
    if snapshot.is_empty:
        raise EmptyProjectError(snapshot.project_id)

    long_side = config.long_side_for(unit) if config is not None else None
    width, height = dimensions_for(snapshot.image_aspect_ratio, unit, long_side=long_side)
    box = FrameBox(0, 0, width, height)

    pages = sorted(snapshot.pages, key=lambda p: p.order_index)
    frames = tuple(_frame_for(page, position, box) for position, page in enumerate(pages))

    logger.debug(
        f"Layout for {snapshot.project_id}: {len(frames)} pages at "
        f"{width}x{height} {unit.value} ({snapshot.image_aspect_ratio.value})"
    )

    return DocumentLayout(
        project_id=snapshot.project_id,
        aspect_ratio=snapshot.image_aspect_ratio,
        unit=unit,
        width=width,
        height=height,
        frames=frames,
    )


def _frame_for(page: Page, position: int, box: FrameBox) -> PageFrame:
    return PageFrame(
        page_id=page.id,
        position=position,
        order_index=page.order_index,
        box=box,
        image_path=page.generated_image_path or None,
        title=page.display_title,
        subtitle=_subtitle_for(page),
        status=page.status,
        fit=FitPolicy.CROP_TO_FILL,
    )


def _subtitle_for(page: Page) -> str:
    """First outline point, else the start of the description."""
    for point in page.outline_points:
        if point.strip():
            return _truncate(point.strip())
    return _truncate(page.description_text.strip())


def _truncate(text: str) -> str:
    text = " ".join(text.split())
    if len(text) <= SUBTITLE_MAX_CHARS:
        return text
    return text[: SUBTITLE_MAX_CHARS - 1].rstrip() + "…"
