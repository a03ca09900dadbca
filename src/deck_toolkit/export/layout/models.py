"""
Module: export.layout.models

Purpose:
    Data models for document layout.
    Immutable dataclasses describing one document size and one full-bleed
    frame per page.

Key Classes:
    - FitPolicy: How an image fills its frame
    - FrameBox: Rectangle in document units
    - PageFrame: Content placed on one document page
    - DocumentLayout: Final layout output

Dependencies:
    - dataclasses (std)

Used By:
    - export.layout.engine: Creates DocumentLayouts
    - export.output: Renderers consume them
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from deck_toolkit.core.models import AspectRatio, PageStatus, UnitSystem

Number = Union[int, float]


class FitPolicy(str, Enum):
    """Image fitting policy."""

    CROP_TO_FILL = "crop_to_fill"


@dataclass(frozen=True)
class FrameBox:
    """
    Rectangle in document units, origin at the top-left corner.

    Example:
        >>> box = FrameBox(0, 0, 720, 540)
        >>> box.right, box.bottom
        (720, 540)
    """

    left: Number
    top: Number
    width: Number
    height: Number

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"FrameBox must have positive size: {self.width}x{self.height}")

    @property
    def right(self) -> Number:
        return self.left + self.width

    @property
    def bottom(self) -> Number:
        return self.top + self.height


@dataclass(frozen=True)
class PageFrame:
    """
    Layout of a single document page.

    Attributes:
        page_id: Source page id
        position: 0-indexed position in the document
        order_index: Source page order_index
        box: Full-bleed content rectangle
        image_path: Stored image path, or None for a placeholder page
        title: Outline title or "Page N"
        subtitle: First outline point or description excerpt (may be empty)
        status: Source page status
        fit: Image fit policy
    """

    page_id: str
    position: int
    order_index: int
    box: FrameBox
    image_path: Optional[str]
    title: str
    subtitle: str
    status: PageStatus
    fit: FitPolicy = FitPolicy.CROP_TO_FILL

    @property
    def has_image(self) -> bool:
        return self.image_path is not None

    @property
    def page_label(self) -> str:
        return f"Page {self.position + 1}"


@dataclass(frozen=True)
class DocumentLayout:
    """
    Complete layout for one export (immutable).

    Every frame shares the document's single width/height.

    Example:
        >>> layout = build_layout(snapshot, UnitSystem.POINTS)
        >>> (layout.width, layout.height)
        (720.0, 540.0)
    """

    project_id: str
    aspect_ratio: AspectRatio
    unit: UnitSystem
    width: Number
    height: Number
    frames: tuple[PageFrame, ...]

    def __post_init__(self) -> None:
        for frame in self.frames:
            if (frame.box.width, frame.box.height) != (self.width, self.height):
                raise ValueError(
                    f"Frame {frame.page_id} size {frame.box.width}x{frame.box.height} "
                    f"differs from document size {self.width}x{self.height}"
                )

    @property
    def page_count(self) -> int:
        return len(self.frames)

    @property
    def size(self) -> tuple[Number, Number]:
        return self.width, self.height

    @property
    def image_paths(self) -> tuple[Optional[str], ...]:
        return tuple(frame.image_path for frame in self.frames)
