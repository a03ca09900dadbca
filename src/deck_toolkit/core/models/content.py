"""
Module: content

Purpose:
    Optional structured content produced by the generation stages.
    A page holds ``Optional[OutlineContent]`` and
    ``Optional[DescriptionContent]``; ``None`` means the stage has not
    produced anything (or failed) and every consumer must handle it.

Key Classes:
    - OutlineContent: Title plus bullet points
    - DescriptionContent: Free text plus any extra generator fields

Dependencies:
    - dataclasses (std)

Used By:
    - core.models.pages.Page
    - core.utils.serialization
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class OutlineContent:
    """
    Outline stage output.

    Attributes:
        title: Slide title (may be empty)
        points: Bullet point strings in order
    """

    title: str = ""
    points: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional[OutlineContent]:
        """
        Build from a (possibly partial) payload.

        Args:
            data: Mapping with optional "title" and "points", or None

        Returns:
            OutlineContent, or None when data is None

        Raises:
            ValueError: If data is not a mapping, title is not a string, or
                points is not a string or a list of strings
        """
        if data is None:
            return None
        if not isinstance(data, Mapping):
            raise ValueError(f"outline_content must be an object, got {type(data).__name__}")

        title = data.get("title") or ""
        if not isinstance(title, str):
            raise ValueError(f"title must be a string, got {type(title).__name__}")

        points = data.get("points") or ()
        if isinstance(points, str):
            points = (points,)
        if not isinstance(points, (list, tuple)):
            raise ValueError(f"points must be a list of strings, got {type(points).__name__}")
        for point in points:
            if not isinstance(point, str):
                raise ValueError(f"points must be strings, got {type(point).__name__}")
        return cls(title=title, points=tuple(points))

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "points": list(self.points)}


@dataclass(frozen=True)
class DescriptionContent:
    """
    Description stage output.

    Attributes:
        text: Page description text
        extra: Any additional generator fields, kept verbatim
    """

    text: str = ""
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional[DescriptionContent]:
        """Build from a (possibly partial) payload; None stays None."""
        if data is None:
            return None
        if not isinstance(data, Mapping):
            raise ValueError(
                f"description_content must be an object, got {type(data).__name__}"
            )
        extra = {k: v for k, v in data.items() if k != "text"}
        return cls(text=str(data.get("text") or ""), extra=extra)

    def to_dict(self) -> dict[str, Any]:
        return {**self.extra, "text": self.text}
