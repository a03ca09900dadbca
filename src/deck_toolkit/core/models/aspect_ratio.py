"""
Module: aspect_ratio

Purpose:
    Aspect ratio policy - the single place that decides which ratios are
    valid, whether a project's ratio may still change, and how a ratio maps
    to document dimensions for each export format.

Key Functions:
    - is_locked(pages): True once any page has a generated image
    - validate_ratio(value): Parse a ratio token or raise InvalidRatioError
    - dimensions_for(ratio, unit): Canonical (width, height) for a unit system

Key Classes:
    - AspectRatio: Enumerated ratio tokens
    - UnitSystem: Document units (PDF points, OOXML EMU)
    - AspectRatioPolicy: Static facade over the functions above

Dependencies:
    - enum (std)

Used By:
    - core.models.projects.Project
    - export.layout.engine
    - api.app (ratio options for the settings UI)

Invariants:
    - Ratios are never coerced: unknown tokens are rejected
    - dimensions_for() always yields width/height equal to the ratio
      (all supported ratios divide the fixed long side evenly)
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional, Union

from ..errors import InvalidRatioError

if TYPE_CHECKING:
    from .pages import Page


# Long side of the document in each unit system (10 inches)
POINTS_PER_INCH = 72
EMU_PER_INCH = 914_400
EMU_PER_POINT = EMU_PER_INCH // POINTS_PER_INCH  # 12700
LONG_SIDE_PT = 10 * POINTS_PER_INCH  # 720
LONG_SIDE_EMU = 10 * EMU_PER_INCH  # 9_144_000


class AspectRatio(str, Enum):
    """Supported project aspect ratios (``width:height``)."""

    WIDE = "16:9"
    STANDARD = "4:3"
    SQUARE = "1:1"
    PORTRAIT = "9:16"
    PHOTO = "3:2"

    @property
    def width_units(self) -> int:
        return int(self.value.split(":")[0])

    @property
    def height_units(self) -> int:
        return int(self.value.split(":")[1])

    @property
    def value_ratio(self) -> float:
        """Width divided by height."""
        return self.width_units / self.height_units

    @property
    def is_landscape(self) -> bool:
        return self.width_units >= self.height_units

    @classmethod
    def tokens(cls) -> tuple[str, ...]:
        """All tokens in display order."""
        return tuple(member.value for member in cls)


DEFAULT_ASPECT_RATIO = AspectRatio.WIDE


class UnitSystem(str, Enum):
    """Native unit of an export format."""

    POINTS = "pt"  # PDF, 1/72 inch
    EMU = "emu"  # OOXML English Metric Units, 1/914400 inch


def is_locked(pages: Iterable["Page"]) -> bool:
    """
    Check whether the ratio of a project with these pages is frozen.

    Args:
        pages: Pages of a single project

    Returns:
        True iff any page has a non-null generated image reference
    """
    return any(page.generated_image_path for page in pages)


def validate_ratio(value: Union[str, AspectRatio, None]) -> AspectRatio:
    """
    Normalize a ratio token.

    Args:
        value: Token like "4:3" (surrounding whitespace ignored) or an
            AspectRatio member

    Returns:
        The matching AspectRatio

    Raises:
        InvalidRatioError: For anything outside the enumerated set,
            including None and non-string values

    Example:
        >>> validate_ratio(" 4:3 ")
        <AspectRatio.STANDARD: '4:3'>
    """
    if isinstance(value, AspectRatio):
        return value
    if not isinstance(value, str):
        raise InvalidRatioError(value, AspectRatio.tokens())
    try:
        return AspectRatio(value.strip())
    except ValueError:
        raise InvalidRatioError(value, AspectRatio.tokens()) from None


def dimensions_for(
    ratio: Union[str, AspectRatio],
    unit: UnitSystem = UnitSystem.POINTS,
    *,
    long_side: Optional[Union[int, float]] = None,
) -> tuple[Union[int, float], Union[int, float]]:
    """
    Map a ratio to document dimensions.

    The longer side is fixed (10 inches in the requested unit unless
    ``long_side`` overrides it) and the shorter side is scaled so
    width/height equals the ratio.

    Args:
        ratio: Ratio token or AspectRatio
        unit: Target unit system
        long_side: Optional override for the long side, in ``unit``

    Returns:
        (width, height); floats for POINTS, ints for EMU

    Example:
        >>> dimensions_for("4:3", UnitSystem.POINTS)
        (720.0, 540.0)
        >>> dimensions_for("16:9", UnitSystem.EMU)
        (9144000, 5143500)
    """
    ratio = validate_ratio(ratio)
    w_units, h_units = ratio.width_units, ratio.height_units
    long_units = max(w_units, h_units)

    if unit is UnitSystem.EMU:
        base = int(long_side) if long_side is not None else LONG_SIDE_EMU
        if base <= 0:
            raise ValueError(f"long_side must be positive: {long_side}")
        # Integer arithmetic keeps sldSz exact
        width = base * w_units // long_units
        height = base * h_units // long_units
        return width, height

    base_pt = float(long_side) if long_side is not None else float(LONG_SIDE_PT)
    if base_pt <= 0:
        raise ValueError(f"long_side must be positive: {long_side}")
    return base_pt * w_units / long_units, base_pt * h_units / long_units


class AspectRatioPolicy:
    """Static facade so callers can depend on a single policy object."""

    is_locked = staticmethod(is_locked)
    validate = staticmethod(validate_ratio)
    dimensions_for = staticmethod(dimensions_for)

    @staticmethod
    def options(pages: Iterable["Page"], *, locked: bool = False) -> list[dict]:
        """
        Ratio choices for a settings form.

        Args:
            pages: Project pages
            locked: Extra lock flag (project latch) OR-ed with the page check

        Returns:
            List of {"value", "disabled"} dicts in display order
        """
        disabled = locked or is_locked(pages)
        return [{"value": token, "disabled": disabled} for token in AspectRatio.tokens()]
