"""
Module: export.config

Purpose:
    Configuration for the export pipeline. Immutable configuration with
    validation on construction.

Key Classes:
    - ExportFormat: Supported document formats
    - ExportConfig: Page sizing, image encoding and placeholder styling

Dependencies:
    - dataclasses (std)

Used By:
    - export.layout.engine: Long-side sizes
    - export.output: Renderers
    - export.controller: Coordinator
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from deck_toolkit.core.errors import UnsupportedFormatError
from deck_toolkit.core.models.aspect_ratio import LONG_SIDE_EMU, LONG_SIDE_PT, UnitSystem


class ExportFormat(str, Enum):
    """Export document formats."""

    PDF = "pdf"
    PPTX = "pptx"

    @property
    def unit(self) -> UnitSystem:
        """Native unit the layout must be expressed in."""
        return UnitSystem.POINTS if self is ExportFormat.PDF else UnitSystem.EMU

    @property
    def media_type(self) -> str:
        if self is ExportFormat.PDF:
            return "application/pdf"
        return "application/vnd.openxmlformats-officedocument.presentationml.presentation"

    @property
    def extension(self) -> str:
        return self.value


def parse_export_format(value) -> ExportFormat:
    """
    Parse a format name ("pdf"/"pptx", case-insensitive).

    Raises:
        UnsupportedFormatError: For anything else
    """
    if isinstance(value, ExportFormat):
        return value
    try:
        return ExportFormat(str(value).strip().lower())
    except ValueError:
        raise UnsupportedFormatError(
            f"Unsupported export format {value!r}; expected pdf or pptx"
        ) from None


RGB = tuple[int, int, int]


@dataclass(frozen=True)
class ExportConfig:
    """
    Configuration for document export (immutable).

    Attributes:
        pdf_long_side_pt: Long page side for PDF, in points (720 = 10 in)
        pptx_long_side_emu: Long slide side for PPTX, in EMU (9144000 = 10 in)
        image_dpi: Embedded images are downscaled to this resolution
            at the document's physical size
        jpeg_quality: Quality for embedded photos without alpha
        placeholder_fill: Background of pages without an image
        placeholder_text_color: Text color on placeholder pages
        pdf_invariant: ReportLab invariant mode (stable bytes, fixed dates)
        filename_stem: Base name of exported files

    Example:
        >>> config = ExportConfig()
        >>> config.pdf_long_side_pt
        720.0
    """

    pdf_long_side_pt: float = float(LONG_SIDE_PT)
    pptx_long_side_emu: int = LONG_SIDE_EMU
    image_dpi: int = 150
    jpeg_quality: int = 90
    placeholder_fill: RGB = (241, 243, 245)
    placeholder_text_color: RGB = (73, 80, 87)
    pdf_invariant: bool = False
    filename_stem: str = "presentation"

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.pdf_long_side_pt <= 0:
            raise ValueError(f"pdf_long_side_pt must be positive: {self.pdf_long_side_pt}")
        if self.pptx_long_side_emu <= 0:
            raise ValueError(f"pptx_long_side_emu must be positive: {self.pptx_long_side_emu}")
        if self.image_dpi <= 0:
            raise ValueError(f"image_dpi must be positive: {self.image_dpi}")
        if not 1 <= self.jpeg_quality <= 95:
            raise ValueError(f"jpeg_quality must be 1-95: {self.jpeg_quality}")
        if not self.filename_stem or "/" in self.filename_stem:
            raise ValueError(f"Invalid filename_stem: {self.filename_stem!r}")

    def long_side_for(self, unit: UnitSystem):
        """Long document side in the given unit."""
        if unit is UnitSystem.EMU:
            return self.pptx_long_side_emu
        return self.pdf_long_side_pt
