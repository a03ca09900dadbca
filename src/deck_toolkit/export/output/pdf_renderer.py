"""
Module: export.output.pdf_renderer

Purpose:
    Render a DocumentLayout to PDF using ReportLab.
    Every page gets the same MediaBox (the document size in points); each
    frame is either a full-bleed crop-to-fill image or a placeholder.

Key Functions:
    - render_pdf(): Main rendering function

Dependencies:
    - reportlab: PDF generation
    - PIL: Image handling
    - export.layout.models: DocumentLayout, PageFrame

Used By:
    - export.controller: Pipeline orchestration
"""

from __future__ import annotations

import io
import logging
from typing import Optional, Sequence

from PIL import Image
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from deck_toolkit.core.models import UnitSystem
from deck_toolkit.export.config import ExportConfig
from deck_toolkit.export.images import crop_to_fill, encode_image, target_pixels
from deck_toolkit.export.layout.models import DocumentLayout, PageFrame

logger = logging.getLogger(__name__)

# Placeholder typography, as fractions of the short page side
TITLE_FONT = "Helvetica-Bold"
BODY_FONT = "Helvetica"
TITLE_SIZE_RATIO = 0.075
BODY_SIZE_RATIO = 0.04
LABEL_SIZE_RATIO = 0.03
SIDE_MARGIN_RATIO = 0.08


def render_pdf(
    layout: DocumentLayout,
    images: Sequence[Optional[Image.Image]],
    config: Optional[ExportConfig] = None,
) -> bytes:
    """
    Render a layout to PDF bytes.

    Args:
        layout: Layout in points
        images: One entry per frame (None renders a placeholder)
        config: Export configuration

    Returns:
        Complete PDF document

    Raises:
        ValueError: If the layout is not in points or images don't match frames

    Example:
        >>> pdf = render_pdf(layout, [None] * layout.page_count)
        >>> pdf[:5]
        b'%PDF-'
    """
    config = config or ExportConfig()
    _check_inputs(layout, images, UnitSystem.POINTS)

    page_size = (float(layout.width), float(layout.height))
    buffer = io.BytesIO()
    c = canvas.Canvas(
        buffer,
        pagesize=page_size,
        invariant=1 if config.pdf_invariant else 0,
        pageCompression=1,
    )
    c.setTitle(layout.project_id)
    c.setCreator("deck_toolkit")

    for frame, image in zip(layout.frames, images):
        if image is not None:
            _draw_image_frame(c, frame, image, layout, config)
        else:
            _draw_placeholder_frame(c, frame, layout, config)
        c.showPage()

    c.save()
    payload = buffer.getvalue()

    logger.info(
        f"Rendered {layout.page_count} PDF pages at {page_size[0]:g}x{page_size[1]:g}pt "
        f"({len(payload)} bytes)"
    )
    return payload


def _check_inputs(
    layout: DocumentLayout,
    images: Sequence[Optional[Image.Image]],
    unit: UnitSystem,
) -> None:
    if layout.unit is not unit:
        raise ValueError(f"Layout must be in {unit.value}, got {layout.unit.value}")
    if len(images) != layout.page_count:
        raise ValueError(f"Expected {layout.page_count} images, got {len(images)}")


def _draw_image_frame(
    c: canvas.Canvas,
    frame: PageFrame,
    image: Image.Image,
    layout: DocumentLayout,
    config: ExportConfig,
) -> None:
    """Draw a crop-to-fill image covering the frame."""
    box = frame.box
    cap = target_pixels(box.width, box.height, layout.unit, config.image_dpi)
    fitted = crop_to_fill(image, box.width, box.height, max_size=cap)
    encoded, _ = encode_image(fitted, jpeg_quality=config.jpeg_quality)

    # ReportLab's origin is bottom-left; frame boxes are top-left
    y = layout.height - box.bottom
    c.drawImage(
        ImageReader(io.BytesIO(encoded)),
        box.left,
        y,
        width=box.width,
        height=box.height,
        mask="auto",
    )
    logger.debug(
        f"Page {frame.position + 1}: image {image.width}x{image.height} -> "
        f"{fitted.width}x{fitted.height}px"
    )


def _draw_placeholder_frame(
    c: canvas.Canvas,
    frame: PageFrame,
    layout: DocumentLayout,
    config: ExportConfig,
) -> None:
    """Draw background, title, subtitle, page label and status."""
    box = frame.box
    width, height = float(layout.width), float(layout.height)
    short_side = min(width, height)
    margin = short_side * SIDE_MARGIN_RATIO
    text_width = width - 2 * margin

    c.saveState()
    c.setFillColorRGB(*_rgb(config.placeholder_fill))
    c.rect(box.left, height - box.bottom, box.width, box.height, stroke=0, fill=1)

    c.setFillColorRGB(*_rgb(config.placeholder_text_color))

    title_size = short_side * TITLE_SIZE_RATIO
    title_lines = simpleSplit(frame.title, TITLE_FONT, title_size, text_width)[:3]
    body_size = short_side * BODY_SIZE_RATIO
    body_lines = simpleSplit(frame.subtitle, BODY_FONT, body_size, text_width)[:4]

    block_height = len(title_lines) * title_size * 1.2 + len(body_lines) * body_size * 1.3
    y = height / 2 + block_height / 2 - title_size

    c.setFont(TITLE_FONT, title_size)
    for line in title_lines:
        c.drawCentredString(width / 2, y, line)
        y -= title_size * 1.2

    c.setFont(BODY_FONT, body_size)
    for line in body_lines:
        c.drawCentredString(width / 2, y, line)
        y -= body_size * 1.3

    label_size = short_side * LABEL_SIZE_RATIO
    c.setFont(BODY_FONT, label_size)
    c.drawString(margin, margin / 2, frame.page_label)
    c.drawRightString(width - margin, margin / 2, frame.status.value.replace("_", " ").lower())
    c.restoreState()


def _rgb(color: tuple[int, int, int]) -> tuple[float, float, float]:
    return tuple(channel / 255 for channel in color)
