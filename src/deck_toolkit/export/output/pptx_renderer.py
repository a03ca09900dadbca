"""
Module: export.output.pptx_renderer

Purpose:
    Render a DocumentLayout to PPTX using python-pptx.
    The slide size is set once on the presentation, so the file carries a
    single sldSz; each slide is a blank layout holding either a
    full-bleed picture or a placeholder text box.

Key Functions:
    - render_pptx(): Main rendering function

Dependencies:
    - python-pptx: Presentation generation
    - PIL: Image handling

Used By:
    - export.controller: Pipeline orchestration
"""

from __future__ import annotations

import io
import logging
from typing import Optional, Sequence

from PIL import Image
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.util import Emu, Pt

from deck_toolkit.core.models import UnitSystem
from deck_toolkit.core.models.aspect_ratio import EMU_PER_POINT
from deck_toolkit.export.config import ExportConfig
from deck_toolkit.export.images import crop_to_fill, encode_image, target_pixels
from deck_toolkit.export.layout.models import DocumentLayout, PageFrame

logger = logging.getLogger(__name__)

BLANK_LAYOUT_INDEX = 6
TITLE_SIZE_RATIO = 0.075
BODY_SIZE_RATIO = 0.04
LABEL_SIZE_RATIO = 0.03
SIDE_MARGIN_RATIO = 0.08


def render_pptx(
    layout: DocumentLayout,
    images: Sequence[Optional[Image.Image]],
    config: Optional[ExportConfig] = None,
) -> bytes:
    """
    Render a layout to PPTX bytes.

    Args:
        layout: Layout in EMU
        images: One entry per frame (None renders a placeholder)
        config: Export configuration

    Returns:
        Complete .pptx archive

    Raises:
        ValueError: If the layout is not in EMU or images don't match frames

    Example:
        >>> pptx_bytes = render_pptx(layout, [None] * layout.page_count)
        >>> pptx_bytes[:2]
        b'PK'
    """
    config = config or ExportConfig()
    if layout.unit is not UnitSystem.EMU:
        raise ValueError(f"Layout must be in emu, got {layout.unit.value}")
    if len(images) != layout.page_count:
        raise ValueError(f"Expected {layout.page_count} images, got {len(images)}")

    prs = Presentation()
    prs.slide_width = Emu(int(layout.width))
    prs.slide_height = Emu(int(layout.height))
    # Default template declares type="screen4x3"; without it the size reads as custom
    prs._element.sldSz.attrib.pop("type", None)
    prs.core_properties.title = layout.project_id

    blank_layout = prs.slide_layouts[BLANK_LAYOUT_INDEX]
    for frame, image in zip(layout.frames, images):
        slide = prs.slides.add_slide(blank_layout)
        if image is not None:
            _add_picture(slide, frame, image, layout, config)
        else:
            _add_placeholder(slide, frame, layout, config)

    buffer = io.BytesIO()
    prs.save(buffer)
    payload = buffer.getvalue()

    logger.info(
        f"Rendered {layout.page_count} PPTX slides at {layout.width}x{layout.height} EMU "
        f"({len(payload)} bytes)"
    )
    return payload


def _add_picture(slide, frame: PageFrame, image: Image.Image, layout: DocumentLayout, config: ExportConfig) -> None:
    box = frame.box
    cap = target_pixels(box.width, box.height, layout.unit, config.image_dpi)
    fitted = crop_to_fill(image, box.width, box.height, max_size=cap)
    encoded, _ = encode_image(fitted, jpeg_quality=config.jpeg_quality)

    slide.shapes.add_picture(
        io.BytesIO(encoded),
        Emu(int(box.left)),
        Emu(int(box.top)),
        Emu(int(box.width)),
        Emu(int(box.height)),
    )
    logger.debug(
        f"Slide {frame.position + 1}: image {image.width}x{image.height} -> "
        f"{fitted.width}x{fitted.height}px"
    )


def _add_placeholder(slide, frame: PageFrame, layout: DocumentLayout, config: ExportConfig) -> None:
    width, height = int(layout.width), int(layout.height)
    short_side_pt = min(width, height) / EMU_PER_POINT
    margin = int(min(width, height) * SIDE_MARGIN_RATIO)
    text_color = RGBColor(*config.placeholder_text_color)

    fill = slide.background.fill
    fill.solid()
    fill.fore_color.rgb = RGBColor(*config.placeholder_fill)

    body = slide.shapes.add_textbox(
        Emu(margin), Emu(margin), Emu(width - 2 * margin), Emu(height - 3 * margin)
    )
    tf = body.text_frame
    tf.word_wrap = True
    tf.vertical_anchor = MSO_ANCHOR.MIDDLE

    title = tf.paragraphs[0]
    title.text = frame.title
    title.alignment = PP_ALIGN.CENTER
    title.font.bold = True
    title.font.size = Pt(round(short_side_pt * TITLE_SIZE_RATIO))
    title.font.color.rgb = text_color

    if frame.subtitle:
        sub = tf.add_paragraph()
        sub.text = frame.subtitle
        sub.alignment = PP_ALIGN.CENTER
        sub.font.size = Pt(round(short_side_pt * BODY_SIZE_RATIO))
        sub.font.color.rgb = text_color

    label = slide.shapes.add_textbox(
        Emu(margin), Emu(height - 2 * margin), Emu(width - 2 * margin), Emu(margin)
    )
    label_p = label.text_frame.paragraphs[0]
    label_p.text = f"{frame.page_label} · {frame.status.value.replace('_', ' ').lower()}"
    label_p.alignment = PP_ALIGN.LEFT
    label_p.font.size = Pt(round(short_side_pt * LABEL_SIZE_RATIO))
    label_p.font.color.rgb = text_color
