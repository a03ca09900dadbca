"""
Module: export.images.cropper

Purpose:
    Utilities for fitting page images into document frames.
    Centered crop-to-fill: the image is cropped to the frame ratio and
    then scaled, so it covers the frame with no letterbox bars.

Key Functions:
    - fill_crop_box(): Centered crop box for a target ratio
    - crop_to_fill(): Crop and downscale an image for a frame
    - target_pixels(): Raster size for a frame at a given DPI
    - encode_image(): Encode for embedding (PNG with alpha, else JPEG)

Dependencies:
    - PIL: Image manipulation

Used By:
    - export.output.pdf_renderer
    - export.output.pptx_renderer
"""

from __future__ import annotations

import io
from typing import Optional, Tuple, Union

from PIL import Image

from deck_toolkit.core.models import UnitSystem
from deck_toolkit.core.models.aspect_ratio import EMU_PER_INCH, POINTS_PER_INCH

Number = Union[int, float]


def fill_crop_box(
    image_width: int,
    image_height: int,
    frame_width: Number,
    frame_height: Number,
) -> Tuple[int, int, int, int]:
    """
    Compute the centered crop box that matches the frame ratio.

    Args:
        image_width: Source width in pixels
        image_height: Source height in pixels
        frame_width: Frame width (any unit)
        frame_height: Frame height (same unit)

    Returns:
        (left, top, right, bottom) in source pixels

    Raises:
        ValueError: If any dimension is not positive

    Example:
        >>> fill_crop_box(1600, 900, 4, 3)
        (200, 0, 1400, 900)
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Image size must be positive: {image_width}x{image_height}")
    if frame_width <= 0 or frame_height <= 0:
        raise ValueError(f"Frame size must be positive: {frame_width}x{frame_height}")

    # Compare ratios by cross-multiplying to avoid float drift
    if image_width * frame_height > frame_width * image_height:
        # Too wide: keep full height, trim the sides
        crop_width = round(image_height * frame_width / frame_height)
        crop_width = max(1, min(crop_width, image_width))
        left = (image_width - crop_width) // 2
        return left, 0, left + crop_width, image_height

    # Too tall (or equal): keep full width, trim top and bottom
    crop_height = round(image_width * frame_height / frame_width)
    crop_height = max(1, min(crop_height, image_height))
    top = (image_height - crop_height) // 2
    return 0, top, image_width, top + crop_height


def target_pixels(
    frame_width: Number,
    frame_height: Number,
    unit: UnitSystem,
    dpi: int,
) -> Tuple[int, int]:
    """
    Raster size of a frame at the given resolution.

    Example:
        >>> target_pixels(720, 540, UnitSystem.POINTS, 150)
        (1500, 1125)
    """
    per_inch = EMU_PER_INCH if unit is UnitSystem.EMU else POINTS_PER_INCH
    width_px = max(1, round(frame_width / per_inch * dpi))
    height_px = max(1, round(frame_height / per_inch * dpi))
    return width_px, height_px


def crop_to_fill(
    image: Image.Image,
    frame_width: Number,
    frame_height: Number,
    *,
    max_size: Optional[Tuple[int, int]] = None,
) -> Image.Image:
    """
    Crop an image to the frame ratio, centered, and cap its resolution.

    Images smaller than ``max_size`` are not upscaled; the renderer
    stretches them to the frame, which keeps the ratio since the crop
    already matches it.

    Args:
        image: Source image
        frame_width: Frame width (any unit)
        frame_height: Frame height (same unit)
        max_size: Optional (width, height) raster cap in pixels

    Returns:
        New image whose ratio matches the frame

    Example:
        >>> fitted = crop_to_fill(Image.new("RGB", (1600, 900)), 720, 540)
        >>> fitted.size
        (1200, 900)
    """
    box = fill_crop_box(image.width, image.height, frame_width, frame_height)
    cropped = image.crop(box)

    if max_size is not None:
        cap_w, cap_h = max_size
        if cropped.width > cap_w or cropped.height > cap_h:
            cropped = cropped.resize((cap_w, cap_h), Image.Resampling.LANCZOS)

    return cropped


def encode_image(image: Image.Image, *, jpeg_quality: int = 90) -> Tuple[bytes, str]:
    """
    Encode an image for embedding in a document.

    Images with transparency stay PNG; everything else becomes JPEG.

    Returns:
        (encoded bytes, PIL format name)
    """
    buffer = io.BytesIO()
    if _has_alpha(image):
        image.save(buffer, format="PNG", optimize=True)
        return buffer.getvalue(), "PNG"

    if image.mode != "RGB":
        image = image.convert("RGB")
    image.save(buffer, format="JPEG", quality=jpeg_quality)
    return buffer.getvalue(), "JPEG"


def _has_alpha(image: Image.Image) -> bool:
    if image.mode in ("RGBA", "LA"):
        return True
    return image.mode == "P" and "transparency" in image.info
