"""
Export Images Package

Page image loading and crop-to-fill fitting.
"""

from .cropper import crop_to_fill, encode_image, fill_crop_box, target_pixels
from .provider import PageImageProvider

__all__ = [
    "crop_to_fill",
    "encode_image",
    "fill_crop_box",
    "target_pixels",
    "PageImageProvider",
]
