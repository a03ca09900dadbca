"""
Export Layout Package

Maps a project snapshot onto document geometry.
"""

from .engine import build_layout
from .models import DocumentLayout, FitPolicy, FrameBox, PageFrame

__all__ = [
    "build_layout",
    "DocumentLayout",
    "FitPolicy",
    "FrameBox",
    "PageFrame",
]
