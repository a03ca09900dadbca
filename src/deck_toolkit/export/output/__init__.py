"""
Export Output Package

Document renderers. Each takes a DocumentLayout plus one optional image
per frame and returns the finished document as bytes.
"""

from .pdf_renderer import render_pdf
from .pptx_renderer import render_pptx

__all__ = ["render_pdf", "render_pptx"]
