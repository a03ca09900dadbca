"""
Tests for export.output (PDF and PPTX renderers)

Test Coverage:
- render_pdf(): MediaBox per page, page count, placeholders, invariant mode
- render_pptx(): Single sldSz, slide count, pictures vs placeholders
- Unit and image-count checks

Uses pypdf to inspect generated PDFs and zipfile for PPTX archives.
"""

import io
import re
import zipfile

import pytest
from PIL import Image

from deck_toolkit.core.models import OutlineContent, Project, UnitSystem
from deck_toolkit.export import ExportConfig
from deck_toolkit.export.layout import build_layout
from deck_toolkit.export.output import render_pdf, render_pptx

# Try to import pypdf for PDF inspection
try:
    from pypdf import PdfReader
    PYPDF_AVAILABLE = True
except ImportError:
    PYPDF_AVAILABLE = False

SLD_SZ_RE = re.compile(rb'<p:sldSz\b[^>]*\bcx="(\d+)"[^>]*\bcy="(\d+)"')


def _project(ratio: str, pages: int = 2) -> Project:
    project = Project.create("Renderer test", ratio)
    for _ in range(pages):
        project, _page = project.add_page()
    project = project.set_outline(project.pages[0].id, OutlineContent("Welcome", ("First point",)))
    return project


def _pptx_parts(payload: bytes) -> dict:
    with zipfile.ZipFile(io.BytesIO(payload)) as archive:
        return {name: archive.read(name) for name in archive.namelist()}


@pytest.fixture
def photo():
    """16:9 image with a distinct left and right half."""
    image = Image.new("RGB", (160, 90), color=(255, 0, 0))
    image.paste((0, 0, 255), (80, 0, 160, 90))
    return image


# ─────────────────────────────────────────────────────────────────────────────
# PDF
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.skipif(not PYPDF_AVAILABLE, reason="pypdf not installed")
@pytest.mark.parametrize(
    "ratio,expected",
    [("4:3", (720, 540)), ("16:9", (720, 405)), ("9:16", (405, 720)), ("1:1", (720, 720))],
)
def test_render_pdf_then_every_page_has_ratio_mediabox(ratio, expected, photo):
    # Arrange
    layout = build_layout(_project(ratio, pages=3).snapshot(), UnitSystem.POINTS)
    images = [None, photo, None]

    # Act
    payload = render_pdf(layout, images, ExportConfig(pdf_invariant=True))

    # Assert
    reader = PdfReader(io.BytesIO(payload))
    assert len(reader.pages) == 3
    for page in reader.pages:
        box = page.mediabox
        assert (float(box.left), float(box.bottom)) == (0.0, 0.0)
        assert float(box.width) == pytest.approx(expected[0], abs=0.01)
        assert float(box.height) == pytest.approx(expected[1], abs=0.01)


@pytest.mark.skipif(not PYPDF_AVAILABLE, reason="pypdf not installed")
def test_render_pdf_when_no_images_then_placeholder_text():
    layout = build_layout(_project("4:3").snapshot(), UnitSystem.POINTS)

    payload = render_pdf(layout, [None, None])

    reader = PdfReader(io.BytesIO(payload))
    assert "Welcome" in reader.pages[0].extract_text()
    assert "Page 2" in reader.pages[1].extract_text()


def test_render_pdf_when_invariant_then_bytes_stable(photo):
    layout = build_layout(_project("3:2").snapshot(), UnitSystem.POINTS)
    config = ExportConfig(pdf_invariant=True)

    first = render_pdf(layout, [photo, None], config)
    second = render_pdf(layout, [photo, None], config)

    assert first.startswith(b"%PDF-")
    assert first == second


def test_render_pdf_when_layout_in_emu_then_raises():
    layout = build_layout(_project("4:3").snapshot(), UnitSystem.EMU)

    with pytest.raises(ValueError):
        render_pdf(layout, [None, None])


def test_render_pdf_when_image_count_mismatch_then_raises():
    layout = build_layout(_project("4:3").snapshot(), UnitSystem.POINTS)

    with pytest.raises(ValueError):
        render_pdf(layout, [None])


# ─────────────────────────────────────────────────────────────────────────────
# PPTX
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "ratio,expected",
    [
        ("4:3", (9_144_000, 6_858_000)),
        ("16:9", (9_144_000, 5_143_500)),
        ("9:16", (5_143_500, 9_144_000)),
        ("3:2", (9_144_000, 6_096_000)),
    ],
)
def test_render_pptx_then_single_slide_size(ratio, expected):
    # Arrange
    layout = build_layout(_project(ratio).snapshot(), UnitSystem.EMU)

    # Act
    payload = render_pptx(layout, [None, None])

    # Assert
    presentation_xml = _pptx_parts(payload)["ppt/presentation.xml"]
    sizes = SLD_SZ_RE.findall(presentation_xml)
    assert len(sizes) == 1
    assert tuple(int(v) for v in sizes[0]) == expected
    assert b"type=" not in re.search(rb"<p:sldSz\b[^>]*/>", presentation_xml).group(0)


def test_render_pptx_then_one_slide_per_page(photo):
    layout = build_layout(_project("16:9", pages=3).snapshot(), UnitSystem.EMU)

    parts = _pptx_parts(render_pptx(layout, [photo, None, photo]))

    slides = sorted(n for n in parts if re.fullmatch(r"ppt/slides/slide\d+\.xml", n))
    assert len(slides) == 3
    media = [n for n in parts if n.startswith("ppt/media/")]
    assert media  # pictures embedded


def test_render_pptx_when_image_then_picture_covers_slide(photo):
    # Arrange
    layout = build_layout(_project("4:3", pages=1).snapshot(), UnitSystem.EMU)

    # Act
    slide_xml = _pptx_parts(render_pptx(layout, [photo]))["ppt/slides/slide1.xml"]

    # Assert
    assert b"<p:pic" in slide_xml
    assert b'<a:off x="0" y="0"/>' in slide_xml
    assert b'<a:ext cx="9144000" cy="6858000"/>' in slide_xml


def test_render_pptx_when_no_image_then_placeholder_title():
    layout = build_layout(_project("4:3").snapshot(), UnitSystem.EMU)

    parts = _pptx_parts(render_pptx(layout, [None, None]))

    assert b"Welcome" in parts["ppt/slides/slide1.xml"]
    assert b"Page 2" in parts["ppt/slides/slide2.xml"]
    assert b"<p:pic" not in parts["ppt/slides/slide1.xml"]


def test_render_pptx_when_layout_in_points_then_raises():
    layout = build_layout(_project("4:3").snapshot(), UnitSystem.POINTS)

    with pytest.raises(ValueError):
        render_pptx(layout, [None, None])
