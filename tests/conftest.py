import io
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add src to sys.path so we can import deck_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from deck_toolkit.core.models import Project
from deck_toolkit.export import ExportConfig, ExportCoordinator
from deck_toolkit.service import ProjectService
from deck_toolkit.storage import InMemoryProjectRepository, JsonProjectRepository, LocalAssetStore


def make_png(size=(64, 36), color=(200, 30, 30), mode="RGB") -> bytes:
    """Encode a solid-color image as PNG bytes."""
    img = Image.new(mode, size, color=color)
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


# Common test fixtures
@pytest.fixture
def memory_repo():
    return InMemoryProjectRepository()


@pytest.fixture
def json_repo(tmp_path: Path):
    return JsonProjectRepository(tmp_path / "projects")


@pytest.fixture
def asset_store(tmp_path: Path):
    return LocalAssetStore(tmp_path / "uploads")


@pytest.fixture
def service(memory_repo, asset_store):
    return ProjectService(memory_repo, asset_store)


@pytest.fixture
def coordinator(memory_repo, asset_store):
    return ExportCoordinator(
        memory_repo,
        asset_store,
        ExportConfig(pdf_invariant=True),
        public_base_url="http://deck.test",
    )


@pytest.fixture
def png_factory():
    """Factory: PNG bytes for a given size/color/mode."""
    return make_png


@pytest.fixture
def png_bytes():
    """16:9 test image."""
    return make_png((64, 36))


@pytest.fixture
def project_with_pages(service):
    """Factory: stored project with N empty pages."""

    def _make(ratio="4:3", pages=2) -> Project:
        project = service.create_project("Quarterly review", ratio)
        for _ in range(pages):
            project, _page = service.add_page(project.id)
        return project

    return _make
