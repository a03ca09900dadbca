"""Presentation project toolkit.

Subpackages:
- deck_toolkit.core: project/page models, aspect ratio policy, errors
- deck_toolkit.storage: project repository and asset storage
- deck_toolkit.export: layout engine and PDF/PPTX renderers
- deck_toolkit.api: Flask HTTP API
"""

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DIST_NAME = "deck-toolkit"


def _read_version() -> str:
    try:
        return version(DIST_NAME)
    except PackageNotFoundError:
        pass

    # Source checkout without an install
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    if pyproject.is_file():
        for line in pyproject.read_text(encoding="utf-8").splitlines():
            key, _, value = line.partition("=")
            if key.strip() == "version":
                return value.strip().strip("\"'")
    return "0.0.0"


__version__ = _read_version()
__all__: list[str] = ["__version__"]
