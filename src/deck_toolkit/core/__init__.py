"""
Deck Toolkit Core Package

Shared data models, error taxonomy and serialization helpers. Everything
here is free of I/O so it can be unit-tested in isolation; storage and
rendering live in ``deck_toolkit.storage`` and ``deck_toolkit.export``.
"""

from .errors import DeckError
from .models import (
    AspectRatio,
    Page,
    PageStatus,
    Project,
    ProjectSnapshot,
    ProjectStatus,
    UnitSystem,
)

__all__ = [
    "DeckError",
    "AspectRatio",
    "Page",
    "PageStatus",
    "Project",
    "ProjectSnapshot",
    "ProjectStatus",
    "UnitSystem",
]
