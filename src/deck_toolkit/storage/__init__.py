"""
Module: storage

Purpose:
    Persistence collaborators: the project repository (per-project
    serialized mutations) and the asset store (page images, exports).

Key Classes:
    - ProjectRepository / InMemoryProjectRepository / JsonProjectRepository
    - AssetStore / LocalAssetStore

Dependencies:
    - portalocker: Cross-process locking for the JSON repository
"""

from .assets import (
    AssetStore,
    LocalAssetStore,
    normalize_relative_path,
    project_exports_prefix,
    project_pages_prefix,
)
from .repository import (
    InMemoryProjectRepository,
    JsonProjectRepository,
    ProjectRepository,
)

__all__ = [
    "AssetStore",
    "LocalAssetStore",
    "normalize_relative_path",
    "project_exports_prefix",
    "project_pages_prefix",
    "InMemoryProjectRepository",
    "JsonProjectRepository",
    "ProjectRepository",
]
