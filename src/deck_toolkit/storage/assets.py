"""
Module: storage.assets

Purpose:
    Access to stored files (generated page images, exported documents)
    addressed by paths relative to a storage root, e.g.
    ``<project_id>/pages/slide_1.png`` or ``<project_id>/exports/deck.pdf``.

Key Classes:
    - AssetStore: Abstract interface
    - LocalAssetStore: Directory-backed implementation with atomic publish

Dependencies:
    - tempfile, os (std): Write-then-rename publishing

Used By:
    - export.images.provider: Page image fetch
    - export.controller: Artifact publishing
    - api.app: File download route, project cleanup
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath

from deck_toolkit.core.errors import AssetNotFoundError

logger = logging.getLogger(__name__)

FILES_URL_PREFIX = "/files/"


def project_pages_prefix(project_id: str) -> str:
    return f"{project_id}/pages"


def project_exports_prefix(project_id: str) -> str:
    return f"{project_id}/exports"


class AssetStore(ABC):
    """Abstract file storage keyed by relative POSIX paths."""

    @abstractmethod
    def read_bytes(self, relative_path: str) -> bytes:
        """
        Read a stored file.

        Raises:
            AssetNotFoundError: If missing or outside the store
        """

    @abstractmethod
    def publish(self, relative_path: str, payload: bytes) -> str:
        """
        Atomically store a file.

        Readers either see the complete file or nothing.

        Returns:
            The normalized relative path
        """

    @abstractmethod
    def exists(self, relative_path: str) -> bool:
        """Check whether a file is stored."""

    @abstractmethod
    def delete_prefix(self, prefix: str) -> None:
        """Remove every file under a directory prefix (no error if absent)."""

    def url_for(self, relative_path: str) -> str:
        """Relative download URL for a stored path."""
        return FILES_URL_PREFIX + normalize_relative_path(relative_path)


def normalize_relative_path(relative_path: str) -> str:
    """
    Normalize a storage path and reject escapes.

    Args:
        relative_path: Path like "abc/pages/x.png" (leading "/files/" or
            "/" tolerated)

    Returns:
        Clean POSIX relative path

    Raises:
        AssetNotFoundError: For empty, absolute-after-strip or ".." paths

    Example:
        >>> normalize_relative_path("/files/p1/pages/a.png")
        'p1/pages/a.png'
    """
    if not relative_path or not isinstance(relative_path, str):
        raise AssetNotFoundError(f"Invalid asset path: {relative_path!r}")
    path = relative_path.replace("\\", "/")
    if path.startswith(FILES_URL_PREFIX):
        path = path[len(FILES_URL_PREFIX):]
    path = path.lstrip("/")
    parts = PurePosixPath(path).parts
    if not parts or any(part in ("..", ".") for part in parts):
        raise AssetNotFoundError(f"Invalid asset path: {relative_path!r}")
    return "/".join(parts)


class LocalAssetStore(AssetStore):
    """
    Directory-backed asset store.

    Attributes:
        root: Storage root directory

    Example:
        >>> store = LocalAssetStore(Path("uploads"))
        >>> store.publish("p1/exports/deck.pdf", pdf_bytes)
        'p1/exports/deck.pdf'
        >>> store.url_for("p1/exports/deck.pdf")
        '/files/p1/exports/deck.pdf'
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def resolve(self, relative_path: str) -> Path:
        """
        Absolute filesystem path for a stored file.

        Raises:
            AssetNotFoundError: If the path escapes the root
        """
        clean = normalize_relative_path(relative_path)
        root = self.root.resolve()
        candidate = (root / clean).resolve()
        if candidate != root and root not in candidate.parents:
            raise AssetNotFoundError(f"Asset path escapes storage root: {relative_path!r}")
        return candidate

    def read_bytes(self, relative_path: str) -> bytes:
        path = self.resolve(relative_path)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise AssetNotFoundError(f"Asset not found: {relative_path}") from None
        except IsADirectoryError:
            raise AssetNotFoundError(f"Asset is a directory: {relative_path}") from None

    def exists(self, relative_path: str) -> bool:
        try:
            return self.resolve(relative_path).is_file()
        except AssetNotFoundError:
            return False

    def publish(self, relative_path: str, payload: bytes) -> str:
        clean = normalize_relative_path(relative_path)
        target = self.resolve(clean)
        target.parent.mkdir(parents=True, exist_ok=True)

        # Temp file in the target directory so os.replace stays on one filesystem
        fd, tmp_name = tempfile.mkstemp(prefix=".tmp-", dir=target.parent)
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"Published {len(payload)} bytes to {clean}")
        return clean

    def delete_prefix(self, prefix: str) -> None:
        path = self.resolve(prefix)
        if path == self.root.resolve():
            raise AssetNotFoundError("Refusing to delete the storage root")
        if path.is_dir():
            shutil.rmtree(path)
            logger.debug(f"Removed asset directory {prefix}")
        elif path.exists():
            path.unlink()
