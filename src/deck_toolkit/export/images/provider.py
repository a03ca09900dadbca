"""
Module: export.images.provider

Purpose:
    Load generated page images from the asset store for export.
    A page whose image is missing or cannot be decoded degrades to a
    placeholder instead of failing the whole export.

Key Classes:
    - PageImageProvider: Fetch and decode page images

Dependencies:
    - PIL: Image decoding
    - storage.AssetStore: Byte access

Used By:
    - export.controller: Image loading
"""

from __future__ import annotations

import io
import logging
from typing import Dict, Iterable, List, Optional

from PIL import Image

from deck_toolkit.core.errors import AssetNotFoundError
from deck_toolkit.storage import AssetStore

logger = logging.getLogger(__name__)


class PageImageProvider:
    """
    Fetches page images by stored path.

    Decoded images are cached per provider instance, so one provider
    should live for one export.

    Attributes:
        asset_store: Source of image bytes

    Example:
        >>> provider = PageImageProvider(LocalAssetStore(Path("uploads")))
        >>> image = provider.get_image("p1/pages/slide_1.png")
        >>> image is None  # missing file
        True
    """

    def __init__(self, asset_store: AssetStore) -> None:
        self.asset_store = asset_store
        self._cache: Dict[str, Optional[Image.Image]] = {}
        self.missing: List[str] = []

    def get_image(self, path: Optional[str]) -> Optional[Image.Image]:
        """
        Load one image.

        Args:
            path: Stored relative path (None for pages without an image)

        Returns:
            Fully loaded PIL image, or None if unavailable
        """
        if not path:
            return None
        if path in self._cache:
            return self._cache[path]

        image = self._load(path)
        self._cache[path] = image
        if image is None:
            self.missing.append(path)
        return image

    def get_images(self, paths: Iterable[Optional[str]]) -> List[Optional[Image.Image]]:
        """Load images in the given order (None entries stay None)."""
        return [self.get_image(path) for path in paths]

    def _load(self, path: str) -> Optional[Image.Image]:
        try:
            payload = self.asset_store.read_bytes(path)
        except AssetNotFoundError as e:
            logger.warning(f"Page image unavailable, using placeholder: {e.message}")
            return None
        except OSError as e:
            logger.warning(f"Could not read page image {path}, using placeholder: {e}")
            return None

        try:
            image = Image.open(io.BytesIO(payload))
            image.load()
        except (OSError, Image.DecompressionBombError) as e:
            logger.warning(f"Could not decode page image {path}, using placeholder: {e}")
            return None

        logger.debug(f"Loaded page image {path} ({image.width}x{image.height} {image.mode})")
        return image

    def close(self) -> None:
        """Release decoded images."""
        for image in self._cache.values():
            if image is not None:
                image.close()
        self._cache.clear()

    def __enter__(self) -> "PageImageProvider":
        return self

    def __exit__(self, *args) -> None:
        self.close()
