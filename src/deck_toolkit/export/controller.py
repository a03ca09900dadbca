"""
Module: export.controller

Purpose:
    Orchestrate the complete export pipeline.
    Snapshot → Layout → Images → Render → Verify → Publish

Key Functions:
    - ExportCoordinator.export(): Main entry point for exporting a project

Key Classes:
    - ExportCoordinator: Pipeline with its collaborators
    - ExportArtifact: Complete export result

Dependencies:
    - export.layout: Document geometry
    - export.images: Page image loading
    - export.output: PDF/PPTX rendering
    - fitz (PyMuPDF): Rendered PDF verification
    - storage: Project reads, artifact publishing

Used By:
    - api.app: Export endpoints
"""

from __future__ import annotations

import io
import logging
import time
import uuid
import zipfile
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

import fitz  # PyMuPDF

from deck_toolkit.core.errors import EmptyProjectError, ExportRenderError
from deck_toolkit.core.models import ProjectSnapshot, UnitSystem
from deck_toolkit.storage import AssetStore, ProjectRepository, project_exports_prefix

from .config import ExportConfig, ExportFormat, parse_export_format
from .images import PageImageProvider
from .layout import DocumentLayout, build_layout
from .output import render_pdf, render_pptx

logger = logging.getLogger(__name__)

# Page size tolerance when re-reading a rendered PDF, in points
PDF_SIZE_TOLERANCE_PT = 0.01


@dataclass(frozen=True)
class ExportArtifact:
    """
    Complete export result (immutable).

    Attributes:
        format: pdf or pptx
        payload: Document bytes
        width: Document width in ``unit``
        height: Document height in ``unit``
        unit: pt for PDF, emu for PPTX
        storage_path: Stored path ("<project_id>/exports/<file>")
        download_url: Relative URL ("/files/...")
        download_url_absolute: URL including the public base URL
        page_count: Number of pages/slides

    Example:
        >>> artifact = coordinator.export(project_id, "pdf")
        >>> artifact.width, artifact.height, artifact.unit.value
        (720.0, 540.0, 'pt')
    """

    format: ExportFormat
    payload: bytes
    width: Union[int, float]
    height: Union[int, float]
    unit: UnitSystem
    storage_path: str
    download_url: str
    download_url_absolute: str
    page_count: int

    @property
    def filename(self) -> str:
        return self.storage_path.rsplit("/", 1)[-1]

    def to_dict(self) -> dict:
        """API representation (payload excluded)."""
        return {
            "format": self.format.value,
            "download_url": self.download_url,
            "download_url_absolute": self.download_url_absolute,
            "width": self.width,
            "height": self.height,
            "unit": self.unit.value,
            "page_count": self.page_count,
        }


class ExportCoordinator:
    """
    Export pipeline over a repository and an asset store.

    Example:
        >>> coordinator = ExportCoordinator(repo, LocalAssetStore(Path("uploads")))
        >>> artifact = coordinator.export(project_id, "pptx", base_url="http://localhost:5000")
        >>> artifact.download_url_absolute
        'http://localhost:5000/files/<project_id>/exports/presentation_..._....pptx'
    """

    def __init__(
        self,
        repository: ProjectRepository,
        asset_store: AssetStore,
        config: Optional[ExportConfig] = None,
        *,
        public_base_url: Optional[str] = None,
    ) -> None:
        self.repository = repository
        self.asset_store = asset_store
        self.config = config or ExportConfig()
        self.public_base_url = public_base_url

    def export(
        self,
        project_id: str,
        fmt: Union[str, ExportFormat],
        *,
        base_url: Optional[str] = None,
    ) -> ExportArtifact:
        """
        Export a project from start to finish.

        Pipeline:
        1. Read a frozen snapshot of the project
        2. Reject empty projects
        3. Lay out pages in the format's unit
        4. Load page images (missing ones become placeholders)
        5. Render
        6. Verify the rendered document
        7. Publish atomically

        Args:
            project_id: Project to export
            fmt: "pdf" or "pptx"
            base_url: Overrides the configured public base URL

        Returns:
            ExportArtifact with paths, URLs and dimensions

        Raises:
            UnsupportedFormatError: If the format is unknown
            ProjectNotFoundError: If the project does not exist
            EmptyProjectError: If the project has no pages
            ExportRenderError: If rendering or verification fails
        """
        export_format = parse_export_format(fmt)
        start_time = time.perf_counter()

        # 1. Snapshot
        snapshot = self.repository.get(project_id).snapshot()

        # 2. Empty check
        if snapshot.is_empty:
            raise EmptyProjectError(project_id)

        logger.info(
            f"Starting {export_format.value} export for {project_id} "
            f"({snapshot.page_count} pages, {snapshot.image_aspect_ratio.value})"
        )

        # 3. Layout
        layout = build_layout(snapshot, export_format.unit, self.config)

        # 4. Images
        with PageImageProvider(self.asset_store) as provider:
            images = provider.get_images(layout.image_paths)
            if provider.missing:
                logger.warning(
                    f"Export {project_id}: {len(provider.missing)} page image(s) "
                    f"replaced by placeholders"
                )

            # 5. Render
            payload = self._render(export_format, layout, images)

        # 6. Verify
        self._verify(export_format, layout, payload)

        # 7. Publish
        storage_path = self.asset_store.publish(
            self._artifact_path(snapshot, export_format), payload
        )
        download_url = self.asset_store.url_for(storage_path)

        elapsed = time.perf_counter() - start_time
        logger.info(f"Published {storage_path} in {elapsed:.2f}s")

        return ExportArtifact(
            format=export_format,
            payload=payload,
            width=layout.width,
            height=layout.height,
            unit=layout.unit,
            storage_path=storage_path,
            download_url=download_url,
            download_url_absolute=_absolute_url(base_url or self.public_base_url, download_url),
            page_count=layout.page_count,
        )

    def _render(self, export_format: ExportFormat, layout: DocumentLayout, images) -> bytes:
        renderer = render_pdf if export_format is ExportFormat.PDF else render_pptx
        try:
            return renderer(layout, images, self.config)
        except Exception as e:
            logger.error(f"{export_format.value} render failed for {layout.project_id}: {e}")
            raise ExportRenderError(
                f"Failed to render {export_format.value} for project {layout.project_id}: {e}"
            ) from e

    def _verify(self, export_format: ExportFormat, layout: DocumentLayout, payload: bytes) -> None:
        if export_format is ExportFormat.PDF:
            _verify_pdf(layout, payload)
        else:
            _verify_pptx(layout, payload)

    def _artifact_path(self, snapshot: ProjectSnapshot, export_format: ExportFormat) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        suffix = uuid.uuid4().hex[:8]
        filename = f"{self.config.filename_stem}_{timestamp}_{suffix}.{export_format.extension}"
        return f"{project_exports_prefix(snapshot.project_id)}/{filename}"


def _verify_pdf(layout: DocumentLayout, payload: bytes) -> None:
    """Re-open the PDF and check page count and page size."""
    try:
        doc = fitz.open(stream=payload, filetype="pdf")
    except Exception as e:
        raise ExportRenderError(f"Rendered PDF cannot be opened: {e}") from e

    try:
        if doc.page_count != layout.page_count:
            raise ExportRenderError(
                f"Rendered PDF has {doc.page_count} pages, expected {layout.page_count}"
            )
        for page in doc:
            rect = page.rect
            if (
                abs(rect.width - float(layout.width)) > PDF_SIZE_TOLERANCE_PT
                or abs(rect.height - float(layout.height)) > PDF_SIZE_TOLERANCE_PT
            ):
                raise ExportRenderError(
                    f"Rendered PDF page {page.number + 1} is {rect.width}x{rect.height}pt, "
                    f"expected {layout.width}x{layout.height}pt"
                )
    finally:
        doc.close()


def _verify_pptx(layout: DocumentLayout, payload: bytes) -> None:
    """Check the archive is a presentation with one slide per page."""
    try:
        with zipfile.ZipFile(io.BytesIO(payload)) as archive:
            names = set(archive.namelist())
    except zipfile.BadZipFile as e:
        raise ExportRenderError(f"Rendered PPTX is not a valid archive: {e}") from e

    if "ppt/presentation.xml" not in names:
        raise ExportRenderError("Rendered PPTX is missing ppt/presentation.xml")
    slide_count = sum(
        1 for name in names if name.startswith("ppt/slides/slide") and name.endswith(".xml")
    )
    if slide_count != layout.page_count:
        raise ExportRenderError(
            f"Rendered PPTX has {slide_count} slides, expected {layout.page_count}"
        )


def _absolute_url(base_url: Optional[str], download_url: str) -> str:
    if not base_url:
        return download_url
    return base_url.rstrip("/") + download_url
