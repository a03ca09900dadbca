"""
Export Package

Turns a project snapshot into a PDF or PPTX document at the project's
aspect ratio and publishes it to the asset store.

Example:
    >>> from deck_toolkit.export import ExportCoordinator
    >>> artifact = ExportCoordinator(repo, store).export(project_id, "pdf")
    >>> artifact.download_url
    '/files/<project_id>/exports/presentation_20260101_120000_ab12cd34.pdf'
"""

from .config import ExportConfig, ExportFormat, parse_export_format
from .controller import ExportArtifact, ExportCoordinator

__all__ = [
    "ExportConfig",
    "ExportFormat",
    "parse_export_format",
    "ExportArtifact",
    "ExportCoordinator",
]
