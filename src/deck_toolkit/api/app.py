"""
Module: api.app

Purpose:
    Flask application factory. Wires repository, asset store, service and
    export coordinator, registers the project blueprint, the stored-file
    route and error handlers that map DeckError kinds to HTTP statuses.

Key Functions:
    - create_app(): Build a configured Flask app
    - status_for(): HTTP status for a DeckError

Dependencies:
    - flask: HTTP server
    - storage: JsonProjectRepository, LocalAssetStore

Used By:
    - run_server.py: Launcher
"""

from __future__ import annotations

import io
import logging
import mimetypes
from typing import Optional

from flask import Flask, jsonify, send_file
from werkzeug.exceptions import HTTPException

from deck_toolkit.common.logging_utils import configure_logging
from deck_toolkit.config import AppConfig
from deck_toolkit.core.errors import (
    AspectRatioLockedError,
    AssetNotFoundError,
    ConcurrentModificationError,
    DeckError,
    EmptyProjectError,
    ExportRenderError,
    InvalidOrderIndexError,
    InvalidPayloadError,
    InvalidRatioError,
    InvalidTransitionError,
    PageNotFoundError,
    ProjectNotFoundError,
    UnsupportedFormatError,
)
from deck_toolkit.export import ExportCoordinator, ExportFormat
from deck_toolkit.service import ProjectService
from deck_toolkit.storage import (
    AssetStore,
    JsonProjectRepository,
    LocalAssetStore,
    ProjectRepository,
    normalize_relative_path,
)

from .routes import bp as projects_bp

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = {
    InvalidRatioError: 400,
    InvalidOrderIndexError: 400,
    InvalidPayloadError: 400,
    UnsupportedFormatError: 400,
    InvalidTransitionError: 409,
    AspectRatioLockedError: 409,
    ConcurrentModificationError: 409,
    ProjectNotFoundError: 404,
    PageNotFoundError: 404,
    AssetNotFoundError: 404,
    EmptyProjectError: 422,
    ExportRenderError: 500,
}


def status_for(error: DeckError) -> int:
    """HTTP status for an error, following the class hierarchy."""
    for cls in type(error).__mro__:
        if cls in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[cls]
    return 500


def create_app(
    config: Optional[AppConfig] = None,
    *,
    repository: Optional[ProjectRepository] = None,
    asset_store: Optional[AssetStore] = None,
) -> Flask:
    """
    Build the Flask app.

    Args:
        config: Server configuration (AppConfig.from_env() when omitted)
        repository: Override the JSON repository (e.g. in-memory for tests)
        asset_store: Override the local asset store

    Returns:
        Configured Flask application

    Example:
        >>> app = create_app(AppConfig(data_dir=Path("/tmp/deck")))
        >>> app.test_client().get("/api/projects").status_code
        200
    """
    config = config or AppConfig.from_env()
    configure_logging(config.log_level)

    if repository is None:
        repository = JsonProjectRepository(config.projects_dir)
    if asset_store is None:
        asset_store = LocalAssetStore(config.uploads_dir)

    app = Flask(__name__)
    app.json.sort_keys = False
    app.extensions["deck_toolkit"] = {
        "config": config,
        "repository": repository,
        "asset_store": asset_store,
        "public_base_url": config.public_base_url,
        "service": ProjectService(repository, asset_store),
        "coordinator": ExportCoordinator(
            repository, asset_store, config.export, public_base_url=config.public_base_url
        ),
    }

    app.register_blueprint(projects_bp)
    _register_file_route(app, asset_store)
    _register_error_handlers(app)

    logger.info(
        f"App ready (projects={config.projects_dir}, uploads={config.uploads_dir})"
    )
    return app


def _register_file_route(app: Flask, asset_store: AssetStore) -> None:
    @app.route("/files/<path:relative_path>", methods=["GET"])
    def serve_file(relative_path: str):
        clean = normalize_relative_path(relative_path)
        payload = asset_store.read_bytes(clean)
        filename = clean.rsplit("/", 1)[-1]
        media_type = _media_type(filename)
        return send_file(
            io.BytesIO(payload),
            mimetype=media_type,
            as_attachment="/exports/" in f"/{clean}",
            download_name=filename,
        )

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"success": True, "data": {"status": "ok"}})


def _media_type(filename: str) -> str:
    if filename.lower().endswith(".pptx"):
        return ExportFormat.PPTX.media_type
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or "application/octet-stream"


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DeckError)
    def handle_deck_error(error: DeckError):
        status = status_for(error)
        if status >= 500:
            logger.error(f"{error.kind}: {error.message}")
        else:
            logger.info(f"Request rejected ({status} {error.kind}): {error.message}")
        return jsonify({"success": False, "error": error.to_dict()}), status

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        kind = (error.name or "http_error").lower().replace(" ", "_")
        body = {"kind": kind, "message": error.description}
        return jsonify({"success": False, "error": body}), error.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        logger.exception(f"Unhandled error: {error}")
        body = {"kind": "internal_error", "message": "Internal server error"}
        return jsonify({"success": False, "error": body}), 500
