"""
Module: api.routes

Purpose:
    Flask blueprint for project, page and export endpoints. Handlers
    parse the request, call ProjectService / ExportCoordinator and wrap
    results in the ``{"success": true, "data": ...}`` envelope; errors
    propagate to the handlers registered in api.app.

Used By:
    - api.app: create_app() registers the blueprint
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Blueprint, current_app, jsonify, request

from deck_toolkit.core.errors import InvalidPayloadError, InvalidRatioError
from deck_toolkit.core.models import AspectRatio

from .payloads import page_to_dict, project_summary, project_to_dict

logger = logging.getLogger(__name__)

bp = Blueprint("projects", __name__, url_prefix="/api/projects")


def _ctx() -> dict:
    return current_app.extensions["deck_toolkit"]


def _ok(data: Any, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def _json_body(*, required: bool = True) -> dict:
    body = request.get_json(silent=True)
    if body is None:
        if required:
            raise InvalidPayloadError("Request body must be a JSON object")
        return {}
    if not isinstance(body, dict):
        raise InvalidPayloadError("Request body must be a JSON object")
    return body


def _optional_str(body: dict, key: str) -> Optional[str]:
    value = body.get(key)
    if value is not None and not isinstance(value, str):
        raise InvalidPayloadError(f"{key} must be a string")
    return value


# ─────────────────────────────────────────────────────────────────────────────
# Projects
# ─────────────────────────────────────────────────────────────────────────────


@bp.route("", methods=["POST"])
def create_project():
    body = _json_body()
    creation_type = _optional_str(body, "creation_type") or "idea"
    idea_prompt = _optional_str(body, "idea_prompt") or ""
    if creation_type == "idea" and not idea_prompt.strip():
        raise InvalidPayloadError("idea_prompt is required")

    ratio = body.get("image_aspect_ratio")
    if "image_aspect_ratio" in body and ratio is None:
        raise InvalidRatioError(None, AspectRatio.tokens())

    project = _ctx()["service"].create_project(idea_prompt, ratio, creation_type=creation_type)
    return _ok(project_to_dict(project, _ctx()["asset_store"]), 201)


@bp.route("", methods=["GET"])
def list_projects():
    projects = _ctx()["service"].list_projects()
    return _ok({"projects": [project_summary(p) for p in projects], "total": len(projects)})


@bp.route("/<project_id>", methods=["GET"])
def get_project(project_id: str):
    project = _ctx()["service"].get_project(project_id)
    return _ok(project_to_dict(project, _ctx()["asset_store"]))


@bp.route("/<project_id>", methods=["PUT"])
def update_project(project_id: str):
    body = _json_body()
    if "image_aspect_ratio" in body and body["image_aspect_ratio"] is None:
        raise InvalidRatioError(None, AspectRatio.tokens())

    expected_version = body.get("version")
    if expected_version is not None and (
        isinstance(expected_version, bool) or not isinstance(expected_version, int)
    ):
        raise InvalidPayloadError("version must be an integer")

    project = _ctx()["service"].update_project(
        project_id,
        idea_prompt=_optional_str(body, "idea_prompt"),
        image_aspect_ratio=body.get("image_aspect_ratio"),
        expected_version=expected_version,
    )
    return _ok(project_to_dict(project, _ctx()["asset_store"]))


@bp.route("/<project_id>", methods=["DELETE"])
def delete_project(project_id: str):
    _ctx()["service"].delete_project(project_id)
    return _ok({"project_id": project_id, "deleted": True})


# ─────────────────────────────────────────────────────────────────────────────
# Pages
# ─────────────────────────────────────────────────────────────────────────────


@bp.route("/<project_id>/pages", methods=["POST"])
def add_page(project_id: str):
    body = _json_body(required=False)
    project, page = _ctx()["service"].add_page(project_id, body.get("order_index"))
    data = page_to_dict(page, _ctx()["asset_store"])
    data["page_count"] = project.page_count
    return _ok(data, 201)


@bp.route("/<project_id>/pages/<page_id>", methods=["DELETE"])
def remove_page(project_id: str, page_id: str):
    project = _ctx()["service"].remove_page(project_id, page_id)
    return _ok(project_to_dict(project, _ctx()["asset_store"]))


@bp.route("/<project_id>/pages/<page_id>/outline", methods=["PUT"])
def set_outline(project_id: str, page_id: str):
    body = _json_body()
    project = _ctx()["service"].set_outline(project_id, page_id, body.get("outline_content"))
    return _ok(page_to_dict(project.get_page(page_id), _ctx()["asset_store"]))


@bp.route("/<project_id>/pages/<page_id>/description", methods=["PUT"])
def set_description(project_id: str, page_id: str):
    body = _json_body()
    project = _ctx()["service"].set_description(
        project_id, page_id, body.get("description_content")
    )
    return _ok(page_to_dict(project.get_page(page_id), _ctx()["asset_store"]))


@bp.route("/<project_id>/pages/<page_id>/image", methods=["PUT"])
def record_image(project_id: str, page_id: str):
    body = _json_body()
    path = _optional_str(body, "generated_image_path")
    if not path:
        raise InvalidPayloadError("generated_image_path is required")
    project = _ctx()["service"].record_generated_image(project_id, page_id, path)
    return _ok(page_to_dict(project.get_page(page_id), _ctx()["asset_store"]))


# ─────────────────────────────────────────────────────────────────────────────
# Export
# ─────────────────────────────────────────────────────────────────────────────


@bp.route("/<project_id>/export/<fmt>", methods=["GET"])
def export_project(project_id: str, fmt: str):
    base_url = _ctx()["public_base_url"] or request.host_url.rstrip("/")
    artifact = _ctx()["coordinator"].export(project_id, fmt, base_url=base_url)
    return _ok(artifact.to_dict())
