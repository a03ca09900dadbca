"""
Core Models Package

Immutable, validated data models for projects and pages.

All models in this package are frozen dataclasses: every mutation
returns a new instance, so a project read from storage is already a
consistent point-in-time snapshot and can be handed to the export
pipeline while other requests keep changing the stored copy.
"""

from .aspect_ratio import (
    AspectRatio,
    AspectRatioPolicy,
    DEFAULT_ASPECT_RATIO,
    UnitSystem,
    dimensions_for,
    is_locked,
    validate_ratio,
)
from .content import DescriptionContent, OutlineContent
from .pages import Page, PageStatus, advance, can_transition, transition
from .projects import Project, ProjectSnapshot, ProjectStatus

__all__ = [
    "AspectRatio",
    "AspectRatioPolicy",
    "DEFAULT_ASPECT_RATIO",
    "UnitSystem",
    "dimensions_for",
    "is_locked",
    "validate_ratio",
    "DescriptionContent",
    "OutlineContent",
    "Page",
    "PageStatus",
    "advance",
    "can_transition",
    "transition",
    "Project",
    "ProjectSnapshot",
    "ProjectStatus",
]
