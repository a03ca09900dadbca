"""Core utilities: serialization helpers for the storage layer."""

from .serialization import (
    PROJECT_SCHEMA_VERSION,
    deserialize_page,
    deserialize_project,
    serialize_page,
    serialize_project,
)

__all__ = [
    "PROJECT_SCHEMA_VERSION",
    "deserialize_page",
    "deserialize_project",
    "serialize_page",
    "serialize_project",
]
