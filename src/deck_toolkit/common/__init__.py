"""
Common utilities shared across deck_toolkit.
"""

from .logging_utils import configure_logging

__all__ = ["configure_logging"]
