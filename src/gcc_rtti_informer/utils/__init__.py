"""Utilities module initialization."""

from .path_utils import create_graph_filename, sanitize_for_filesystem

__all__ = [
    "create_graph_filename",
    "sanitize_for_filesystem",
]
