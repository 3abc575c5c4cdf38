#!/usr/bin/env python3

"""Hierarchy graph filtering and export."""

from .dot_exporter import DotExporter, escape_label
from .graph_filter import GraphFilter

__all__ = [
    "DotExporter",
    "GraphFilter",
    "escape_label",
]
