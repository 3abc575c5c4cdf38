#!/usr/bin/env python3

"""RTTI recovery services."""

from .class_vtable_walker import ClassVTableWalker
from .hierarchy_parser import HierarchyParser
from .type_info_scanner import TypeInfoScanner, find_single_reference
from .vtable_locator import VTableLocator

__all__ = [
    "ClassVTableWalker",
    "HierarchyParser",
    "TypeInfoScanner",
    "VTableLocator",
    "find_single_reference",
]
