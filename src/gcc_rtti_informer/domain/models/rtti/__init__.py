#!/usr/bin/env python3

"""RTTI recovery domain models."""

from .class_info import BASE_PUBLIC_MASK, BASE_VIRTUAL_MASK, BaseRef, ClassInfo
from .memory_region import MemoryRegion, RegionKind
from .recovery_result import RecoveryResult
from .type_info_kind import ClassLayout, TypeInfoKind

__all__ = [
    "BASE_PUBLIC_MASK",
    "BASE_VIRTUAL_MASK",
    "BaseRef",
    "ClassInfo",
    "ClassLayout",
    "MemoryRegion",
    "RecoveryResult",
    "RegionKind",
    "TypeInfoKind",
]
