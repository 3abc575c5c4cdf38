#!/usr/bin/env python3

"""Outcome of one recovery run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .type_info_kind import ClassLayout, TypeInfoKind

if TYPE_CHECKING:
    from ...repositories.class_registry import ClassRegistry


@dataclass
class RecoveryResult:
    """Registry plus the bookkeeping reported at the end of a run."""

    registry: ClassRegistry
    type_info_records: dict[TypeInfoKind, int] = field(default_factory=dict)
    """Addresses of the standard library's own type_info records that parsed."""
    classes_per_layout: dict[ClassLayout, int] = field(default_factory=dict)
    skipped_regions: list[str] = field(default_factory=list)

    @property
    def class_count(self) -> int:
        return len(self.registry)
