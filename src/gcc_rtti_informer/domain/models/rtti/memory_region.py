#!/usr/bin/env python3

"""Memory region model for captured program segments."""

from dataclasses import dataclass
from enum import Enum


class RegionKind(Enum):
    """Kind of a loaded program region."""

    CODE = "code"
    DATA = "data"  # writable, e.g. .data, .data.rel.ro
    CONST = "const"  # read-only, e.g. .rodata

    def __str__(self) -> str:
        return self.value.upper()


@dataclass(frozen=True)
class MemoryRegion:
    """An immutable copy of one segment's bytes."""

    start: int
    data: bytes
    kind: RegionKind = RegionKind.DATA
    name: str = ""

    def __post_init__(self) -> None:
        if not self.data:
            raise ValueError(f"Empty region {self.name or hex(self.start)}")

    @property
    def end(self) -> int:
        """Exclusive end address."""
        return self.start + len(self.data)

    @property
    def size(self) -> int:
        return len(self.data)

    def contains(self, address: int, size: int = 1) -> bool:
        return self.start <= address and address + size <= self.end

    def overlaps(self, other: "MemoryRegion") -> bool:
        return self.start < other.end and other.start < self.end

    def __repr__(self) -> str:
        label = f" {self.name}" if self.name else ""
        return f"MemoryRegion({self.kind}{label} 0x{self.start:X}-0x{self.end:X})"
