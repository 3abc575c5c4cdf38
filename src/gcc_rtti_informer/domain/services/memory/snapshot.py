#!/usr/bin/env python3

"""Immutable snapshot of the data regions scanned for RTTI.

All DATA and CONST regions are copied once when a run starts. Every scan
and almost every read afterwards is served from these copies, so the
recovery sees one consistent view of the program no matter what the host
does while names are being assigned.
"""

from bisect import bisect_right
from collections.abc import Iterable, Iterator, Sequence

from ....infrastructure.config import get_config
from ....infrastructure.logging import format_address, get_logger
from ...models.rtti import MemoryRegion, RegionKind
from ..interfaces import ProgramImage
from .bits import bad_address_sentinel

logger = get_logger(__name__)

SCANNED_KINDS = (RegionKind.DATA, RegionKind.CONST)


class MemorySnapshot:
    """Pointer-sized reads and aligned pattern scans over captured regions."""

    def __init__(
        self,
        image: ProgramImage,
        regions: Sequence[MemoryRegion],
        skipped_regions: Sequence[str] = (),
    ):
        """Wrap already captured regions; use :meth:`capture` to build one from a host.

        Args:
            image: Host image, consulted for code flags and reads outside the snapshot
            regions: Non-overlapping regions
            skipped_regions: Names of regions left out because of the size cap
        """
        self.image = image
        self.pointer_size: int = image.pointer_size
        self.byteorder = "little" if image.little_endian else "big"
        self.regions: list[MemoryRegion] = sorted(regions, key=lambda r: r.start)
        self.skipped_regions: list[str] = list(skipped_regions)
        self._starts = [region.start for region in self.regions]
        self._sentinel = bad_address_sentinel(self.pointer_size)

    @classmethod
    def capture(
        cls,
        image: ProgramImage,
        max_region_size: int | None = None,
        kinds: Iterable[RegionKind] = SCANNED_KINDS,
    ) -> "MemorySnapshot":
        """Capture the host's data regions.

        Regions above ``max_region_size`` are skipped entirely rather than
        truncated; a region overlapping one already captured is skipped too.
        """
        if max_region_size is None:
            max_region_size = get_config()["MAX_REGION_SIZE"]

        candidates: list[MemoryRegion] = []
        for kind in kinds:
            candidates.extend(image.list_regions(kind))
        candidates.sort(key=lambda r: r.start)

        captured: list[MemoryRegion] = []
        skipped: list[str] = []
        for region in candidates:
            label = region.name or format_address(region.start, image.pointer_size)
            if region.size > max_region_size:
                logger.warning(
                    f"Skipping region {label}: {region.size} bytes exceeds the "
                    f"{max_region_size} byte limit"
                )
                skipped.append(label)
                continue
            if captured and captured[-1].overlaps(region):
                logger.warning(f"Skipping region {label}: overlaps {captured[-1]!r}")
                skipped.append(label)
                continue
            captured.append(region)

        logger.debug(f"Captured {len(captured)} regions, skipped {len(skipped)}")
        return cls(image, captured, skipped)

    # Reads

    def region_at(self, address: int, size: int = 1) -> MemoryRegion | None:
        """Captured region containing ``[address, address + size)``."""
        index = bisect_right(self._starts, address) - 1
        if index < 0:
            return None
        region = self.regions[index]
        return region if region.contains(address, size) else None

    def read_bytes(self, address: int, size: int) -> bytes | None:
        region = self.region_at(address, size)
        if region is not None:
            offset = address - region.start
            return region.data[offset : offset + size]
        return self.image.read_bytes(address, size)

    def read_pointer(self, address: int) -> int | None:
        raw = self.read_bytes(address, self.pointer_size)
        if raw is None or len(raw) != self.pointer_size:
            return None
        return int.from_bytes(raw, self.byteorder)

    def read_u32(self, address: int) -> int | None:
        raw = self.read_bytes(address, 4)
        if raw is None or len(raw) != 4:
            return None
        return int.from_bytes(raw, self.byteorder)

    def read_bounded_string(self, address: int, max_len: int) -> bytes:
        """Read bytes up to the first nul or ``max_len``; empty if unreadable."""
        if self.is_bad_address(address):
            return b""

        region = self.region_at(address)
        if region is not None:
            offset = address - region.start
            chunk = region.data[offset : offset + max_len]
            end = chunk.find(b"\0")
            return chunk if end < 0 else chunk[:end]

        result = bytearray()
        while len(result) < max_len:
            raw = self.image.read_bytes(address + len(result), 1)
            if not raw or raw == b"\0":
                break
            result += raw
        return bytes(result)

    # Address classification

    def is_null(self, address: int | None) -> bool:
        """Null and sentinel pointers reference nothing."""
        return address is None or address == 0 or address == self._sentinel

    def is_bad_address(self, address: int | None) -> bool:
        """Null, sentinel, special or unloaded addresses cannot be dereferenced."""
        if self.is_null(address):
            return True
        if self.image.is_special(address):
            return True
        if self.region_at(address) is not None:
            return False
        return not self.image.is_loaded(address)

    def is_code(self, address: int) -> bool:
        return self.image.is_code(address)

    # Scans

    def pack_pointer(self, value: int) -> bytes:
        return (value & self._sentinel).to_bytes(self.pointer_size, self.byteorder)

    def find_pattern(self, pattern: bytes) -> Iterator[int]:
        """Yield pointer-aligned addresses where ``pattern`` starts, ascending."""
        for region in self.regions:
            data = region.data
            index = data.find(pattern)
            while index >= 0:
                address = region.start + index
                if address % self.pointer_size == 0:
                    yield address
                index = data.find(pattern, index + 1)

    def find_pointer(self, value: int) -> list[int]:
        """Aligned addresses of words equal to ``value``."""
        return list(self.find_pattern(self.pack_pointer(value)))

    def find_pointer_pair(self, first: int, second: int) -> list[int]:
        """Addresses of aligned ``second`` words directly preceded by ``first``."""
        pattern = self.pack_pointer(first) + self.pack_pointer(second)
        return [address + self.pointer_size for address in self.find_pattern(pattern)]

    @property
    def total_size(self) -> int:
        return sum(region.size for region in self.regions)

    def __len__(self) -> int:
        return len(self.regions)
