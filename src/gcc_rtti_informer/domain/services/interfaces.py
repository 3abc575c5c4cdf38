#!/usr/bin/env python3

"""Services the recovery engine consumes from its host.

A host is anything that can present a loaded program: the bundled ELF
reader, a disassembler database, or an in-memory fixture in tests.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ..models.rtti import MemoryRegion, RegionKind


@runtime_checkable
class ProgramImage(Protocol):
    """Byte-addressable view of a loaded program."""

    @property
    def pointer_size(self) -> int: ...

    @property
    def little_endian(self) -> bool: ...

    def list_regions(self, kind: RegionKind) -> Sequence[MemoryRegion]:
        """Regions of one kind in ascending address order."""
        ...

    def read_bytes(self, address: int, size: int) -> bytes | None:
        """Read ``size`` loaded bytes, or None if any of them is not loaded."""
        ...

    def is_code(self, address: int) -> bool: ...

    def is_loaded(self, address: int) -> bool: ...

    def is_special(self, address: int) -> bool:
        """True for synthetic addresses such as import/extern stubs."""
        ...


@runtime_checkable
class SymbolOracle(Protocol):
    """Names, strings, cross references and demangling."""

    def find_string_literal(self, text: str) -> int | None: ...

    def find_references_to(self, address: int, allow_code: bool = False) -> set[int]:
        """Addresses holding a pointer to ``address``.

        References located in code are left out unless ``allow_code`` is set.
        """
        ...

    def resolve_name(self, name: str) -> int | None: ...

    def assign_name(self, address: int, name: str) -> None: ...

    def name_at(self, address: int) -> str | None:
        """Name assigned to ``address``, else the symbol defined or imported there."""
        ...

    def demangle(self, mangled: str) -> str | None:
        """Demangle an Itanium symbol, None when it is not a valid mangled name."""
        ...
