#!/usr/bin/env python3

"""Discover class type_info records through the ABI vtables they share.

Every ``__si_class_type_info`` record in a program starts with the same
pointer: the address point of ``vtable for __cxxabiv1::__si_class_type_info``,
two slots past the vtable symbol. Scanning the data regions for that
pointer therefore finds every single-inheritance class, and the same holds
for the other two class layouts.
"""

from ....infrastructure.logging import format_address, get_logger, log_timing
from ...models.rtti import ClassLayout
from ..interfaces import SymbolOracle
from ..memory import MemorySnapshot
from .hierarchy_parser import LOCAL_TYPE_MARKER, HierarchyParser

logger = get_logger(__name__)


class ClassVTableWalker:
    """Finds and parses every class record of one layout."""

    def __init__(self, snapshot: MemorySnapshot, oracle: SymbolOracle, parser: HierarchyParser):
        self.snapshot = snapshot
        self.oracle = oracle
        self.parser = parser

    def resolve_vtable(self, layout: ClassLayout) -> tuple[str, int] | None:
        """Find the ABI vtable symbol for ``layout`` as ``(symbol, address)``."""
        name = layout.kind.vtable_symbol
        for candidate in (name, f"_{name}"):
            address = self.oracle.resolve_name(candidate)
            if address is not None:
                return candidate, address
        return None

    @log_timing
    def handle_classes(self, layout: ClassLayout) -> int:
        """Parse every record of ``layout``.

        Duplicate copies of the ABI vtable that the linker kept apart are
        visited too, as ``<symbol>_0``, ``<symbol>_1`` and so on.

        Returns:
            Number of records handed to the formatter
        """
        resolved = self.resolve_vtable(layout)
        if resolved is None:
            logger.info(f"Could not find vtable for {layout.kind.mangled_name}")
            return 0

        symbol, vtable = resolved
        ptr = self.snapshot.pointer_size
        handled: set[int] = set()
        suffix = 0

        while vtable is not None:
            logger.debug(f"Looking for refs to vtable {format_address(vtable, ptr)}")
            for hit in self._find_instances(vtable):
                if hit in handled or self.snapshot.is_bad_address(hit):
                    continue
                if not self._has_type_name(hit):
                    continue

                logger.debug(f"found {symbol} at {format_address(hit, ptr)}")
                self.parser.format(layout, hit)
                handled.add(hit)

            vtable = self.oracle.resolve_name(f"{symbol}_{suffix}")
            suffix += 1

        logger.info(f"Found {len(handled)} {layout.description}")
        return len(handled)

    def _find_instances(self, vtable: int) -> list[int]:
        """Non-code words pointing at the address point of ``vtable``."""
        targets = [vtable + 2 * self.snapshot.pointer_size]
        if self.snapshot.image.is_special(vtable):
            # Imported vtables may be referenced through the bare symbol
            targets.insert(0, vtable)

        hits: set[int] = set()
        for target in targets:
            hits.update(
                address
                for address in self.snapshot.find_pointer(target)
                if not self.snapshot.is_code(address)
            )
        return sorted(hits)

    def _has_type_name(self, address: int) -> bool:
        """Check that the word after ``address`` points at a mangled type name.

        Rejects coincidental matches of the vtable pointer bit pattern.
        """
        name_address = self.snapshot.read_pointer(address + self.snapshot.pointer_size)
        if name_address is None or self.snapshot.is_bad_address(name_address):
            return False
        if self.snapshot.is_code(name_address):
            return False

        name = self.snapshot.read_bounded_string(name_address, self.parser.max_name_length)
        if name.startswith(LOCAL_TYPE_MARKER):
            name = name[1:]
        if not name:
            return False

        return self.oracle.demangle(f"_ZTV{name.decode('latin-1')}") is not None
