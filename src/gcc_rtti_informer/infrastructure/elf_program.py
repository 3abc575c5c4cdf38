#!/usr/bin/env python3

"""ELF program image and symbol services backed by pyelftools.

Allocated sections are loaded at their link-time addresses with dynamic
and static relocations applied, so the pointers inside ``.data.rel.ro`` of
position independent binaries hold real values. Undefined symbols, such as
the ``__cxxabiv1`` vtables imported from libstdc++, are given synthetic
addresses in an extern range after the last section, the way disassemblers
model imports.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO

from elftools.elf.constants import SH_FLAGS
from elftools.elf.elffile import ELFFile
from elftools.elf.relocation import RelocationSection
from elftools.elf.sections import SymbolTableSection

from ..domain.models.rtti import MemoryRegion, RegionKind
from .demangler import demangle
from .elf_platform import ElfTarget, PlatformDetector
from .logging import format_address, get_logger, log_timing

logger = get_logger(__name__)

EXTERN_ALIGNMENT = 0x1000
# Pointers reserved per imported symbol, so that an imported vtable plus its
# address point offset never lands on the next import
EXTERN_SLOT_POINTERS = 4

# Only sections of these types are loaded. Relocation, symbol, hash and
# dynamic tables are not program data.
PROGRAM_DATA_TYPES = frozenset(
    {"SHT_PROGBITS", "SHT_INIT_ARRAY", "SHT_FINI_ARRAY", "SHT_PREINIT_ARRAY"}
)


@dataclass
class LoadedSection:
    """One allocated section with its relocated bytes."""

    name: str
    start: int
    kind: RegionKind
    data: bytearray

    @property
    def end(self) -> int:
        return self.start + len(self.data)

    def contains(self, address: int, size: int = 1) -> bool:
        return self.start <= address and address + size <= self.end


class ElfProgram:
    """A loaded ELF file implementing ``ProgramImage`` and ``SymbolOracle``."""

    def __init__(self, elf_path: Path) -> None:
        """
        Initialize the program; call :meth:`open` or use it as a context manager.

        Args:
            elf_path: Path to the ELF file
        """
        self.elf_path = elf_path
        self.elf_file: ELFFile | None = None
        self.target: ElfTarget | None = None
        self.sections: list[LoadedSection] = []
        self._file_handle: BinaryIO | None = None
        self._symbols: dict[str, int] = {}
        self._symbol_names: dict[int, str] = {}
        self._symbol_tables: dict[int, list[int | None]] = {}
        self._externs: dict[str, int] = {}
        self._extern_names: dict[int, str] = {}
        self._extern_start = 0
        self._extern_end = 0
        self._assigned: dict[str, int] = {}
        self._address_names: dict[int, str] = {}

    @log_timing
    def open(self) -> None:
        """Open the ELF file, load its sections and symbols, and apply relocations."""
        if not self.elf_path.exists():
            raise FileNotFoundError(f"ELF file not found: {self.elf_path}")

        if not self.elf_path.is_file():
            raise ValueError(f"Not a file: {self.elf_path}")

        self._file_handle = open(self.elf_path, "rb")
        try:
            self.elf_file = ELFFile(self._file_handle)
            self.target = PlatformDetector.detect(self.elf_file)
            self._load_sections()
            self._load_symbols()
            self._apply_relocations()
        except Exception:
            self.close()
            raise

        logger.info(
            f"Loaded {len(self.sections)} sections and {len(self._symbols)} symbols "
            f"from {self.elf_path.name}"
        )

    def close(self) -> None:
        """Close the ELF file."""
        if self._file_handle is not None:
            self._file_handle.close()
            self._file_handle = None

    def __enter__(self) -> "ElfProgram":
        """Context manager entry."""
        self.open()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()

    # Loading

    def _load_sections(self) -> None:
        assert self.elf_file is not None
        for section in self.elf_file.iter_sections():
            flags = section["sh_flags"]
            if not flags & SH_FLAGS.SHF_ALLOC or section["sh_addr"] == 0:
                continue
            if section["sh_type"] not in PROGRAM_DATA_TYPES or section["sh_size"] == 0:
                continue

            if flags & SH_FLAGS.SHF_EXECINSTR:
                kind = RegionKind.CODE
            elif flags & SH_FLAGS.SHF_WRITE:
                kind = RegionKind.DATA
            else:
                kind = RegionKind.CONST

            self.sections.append(
                LoadedSection(section.name, section["sh_addr"], kind, bytearray(section.data()))
            )

        self.sections.sort(key=lambda s: s.start)
        last_end = max((s.end for s in self.sections), default=0)
        self._extern_start = (last_end + EXTERN_ALIGNMENT - 1) & ~(EXTERN_ALIGNMENT - 1)
        self._extern_end = self._extern_start

    def _load_symbols(self) -> None:
        assert self.elf_file is not None
        for index, section in enumerate(self.elf_file.iter_sections()):
            if not isinstance(section, SymbolTableSection):
                continue

            addresses: list[int | None] = []
            for symbol in section.iter_symbols():
                addresses.append(self._register_symbol(symbol))
            self._symbol_tables[index] = addresses

    def _register_symbol(self, symbol: Any) -> int | None:
        name = symbol.name
        if symbol["st_shndx"] == "SHN_UNDEF":
            return self._extern_address(name) if name else None
        value = symbol["st_value"]
        if name and value:
            self._symbols.setdefault(name, value)
            self._symbol_names.setdefault(value, name)
        return value

    def _extern_address(self, name: str) -> int:
        address = self._externs.get(name)
        if address is None:
            address = self._extern_end
            self._externs[name] = address
            self._extern_names[address] = name
            self._extern_end += EXTERN_SLOT_POINTERS * self.pointer_size
        return address

    def _apply_relocations(self) -> None:
        assert self.elf_file is not None and self.target is not None
        if not self.target.absolute_relocations and not self.target.relative_relocations:
            return

        applied = 0
        for section in self.elf_file.iter_sections():
            if not isinstance(section, RelocationSection):
                continue

            is_rela = section.is_RELA()
            symbols = self._symbol_tables.get(section["sh_link"], [])
            for relocation in section.iter_relocations():
                address = relocation["r_offset"]
                current = self.read_pointer(address)
                if current is None:
                    continue

                addend = relocation["r_addend"] if is_rela else current
                reloc_type = relocation["r_info_type"]
                if reloc_type in self.target.relative_relocations:
                    value = addend
                elif reloc_type in self.target.absolute_relocations:
                    sym_index = relocation["r_info_sym"]
                    symbol_address = symbols[sym_index] if sym_index < len(symbols) else None
                    if symbol_address is None:
                        continue
                    value = symbol_address + addend
                else:
                    continue

                self._write_pointer(address, value)
                applied += 1

        logger.debug(f"Applied {applied} relocations")

    def _write_pointer(self, address: int, value: int) -> None:
        section = self._section_at(address, self.pointer_size)
        if section is None:
            return
        offset = address - section.start
        mask = (1 << (self.pointer_size * 8)) - 1
        section.data[offset : offset + self.pointer_size] = (value & mask).to_bytes(
            self.pointer_size, self._byteorder
        )

    # ProgramImage

    @property
    def pointer_size(self) -> int:
        if self.target is None:
            raise RuntimeError("ELF file not opened. Call open() first.")
        return self.target.pointer_size

    @property
    def little_endian(self) -> bool:
        if self.target is None:
            raise RuntimeError("ELF file not opened. Call open() first.")
        return self.target.little_endian

    @property
    def _byteorder(self) -> str:
        return "little" if self.little_endian else "big"

    def list_regions(self, kind: RegionKind) -> Sequence[MemoryRegion]:
        return [
            MemoryRegion(section.start, bytes(section.data), section.kind, section.name)
            for section in self.sections
            if section.kind is kind
        ]

    def _section_at(self, address: int, size: int = 1) -> LoadedSection | None:
        for section in self.sections:
            if section.contains(address, size):
                return section
        return None

    def read_bytes(self, address: int, size: int) -> bytes | None:
        section = self._section_at(address, size)
        if section is None:
            return None
        offset = address - section.start
        return bytes(section.data[offset : offset + size])

    def read_pointer(self, address: int) -> int | None:
        raw = self.read_bytes(address, self.pointer_size)
        return None if raw is None else int.from_bytes(raw, self._byteorder)

    def is_code(self, address: int) -> bool:
        section = self._section_at(address)
        return section is not None and section.kind is RegionKind.CODE

    def is_loaded(self, address: int) -> bool:
        return self._section_at(address) is not None or self.is_special(address)

    def is_special(self, address: int) -> bool:
        return self._extern_start <= address < self._extern_end

    # SymbolOracle

    def find_string_literal(self, text: str) -> int | None:
        """Address of a nul-delimited copy of ``text`` in read-only or writable data."""
        needle = text.encode("latin-1")
        for kind in (RegionKind.CONST, RegionKind.DATA):
            for section in self.sections:
                if section.kind is not kind:
                    continue
                index = section.data.find(needle)
                while index >= 0:
                    end = index + len(needle)
                    starts_string = index == 0 or section.data[index - 1] == 0
                    ends_string = end == len(section.data) or section.data[end] == 0
                    if starts_string and ends_string:
                        return section.start + index
                    index = section.data.find(needle, index + 1)
        return None

    def find_references_to(self, address: int, allow_code: bool = False) -> set[int]:
        pattern = (address & ((1 << (self.pointer_size * 8)) - 1)).to_bytes(
            self.pointer_size, self._byteorder
        )
        found: set[int] = set()
        for section in self.sections:
            if section.kind is RegionKind.CODE and not allow_code:
                continue
            index = section.data.find(pattern)
            while index >= 0:
                if (section.start + index) % self.pointer_size == 0:
                    found.add(section.start + index)
                index = section.data.find(pattern, index + 1)
        return found

    def resolve_name(self, name: str) -> int | None:
        for table in (self._symbols, self._externs, self._assigned):
            address = table.get(name)
            if address is not None:
                return address
        return None

    def assign_name(self, address: int, name: str) -> None:
        previous = self._address_names.get(address)
        if previous is not None and previous != name:
            self._assigned.pop(previous, None)
        self._assigned[name] = address
        self._address_names[address] = name
        logger.debug(f"{format_address(address, self.pointer_size)} named {name}")

    def name_at(self, address: int) -> str | None:
        """Name assigned to ``address``, else the symbol defined or imported there."""
        for table in (self._address_names, self._extern_names, self._symbol_names):
            name = table.get(address)
            if name is not None:
                return name
        return None

    def demangle(self, mangled: str) -> str | None:
        return demangle(mangled)
