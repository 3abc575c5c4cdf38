#!/usr/bin/env python3

"""ELF target detection.

Classifies an ELF file by machine, pointer width and byte order, and
provides the relocation type numbers needed to materialize the pointers
of position independent binaries:
- RELATIVE relocations store ``load base + addend``
- absolute and GLOB_DAT relocations store ``symbol + addend``
"""

from dataclasses import dataclass
from enum import Enum

from elftools.elf.elffile import ELFFile

from .logging import get_logger

logger = get_logger(__name__)


class ElfArchitecture(Enum):
    """Machines with known relocation numbering."""

    X86 = "x86"
    X86_64 = "x86-64"
    ARM = "arm"
    AARCH64 = "aarch64"
    PPC = "ppc"
    PPC64 = "ppc64"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value.upper()


@dataclass(frozen=True)
class ElfTarget:
    """Properties of an ELF file that the memory image depends on."""

    architecture: ElfArchitecture
    pointer_size: int
    little_endian: bool
    absolute_relocations: frozenset[int] = frozenset()
    relative_relocations: frozenset[int] = frozenset()


# machine -> (absolute types, relative types)
_RELOCATIONS: dict[ElfArchitecture, tuple[frozenset[int], frozenset[int]]] = {
    # R_386_32, R_386_GLOB_DAT / R_386_RELATIVE
    ElfArchitecture.X86: (frozenset({1, 6}), frozenset({8})),
    # R_X86_64_64, R_X86_64_GLOB_DAT / R_X86_64_RELATIVE
    ElfArchitecture.X86_64: (frozenset({1, 6}), frozenset({8})),
    # R_ARM_ABS32, R_ARM_GLOB_DAT / R_ARM_RELATIVE
    ElfArchitecture.ARM: (frozenset({2, 21}), frozenset({23})),
    # R_AARCH64_ABS64, R_AARCH64_GLOB_DAT / R_AARCH64_RELATIVE
    ElfArchitecture.AARCH64: (frozenset({257, 1025}), frozenset({1027})),
    # R_PPC_ADDR32, R_PPC_GLOB_DAT / R_PPC_RELATIVE
    ElfArchitecture.PPC: (frozenset({1, 20}), frozenset({22})),
    # R_PPC64_ADDR64, R_PPC64_GLOB_DAT / R_PPC64_RELATIVE
    ElfArchitecture.PPC64: (frozenset({38, 20}), frozenset({22})),
}


class PlatformDetector:
    """Detects the target of an opened ELF file."""

    # Machine type strings (as returned by pyelftools)
    MACHINES = {
        "EM_386": ElfArchitecture.X86,
        "EM_X86_64": ElfArchitecture.X86_64,
        "EM_ARM": ElfArchitecture.ARM,
        "EM_AARCH64": ElfArchitecture.AARCH64,
        "EM_PPC": ElfArchitecture.PPC,
        "EM_PPC64": ElfArchitecture.PPC64,
    }

    @staticmethod
    def detect(elf: ELFFile) -> ElfTarget:
        """Detect the target of ``elf``.

        Unknown machines still get pointer width and byte order; only
        relocation processing is unavailable for them.
        """
        machine_str = elf.header["e_machine"]
        pointer_size = elf.elfclass // 8
        is_little_endian: bool = elf.little_endian

        architecture = PlatformDetector.MACHINES.get(machine_str, ElfArchitecture.UNKNOWN)

        logger.debug(
            f"ELF characteristics: machine={machine_str}, "
            f"class=ELF{elf.elfclass}, little_endian={is_little_endian}"
        )

        if architecture is ElfArchitecture.UNKNOWN:
            logger.warning(
                f"Unknown machine {machine_str}: relocations will not be applied"
            )
            return ElfTarget(architecture, pointer_size, is_little_endian)

        absolute, relative = _RELOCATIONS[architecture]
        logger.info(f"Detected {architecture} ELF{elf.elfclass} binary")
        return ElfTarget(architecture, pointer_size, is_little_endian, absolute, relative)
