#!/usr/bin/env python3

"""Locate the type_info records of the standard type_info classes."""

from ....infrastructure.logging import format_address, get_logger, log_timing
from ...models.rtti import TypeInfoKind
from ..interfaces import SymbolOracle
from ..memory import MemorySnapshot
from .hierarchy_parser import HierarchyParser

logger = get_logger(__name__)


def find_single_reference(
    oracle: SymbolOracle,
    address: int,
    allow_many: bool = False,
    allow_code: bool = False,
) -> list[int]:
    """Data references to ``address`` in ascending order.

    Unless ``allow_many`` is set, more than one reference is ambiguous and
    reported as none.
    """
    references = sorted(oracle.find_references_to(address, allow_code=allow_code))
    if len(references) > 1 and not allow_many:
        logger.warning(f"Too many references to 0x{address:X} ({len(references)}), ignoring")
        return []
    return references


class TypeInfoScanner:
    """Finds the records of ``std::type_info`` and the ``__cxxabiv1`` classes.

    Each kind's mangled name is stored as a string literal that the kind's
    own type_info record points at through its name field, one pointer
    after the start of the record.
    """

    def __init__(self, snapshot: MemorySnapshot, oracle: SymbolOracle, parser: HierarchyParser):
        self.snapshot = snapshot
        self.oracle = oracle
        self.parser = parser

    @log_timing
    def scan(self) -> dict[TypeInfoKind, int]:
        """Parse the record of every kind present in the binary.

        Returns:
            Mapping of kind -> address of its type_info record, for records that parsed
        """
        found: dict[TypeInfoKind, int] = {}
        for kind in TypeInfoKind:
            address = self.find_type_info(kind)
            if address is not None:
                found[kind] = address
        return found

    def find_type_info(self, kind: TypeInfoKind) -> int | None:
        """Locate and parse the type_info record of one kind."""
        literal = self.oracle.find_string_literal(kind.mangled_name)
        if literal is None:
            logger.debug(f"No string literal for {kind.mangled_name}")
            return None

        references = find_single_reference(self.oracle, literal)
        if not references:
            logger.debug(f"No reference to {kind.mangled_name} at 0x{literal:X}")
            return None

        ptr = self.snapshot.pointer_size
        record = references[0] - ptr
        if self.snapshot.is_bad_address(record):
            return None

        logger.info(f"Found {kind} at {format_address(record, ptr)}")
        end = self.parser.format_type_info(record)
        if end is None:
            return None

        if kind.is_class_kind:
            # These records are themselves __si_class_type_info with one base pointer
            end += ptr
        logger.debug(f"{kind} record spans {format_address(record, ptr)}-{format_address(end, ptr)}")
        return record
