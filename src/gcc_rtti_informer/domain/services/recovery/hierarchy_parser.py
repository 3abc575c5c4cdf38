#!/usr/bin/env python3

"""Decoding of the three Itanium ABI class type_info layouts.

Record layouts, one pointer ``P`` wide per field unless noted::

    __class_type_info       { vtable, name }
    __si_class_type_info    { vtable, name, base_type }
    __vmi_class_type_info   { vtable, name, u32 flags, u32 base_count,
                              { base_type, offset_flags } * base_count }

``offset_flags`` keeps the base flags in its low byte and the signed
offset of the base subobject above them.
"""

from ....infrastructure.config import get_config
from ....infrastructure.logging import format_address, get_logger
from ...models.rtti import BaseRef, ClassLayout
from ...repositories import ClassRegistry
from ..interfaces import SymbolOracle
from ..memory import MemorySnapshot, split_offset_flags
from .vtable_locator import VTableLocator

logger = get_logger(__name__)

LOCAL_TYPE_MARKER = b"*"


class HierarchyParser:
    """Parses type_info records into the class registry.

    Every ``format_*`` method takes the address of a record and returns the
    address just past the fields it consumed, or None when the record could
    not be parsed. Names assigned through the oracle follow the usual
    ``_ZTI``/``_ZTS``/``_ZTV`` symbol conventions.
    """

    def __init__(
        self,
        snapshot: MemorySnapshot,
        oracle: SymbolOracle,
        registry: ClassRegistry,
        locator: VTableLocator | None = None,
        auxiliary_vtable_names: bool = False,
        max_name_length: int | None = None,
        max_base_count: int | None = None,
    ):
        """Initialize the parser.

        Args:
            snapshot: Captured program memory
            oracle: Host naming and demangling services
            registry: Registry receiving the recovered classes
            locator: Vtable locator, built over ``snapshot`` when omitted
            auxiliary_vtable_names: Also name the first virtual function slot ``_ZTV<name>_0``
            max_name_length: Longest type name read (default from configuration)
            max_base_count: Larger base counts mark a record as corrupt
        """
        config = get_config()
        self.snapshot = snapshot
        self.oracle = oracle
        self.registry = registry
        self.locator = locator or VTableLocator(snapshot)
        self.auxiliary_vtable_names = auxiliary_vtable_names
        self.max_name_length = max_name_length or config["MAX_NAME_LENGTH"]
        self.max_base_count = (
            max_base_count if max_base_count is not None else config["MAX_BASE_COUNT"]
        )
        self.ptr = snapshot.pointer_size

    def format(self, layout: ClassLayout, address: int) -> int | None:
        """Parse the record at ``address`` with the formatter for ``layout``."""
        if layout is ClassLayout.NO_BASE:
            return self.format_type_info(address)
        if layout is ClassLayout.SINGLE_BASE:
            return self.format_si_type_info(address)
        if layout is ClassLayout.MULTI_BASE:
            return self.format_vmi_type_info(address)
        raise ValueError(f"Unknown class layout: {layout!r}")

    def format_type_info(self, address: int) -> int | None:
        """Parse the ``{vtable, name}`` header shared by every type_info."""
        name_address = self.snapshot.read_pointer(address + self.ptr)
        if name_address is None or self.snapshot.is_bad_address(name_address):
            return None

        raw_name = self.snapshot.read_bounded_string(name_address, self.max_name_length)
        if not raw_name:
            return None

        # Types defined inside functions have a '*' before their name
        if raw_name.startswith(LOCAL_TYPE_MARKER):
            raw_name = raw_name[1:]
        mangled = raw_name.decode("latin-1")

        self.oracle.assign_name(name_address, f"_ZTS{mangled}")
        self.oracle.assign_name(address, f"_ZTI{mangled}")

        class_info = self.registry.get_or_create(address)
        class_info.name = self.oracle.demangle(f"_Z{mangled}") or mangled

        vtable = self.locator.locate(address)
        if vtable is None:
            logger.debug(
                f"No vtable for {class_info.name} at {format_address(address, self.ptr)}"
            )
            return None

        logger.debug(f"vtable for {mangled} at {format_address(vtable, self.ptr)}")
        class_info.vtable = vtable
        # The symbol sits on offset-to-top, one word before the type_info slot
        self.oracle.assign_name(vtable - self.ptr, f"_ZTV{mangled}")
        if self.auxiliary_vtable_names:
            self.oracle.assign_name(vtable + self.ptr, f"_ZTV{mangled}_0")

        return address + 2 * self.ptr

    def format_si_type_info(self, address: int) -> int | None:
        """Parse a single-inheritance record and record its one base."""
        end = self.format_type_info(address)
        if end is None:
            return None

        base_address = self.snapshot.read_pointer(end)
        self.registry.get_or_create(address).add_base(BaseRef(self._base_target(base_address)))
        return end + self.ptr

    def format_vmi_type_info(self, address: int) -> int | None:
        """Parse a virtual/multiple-inheritance record and all of its bases."""
        end = self.format_type_info(address)
        if end is None:
            return None

        flags = self.snapshot.read_u32(end)
        base_count = self.snapshot.read_u32(end + 4)
        if flags is None or base_count is None:
            return None

        class_info = self.registry.get_or_create(address)
        class_info.vmi_flags = flags

        if base_count > self.max_base_count:
            logger.warning(
                f"{format_address(address, self.ptr)}: over {self.max_base_count} "
                f"base classes ({base_count}) at {format_address(end + 4, self.ptr)}?!"
            )
            return None

        cursor = end + 8
        for _ in range(base_count):
            base_address = self.snapshot.read_pointer(cursor)
            offset_flags = self.snapshot.read_pointer(cursor + self.ptr)
            if offset_flags is None:
                logger.warning(
                    f"{class_info.name}: base list truncated at "
                    f"{format_address(cursor, self.ptr)}"
                )
                return None

            offset, base_flags = split_offset_flags(offset_flags)
            class_info.add_base(BaseRef(self._base_target(base_address), offset, base_flags))
            cursor += 2 * self.ptr

        return cursor

    def _base_target(self, base_address: int | None) -> int | None:
        """Register the class a base pointer refers to and return its address.

        Bases imported from shared libraries point at extern addresses whose
        records are never parsed; they are named after their ``_ZTI`` symbol.
        """
        if base_address is None or self.snapshot.is_null(base_address):
            return None

        base = self.registry.get_or_create(base_address)
        if not base.name and self.snapshot.image.is_special(base_address):
            symbol = self.oracle.name_at(base_address)
            if symbol and symbol.startswith("_ZTI"):
                mangled = symbol[len("_ZTI") :]
                base.name = self.oracle.demangle(f"_Z{mangled}") or mangled
        return base.address
