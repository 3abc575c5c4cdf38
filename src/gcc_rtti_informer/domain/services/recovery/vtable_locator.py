#!/usr/bin/env python3

"""Find the vtable that belongs to a type_info record."""

from ....infrastructure.logging import format_address, get_logger
from ..memory import MemorySnapshot

logger = get_logger(__name__)


class VTableLocator:
    """Locates vtables by their ``(offset_to_top = 0, typeinfo = A)`` prefix.

    For a class without virtual bases the primary vtable starts with a zero
    offset-to-top followed by the type_info pointer. This is a heuristic:
    any two adjacent data words ``0, A`` match, and when several do the last
    one scanned wins. Secondary vtables of multiply inherited classes carry a
    non-zero offset-to-top and are not found this way.
    """

    def __init__(self, snapshot: MemorySnapshot):
        self.snapshot = snapshot

    def locate(self, type_info_address: int) -> int | None:
        """Return the address of the vtable slot pointing at ``type_info_address``."""
        candidates = self.snapshot.find_pointer_pair(0, type_info_address)
        if not candidates:
            return None

        if len(candidates) > 1:
            ptr = self.snapshot.pointer_size
            logger.debug(
                f"{len(candidates)} vtable candidates for type_info "
                f"{format_address(type_info_address, ptr)}: "
                f"{', '.join(format_address(c, ptr) for c in candidates)}; using the last"
            )
        return candidates[-1]
