#!/usr/bin/env python3

"""Class information recovered from Itanium ABI type_info records."""

from dataclasses import dataclass, field

# Low byte of __base_class_type_info::__offset_flags
BASE_PUBLIC_MASK = 0x1
BASE_VIRTUAL_MASK = 0x2


@dataclass(frozen=True)
class BaseRef:
    """One inheritance edge from a derived class to a base class."""

    target: int | None
    """Registry address of the base class, None when its pointer was unreadable."""
    offset: int = 0
    """Signed offset of the base subobject inside the derived object."""
    flags: int = 0

    @property
    def is_public(self) -> bool:
        return bool(self.flags & BASE_PUBLIC_MASK)

    @property
    def is_virtual(self) -> bool:
        return bool(self.flags & BASE_VIRTUAL_MASK)


@dataclass(eq=False)
class ClassInfo:
    """A recovered C++ class, keyed by the address of its type_info record."""

    address: int
    id: int
    name: str = ""
    bases: list[BaseRef] = field(default_factory=list)
    visible: bool = False
    vtable: int | None = None
    """Vtable slot holding the type_info pointer, when one was located."""
    vmi_flags: int | None = None
    """Flags word of a __vmi_class_type_info record (diamond / repeated bases)."""

    @property
    def display_name(self) -> str:
        """Name used in graphs and logs; unparsed placeholders get ``ti_<address>``."""
        return self.name or f"ti_{self.address:X}"

    def add_base(self, base: BaseRef) -> None:
        self.bases.append(base)
