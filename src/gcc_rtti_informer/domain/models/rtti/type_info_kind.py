#!/usr/bin/env python3

"""The Itanium ABI type_info kinds and class record layouts."""

from enum import Enum


class TypeInfoKind(Enum):
    """The four standard type_info classes, valued by their mangled names."""

    TYPE_INFO = "St9type_info"
    CLASS = "N10__cxxabiv117__class_type_infoE"
    SI_CLASS = "N10__cxxabiv120__si_class_type_infoE"
    VMI_CLASS = "N10__cxxabiv121__vmi_class_type_infoE"

    @property
    def mangled_name(self) -> str:
        return self.value

    @property
    def vtable_symbol(self) -> str:
        """Symbol of the vtable shared by every record of this kind."""
        return f"_ZTV{self.value}"

    @property
    def is_class_kind(self) -> bool:
        """True for the kinds whose own record carries a trailing base pointer."""
        return self is not TypeInfoKind.TYPE_INFO

    def __str__(self) -> str:
        return self.name


class ClassLayout(Enum):
    """Record layout of a class type_info, one per class-describing ABI kind."""

    NO_BASE = TypeInfoKind.CLASS
    SINGLE_BASE = TypeInfoKind.SI_CLASS
    MULTI_BASE = TypeInfoKind.VMI_CLASS

    @property
    def kind(self) -> TypeInfoKind:
        return self.value

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    ClassLayout.NO_BASE: "simple classes",
    ClassLayout.SINGLE_BASE: "single-inheritance classes",
    ClassLayout.MULTI_BASE: "multiple-inheritance classes",
}
