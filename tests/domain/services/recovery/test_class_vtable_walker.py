#!/usr/bin/env python3

"""Unit tests for ClassVTableWalker."""

import logging

import pytest

from gcc_rtti_informer.domain.models.rtti import BaseRef, ClassLayout, TypeInfoKind
from gcc_rtti_informer.domain.repositories import ClassRegistry
from gcc_rtti_informer.domain.services.recovery import ClassVTableWalker

from tests.program_builder import FakeProgram, ProgramBuilder, make_parser


def make_walker(program: FakeProgram, registry: ClassRegistry) -> ClassVTableWalker:
    parser = make_parser(program, registry)
    return ClassVTableWalker(parser.snapshot, program, parser)


class TestResolveVtable:
    """Tests for finding the ABI vtable symbol."""

    @pytest.mark.unit
    def test_single_underscore_preferred(self, builder: ProgramBuilder) -> None:
        """Test the _ZTV symbol wins over __ZTV."""
        address = builder.abi_vtable(TypeInfoKind.CLASS)
        builder.symbols["_" + TypeInfoKind.CLASS.vtable_symbol] = 0x1234
        walker = make_walker(builder.build(), ClassRegistry())

        assert walker.resolve_vtable(ClassLayout.NO_BASE) == (
            "_ZTVN10__cxxabiv117__class_type_infoE",
            address,
        )

    @pytest.mark.unit
    def test_double_underscore_fallback(self, builder: ProgramBuilder) -> None:
        """Test the __ZTV symbol is used when _ZTV is missing."""
        address = builder.abi_vtable(TypeInfoKind.CLASS)
        symbol = TypeInfoKind.CLASS.vtable_symbol
        builder.symbols["_" + symbol] = builder.symbols.pop(symbol)
        walker = make_walker(builder.build(), ClassRegistry())

        assert walker.resolve_vtable(ClassLayout.NO_BASE) == ("_" + symbol, address)

    @pytest.mark.unit
    def test_missing_symbol(self, builder: ProgramBuilder) -> None:
        """Test no ABI vtable symbol resolves to nothing."""
        walker = make_walker(builder.build(), ClassRegistry())
        assert walker.resolve_vtable(ClassLayout.MULTI_BASE) is None


class TestHandleClasses:
    """Tests for walking the records of one layout."""

    @pytest.mark.unit
    def test_parses_every_record(self, builder: ProgramBuilder, registry: ClassRegistry) -> None:
        """Test every record using the ABI vtable is parsed."""
        first = builder.add_class("1A")
        second = builder.add_class("1B")
        program = builder.build()

        count = make_walker(program, registry).handle_classes(ClassLayout.NO_BASE)

        assert count == 2
        assert [class_info.address for class_info in registry] == [first, second]
        assert [class_info.name for class_info in registry] == ["A", "B"]

    @pytest.mark.unit
    def test_only_requested_layout(self, builder: ProgramBuilder, registry: ClassRegistry) -> None:
        """Test records of other layouts are left alone."""
        base = builder.add_class("1A")
        derived = builder.add_class("1B", ClassLayout.SINGLE_BASE, [base])
        program = builder.build()

        count = make_walker(program, registry).handle_classes(ClassLayout.SINGLE_BASE)

        assert count == 1
        assert registry.get(derived).bases == [BaseRef(base)]
        # The base was only referenced, never parsed
        assert registry.get(base).name == ""

    @pytest.mark.unit
    def test_missing_abi_vtable(
        self,
        builder: ProgramBuilder,
        registry: ClassRegistry,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test a layout without an ABI vtable finds no classes."""
        builder.add_class("1A")
        program = builder.build()

        with caplog.at_level(logging.INFO):
            count = make_walker(program, registry).handle_classes(ClassLayout.MULTI_BASE)

        assert count == 0
        assert "Could not find vtable for N10__cxxabiv121__vmi_class_type_infoE" in caplog.text

    @pytest.mark.unit
    def test_duplicate_abi_vtables(self, builder: ProgramBuilder, registry: ClassRegistry) -> None:
        """Test numbered duplicate vtables are walked until one is missing."""
        builder.add_class("1A")
        builder.add_class("1B", vtable_suffix="_0")
        builder.add_class("1C", vtable_suffix="_1")
        # Not visited: the chain stops at the first missing suffix
        builder.add_class("1D", vtable_suffix="_3")
        program = builder.build()

        count = make_walker(program, registry).handle_classes(ClassLayout.NO_BASE)

        assert count == 3
        assert [class_info.name for class_info in registry] == ["A", "B", "C"]

    @pytest.mark.unit
    def test_imported_abi_vtable(self, registry: ClassRegistry) -> None:
        """Test imported ABI vtables match raw and address point references."""
        builder = ProgramBuilder(extern_abi_vtables=True)
        first = builder.add_class("1A")
        # Referenced through the bare symbol instead of the address point
        name = builder.add_string("1R")
        bare = builder.add_words(builder.abi_vtable(TypeInfoKind.CLASS), name)
        builder.add_vtable(bare)
        program = builder.build()

        count = make_walker(program, registry).handle_classes(ClassLayout.NO_BASE)

        assert count == 2
        assert registry.get(first).name == "A"
        assert registry.get(bare).name == "R"

    @pytest.mark.unit
    def test_coincidental_matches_rejected(
        self, builder: ProgramBuilder, registry: ClassRegistry
    ) -> None:
        """Test hits without a demanglable name are rejected."""
        real = builder.add_class("1A")
        header = builder.abi_vtable(TypeInfoKind.CLASS) + 16
        builder.add_words(header, builder.add_string("not a type"))
        builder.add_words(header, 0)
        program = builder.build()

        count = make_walker(program, registry).handle_classes(ClassLayout.NO_BASE)

        assert count == 1
        assert [class_info.address for class_info in registry] == [real]

    @pytest.mark.unit
    def test_hits_in_code_skipped(self, builder: ProgramBuilder, registry: ClassRegistry) -> None:
        """Test references located in code are ignored."""
        builder.add_class("1A")
        hidden = builder.add_class("1H")
        builder.mark_code(hidden, 16)
        program = builder.build()

        count = make_walker(program, registry).handle_classes(ClassLayout.NO_BASE)

        assert count == 1
        assert hidden not in registry

    @pytest.mark.unit
    def test_unparseable_record_still_counted(
        self, builder: ProgramBuilder, registry: ClassRegistry
    ) -> None:
        """Test a valid hit counts even when its record fails to parse."""
        record = builder.add_class("1A", with_vtable=False)
        program = builder.build()

        assert make_walker(program, registry).handle_classes(ClassLayout.NO_BASE) == 1
        assert registry.get(record).vtable is None
