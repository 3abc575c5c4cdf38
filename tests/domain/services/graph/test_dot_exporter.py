#!/usr/bin/env python3

"""Unit tests for DotExporter."""

from pathlib import Path

import pytest

from gcc_rtti_informer.domain.models.rtti import BaseRef
from gcc_rtti_informer.domain.repositories import ClassRegistry
from gcc_rtti_informer.domain.services.graph import DotExporter, escape_label

HEADER = 'digraph G {\ngraph [overlap=scale]; node [fontname=Courier]; rankdir="LR";\n\n'


@pytest.fixture
def hierarchy(registry: ClassRegistry) -> ClassRegistry:
    base = registry.get_or_create(0x4000)
    base.name = "Base"
    derived = registry.get_or_create(0x4100)
    derived.name = "Derived"
    derived.add_base(BaseRef(0x4000, 0, 1))
    for class_info in registry:
        class_info.visible = True
    return registry


class TestEscapeLabel:
    """Tests for DOT label escaping."""

    @pytest.mark.unit
    def test_plain_name_unchanged(self) -> None:
        """Test names without special characters pass through."""
        assert escape_label("ns::Widget<int>") == "ns::Widget<int>"

    @pytest.mark.unit
    def test_quotes_and_backslashes(self) -> None:
        """Test quotes and backslashes are escaped."""
        assert escape_label('op"\\x') == 'op\\"\\\\x'

    @pytest.mark.unit
    def test_newline(self) -> None:
        """Test newlines are escaped."""
        assert escape_label("a\nb") == "a\\nb"


class TestDotExporter:
    """Tests for graph rendering and writing."""

    @pytest.mark.unit
    def test_render(self, hierarchy: ClassRegistry) -> None:
        """Test the header, node lines, edge lines and closing brace."""
        assert DotExporter().render(hierarchy) == (
            HEADER
            + ' a0 [shape=box, label = "Base", color="blue", tooltip="0x0000000000004000"]\n'
            + ' a1 [shape=box, label = "Derived", color="blue", tooltip="0x0000000000004100"]\n'
            + " a1 -> a0 [style = bold]\n"
            + "}\n"
        )

    @pytest.mark.unit
    def test_tooltip_width_follows_pointer_size(self, hierarchy: ClassRegistry) -> None:
        """Test tooltips are padded to the pointer width."""
        assert 'tooltip="0x00004000"' in DotExporter(pointer_size=4).render(hierarchy)

    @pytest.mark.unit
    def test_hidden_classes_and_their_edges_left_out(self, hierarchy: ClassRegistry) -> None:
        """Test hidden classes and edges to them are not drawn."""
        hierarchy.get(0x4000).visible = False

        output = DotExporter().render(hierarchy)

        assert ' a0 [' not in output
        assert "->" not in output
        assert ' a1 [shape=box, label = "Derived"' in output

    @pytest.mark.unit
    def test_dangling_edge_left_out(self, registry: ClassRegistry) -> None:
        """Test edges without a target are not drawn."""
        orphan = registry.get_or_create(0x4000)
        orphan.name = "Orphan"
        orphan.add_base(BaseRef(None))
        orphan.visible = True

        output = DotExporter().render(registry)

        assert "->" not in output
        assert 'label = "Orphan"' in output

    @pytest.mark.unit
    def test_empty_graph(self, registry: ClassRegistry) -> None:
        """Test an empty registry still renders a valid graph."""
        assert DotExporter().render(registry) == HEADER + "}\n"

    @pytest.mark.unit
    def test_label_escaped(self, registry: ClassRegistry) -> None:
        """Test labels are escaped in node lines."""
        odd = registry.get_or_create(0x4000)
        odd.name = 'say"hi"'
        odd.visible = True

        assert 'label = "say\\"hi\\""' in DotExporter().render(registry)

    @pytest.mark.unit
    def test_write_creates_parent_directories(
        self, hierarchy: ClassRegistry, tmp_path: Path
    ) -> None:
        """Test writing creates missing parent directories."""
        path = tmp_path / "graphs" / "nested" / "classes.dot"

        DotExporter().write(hierarchy, path)

        assert path.read_text(encoding="utf-8") == DotExporter().render(hierarchy)

    @pytest.mark.unit
    def test_write_failure_raises(self, hierarchy: ClassRegistry, tmp_path: Path) -> None:
        """Test write errors propagate as OSError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(OSError):
            DotExporter().write(hierarchy, blocker / "classes.dot")
