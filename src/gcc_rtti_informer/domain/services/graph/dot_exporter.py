#!/usr/bin/env python3

"""Graphviz DOT rendering of the visible class hierarchy."""

from pathlib import Path

from ....infrastructure.logging import format_address, get_logger, log_timing
from ...repositories import ClassRegistry

logger = get_logger(__name__)

GRAPH_HEADER = 'graph [overlap=scale]; node [fontname=Courier]; rankdir="LR";'


def escape_label(text: str) -> str:
    """Escape a string for use inside a double-quoted DOT attribute."""
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


class DotExporter:
    """Writes one box per visible class and one edge per derived -> base link."""

    def __init__(self, pointer_size: int = 8):
        self.pointer_size = pointer_size

    def render(self, registry: ClassRegistry) -> str:
        """Render the visible part of ``registry`` in class id order."""
        lines = ["digraph G {", GRAPH_HEADER, ""]

        for class_info in registry:
            if not class_info.visible:
                continue
            lines.append(
                f' a{class_info.id} [shape=box, label = "{escape_label(class_info.display_name)}", '
                f'color="blue", tooltip="{format_address(class_info.address, self.pointer_size)}"]'
            )

        for class_info in registry:
            if not class_info.visible:
                continue
            for base in class_info.bases:
                base_class = registry.resolve(base)
                if base_class is None or not base_class.visible:
                    continue
                lines.append(f" a{class_info.id} -> a{base_class.id} [style = bold]")

        lines.append("}")
        return "\n".join(lines) + "\n"

    @log_timing
    def write(self, registry: ClassRegistry, path: Path) -> None:
        """Write the graph to ``path``.

        Raises:
            OSError: If the file cannot be written
        """
        content = self.render(registry)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.info(f"Graph written to {path} ({len(content)} bytes)")
