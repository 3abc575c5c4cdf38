#!/usr/bin/env python3

"""Select which recovered classes appear in the hierarchy graph."""

from collections.abc import Iterable

from ....infrastructure.config import default_ignored_prefixes
from ....infrastructure.logging import get_logger
from ...models.rtti import ClassInfo
from ...repositories import ClassRegistry

logger = get_logger(__name__)


class GraphFilter:
    """Marks classes visible by name prefix and base-class reachability.

    A class is shown when its name does not start with an ignored prefix,
    or when a shown class derives from it directly or indirectly. Standard
    library bases of application classes therefore stay in the graph while
    unrelated standard library classes are pruned.
    """

    def __init__(self, ignored_prefixes: Iterable[str] | None = None):
        if ignored_prefixes is None:
            ignored_prefixes = default_ignored_prefixes()
        self.ignored_prefixes = tuple(prefix for prefix in ignored_prefixes if prefix)

    def is_ignored(self, class_info: ClassInfo) -> bool:
        return class_info.name.startswith(self.ignored_prefixes)

    def apply(self, registry: ClassRegistry) -> int:
        """Recompute ``visible`` for every class in ``registry``.

        Returns:
            Number of visible classes
        """
        for class_info in registry:
            class_info.visible = not self.is_ignored(class_info)

        roots = [class_info for class_info in registry if class_info.visible]
        for class_info in roots:
            self._make_bases_visible(registry, class_info)

        visible = sum(1 for class_info in registry if class_info.visible)
        logger.info(f"{visible} of {len(registry)} classes visible")
        return visible

    def _make_bases_visible(self, registry: ClassRegistry, start: ClassInfo) -> None:
        """Mark every class reachable from ``start`` through its bases."""
        visited = {start.address}
        pending = [start]
        while pending:
            current = pending.pop()
            for base in current.bases:
                base_class = registry.resolve(base)
                if base_class is None or base_class.address in visited:
                    continue
                visited.add(base_class.address)
                base_class.visible = True
                pending.append(base_class)
