#!/usr/bin/env python3

"""Address-keyed registry of recovered classes."""

from collections.abc import Iterator

from ..models.rtti import BaseRef, ClassInfo


class ClassRegistry:
    """Arena of ClassInfo records with stable, dense ids.

    Classes are created on first reference and never removed; ids follow
    first-discovery order starting at 0. Base edges refer to other classes
    by address, so a base can be referenced before its own record is parsed.
    """

    def __init__(self) -> None:
        self._classes: list[ClassInfo] = []
        self._index: dict[int, int] = {}

    def get_or_create(self, address: int) -> ClassInfo:
        """Return the class for ``address``, creating a placeholder on first use."""
        index = self._index.get(address)
        if index is not None:
            return self._classes[index]

        class_info = ClassInfo(address=address, id=len(self._classes))
        self._index[address] = class_info.id
        self._classes.append(class_info)
        return class_info

    def get(self, address: int) -> ClassInfo | None:
        index = self._index.get(address)
        return None if index is None else self._classes[index]

    def by_id(self, class_id: int) -> ClassInfo:
        return self._classes[class_id]

    def resolve(self, base: BaseRef) -> ClassInfo | None:
        """Class an edge points at, or None for a dangling edge."""
        if base.target is None:
            return None
        return self.get(base.target)

    def named_count(self) -> int:
        """Number of classes whose own type_info record has been parsed."""
        return sum(1 for class_info in self._classes if class_info.name)

    def clear(self) -> None:
        self._classes.clear()
        self._index.clear()

    def __iter__(self) -> Iterator[ClassInfo]:
        return iter(self._classes)

    def __len__(self) -> int:
        return len(self._classes)

    def __contains__(self, address: object) -> bool:
        return address in self._index
