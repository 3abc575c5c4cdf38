#!/usr/bin/env python3

"""Domain services layer."""

from . import graph, memory, recovery
from .interfaces import ProgramImage, SymbolOracle

__all__ = [
    "ProgramImage",
    "SymbolOracle",
    "graph",
    "memory",
    "recovery",
]
