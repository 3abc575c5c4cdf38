#!/usr/bin/env python3

"""Itanium C++ ABI demangling through the C++ runtime's own demangler."""

from functools import lru_cache

import cxxfilt

from .logging import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=65536)
def demangle(mangled: str) -> str | None:
    """Demangle ``mangled``; None when it is not a valid Itanium symbol."""
    if not mangled.startswith("_Z"):
        return None
    try:
        return cxxfilt.demangle(mangled, external_only=True)
    except cxxfilt.InvalidName:
        return None
