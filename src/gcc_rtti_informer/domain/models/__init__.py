#!/usr/bin/env python3

"""Domain models for the RTTI informer."""

from . import rtti

__all__ = [
    "rtti",
]
