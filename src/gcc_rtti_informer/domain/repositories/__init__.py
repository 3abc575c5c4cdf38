#!/usr/bin/env python3

"""Repositories holding recovered data for the length of a run."""

from .class_registry import ClassRegistry

__all__ = [
    "ClassRegistry",
]
