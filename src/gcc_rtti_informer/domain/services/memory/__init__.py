#!/usr/bin/env python3

"""Memory access for the recovery engine."""

from .bits import bad_address_sentinel, sign_extend, sign_extend_24, split_offset_flags
from .snapshot import SCANNED_KINDS, MemorySnapshot

__all__ = [
    "MemorySnapshot",
    "SCANNED_KINDS",
    "bad_address_sentinel",
    "sign_extend",
    "sign_extend_24",
    "split_offset_flags",
]
