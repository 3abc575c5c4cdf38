#!/usr/bin/env python3

"""Application layer orchestrating recovery runs."""

from .rtti_recovery import RttiRecovery

__all__ = [
    "RttiRecovery",
]
