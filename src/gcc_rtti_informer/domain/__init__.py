#!/usr/bin/env python3

"""Domain layer containing the recovery engine and its models."""

from . import models, repositories, services

__all__ = [
    "models",
    "repositories",
    "services",
]
