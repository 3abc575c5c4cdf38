"""GCC RTTI Informer - C++ class hierarchy recovery from Itanium ABI RTTI."""

from .application import RttiRecovery
from .domain.repositories import ClassRegistry
from .infrastructure.config import Config
from .main import main

__all__ = ["ClassRegistry", "Config", "RttiRecovery", "main"]
