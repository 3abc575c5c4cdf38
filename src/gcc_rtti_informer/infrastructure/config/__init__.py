"""Infrastructure configuration module."""

from .application_config import Config
from .rtti_config import default_ignored_prefixes, get_config, split_prefixes

__all__ = ["Config", "default_ignored_prefixes", "get_config", "split_prefixes"]
