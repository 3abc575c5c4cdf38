#!/usr/bin/env python3

"""Tuning limits for the RTTI scanner."""

import os

DEFAULT_CONFIG = {
    # Regions larger than this are skipped wholesale
    "MAX_REGION_SIZE": 100 * 1024 * 1024,
    # Longest type name read from a typeinfo name string
    "MAX_NAME_LENGTH": 1000,
    # More bases than this marks a __vmi_class_type_info record as corrupt
    "MAX_BASE_COUNT": 100,

    "DEFAULT_IGNORED_PREFIXES": "std,type_info",
}


def get_config() -> dict:
    """Get scanner limits with ``RTTI_<KEY>`` environment variable overrides.

    Returns:
        Configuration dictionary
    """
    config = DEFAULT_CONFIG.copy()

    for key in config:
        env_value = os.getenv(f"RTTI_{key}")
        if env_value is None:
            continue
        if isinstance(config[key], int):
            try:
                config[key] = int(env_value, 0)
            except ValueError:
                pass
        else:
            config[key] = env_value

    return config


def split_prefixes(value: str) -> list[str]:
    """Split a comma separated prefix list, dropping empty entries."""
    return [item.strip() for item in value.split(",") if item.strip()]


def default_ignored_prefixes() -> list[str]:
    """Ignored name prefixes used when the caller configures none."""
    return split_prefixes(get_config()["DEFAULT_IGNORED_PREFIXES"])
