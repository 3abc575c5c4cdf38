"""Pytest configuration and shared fixtures."""

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from gcc_rtti_informer.domain.repositories import ClassRegistry
from gcc_rtti_informer.infrastructure.logging import LoggerSetup

from tests.program_builder import ProgramBuilder

ENVIRONMENT_KEYS = (
    "RTTI_BINARY_PATH",
    "RTTI_OUTPUT_PATH",
    "RTTI_IGNORED_PREFIXES",
    "RTTI_GENERATE_GRAPH",
    "RTTI_AUXILIARY_VTABLE_NAMES",
    "RTTI_MAX_REGION_SIZE",
    "RTTI_MAX_NAME_LENGTH",
    "RTTI_MAX_BASE_COUNT",
    "RTTI_DEFAULT_IGNORED_PREFIXES",
    "VERBOSE",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own configuration out of the tests."""
    for key in ENVIRONMENT_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def builder() -> ProgramBuilder:
    """64-bit little-endian program builder."""
    return ProgramBuilder()


@pytest.fixture
def registry() -> ClassRegistry:
    return ClassRegistry()


@pytest.fixture
def isolated_root_logger() -> Iterator[logging.Logger]:
    """Remove the handlers LoggerSetup installs once the test is done."""
    root = logging.getLogger()
    level = root.level
    LoggerSetup.reset()
    yield root
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    LoggerSetup.reset()
