"""Run configuration for the RTTI informer."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ...utils.path_utils import create_graph_filename
from .rtti_config import default_ignored_prefixes, split_prefixes

_TRUE_VALUES = ("true", "1", "yes", "on")


@dataclass
class Config:
    """Configuration for one recovery run.

    Interactive questions of a disassembler host (export or not, ignored
    prefixes, output path) arrive here already answered.
    """

    binary_path: Optional[Path]
    output_path: Optional[Path] = None
    generate_graph: bool = True
    ignored_prefixes: list[str] = field(default_factory=default_ignored_prefixes)
    auxiliary_vtable_names: bool = False
    verbose: bool = False
    log_dir: Optional[Path] = Path("logs")

    @classmethod
    def from_env(cls, env_path: Optional[Path] = None) -> "Config":
        """
        Load configuration from environment variables or a .env file.

        Args:
            env_path: Optional path to .env file (defaults to .env in current directory)

        Returns:
            Config object
        """
        if env_path is None:
            env_path = Path.cwd() / ".env"

        if env_path.exists():
            load_dotenv(env_path)

        binary_path_str = os.getenv("RTTI_BINARY_PATH")
        output_path_str = os.getenv("RTTI_OUTPUT_PATH")
        prefixes_str = os.getenv("RTTI_IGNORED_PREFIXES")

        config = cls(
            binary_path=Path(binary_path_str) if binary_path_str else None,
            output_path=Path(output_path_str) if output_path_str else None,
            generate_graph=os.getenv("RTTI_GENERATE_GRAPH", "true").lower() in _TRUE_VALUES,
            auxiliary_vtable_names=(
                os.getenv("RTTI_AUXILIARY_VTABLE_NAMES", "false").lower() in _TRUE_VALUES
            ),
            verbose=os.getenv("VERBOSE", "false").lower() in _TRUE_VALUES,
        )
        if prefixes_str is not None:
            config.ignored_prefixes = split_prefixes(prefixes_str)

        return config

    @classmethod
    def from_args(
        cls,
        binary_path: Optional[Path] = None,
        output_path: Optional[Path] = None,
        ignored_prefixes: Optional[list[str]] = None,
        generate_graph: Optional[bool] = None,
        auxiliary_vtable_names: Optional[bool] = None,
        verbose: Optional[bool] = None,
    ) -> "Config":
        """
        Create configuration from explicit arguments, falling back to environment.

        Arguments left as None keep the environment value.

        Returns:
            Config object
        """
        config = cls.from_env()

        if binary_path is not None:
            config.binary_path = binary_path
        if output_path is not None:
            config.output_path = output_path
        if ignored_prefixes is not None:
            config.ignored_prefixes = list(ignored_prefixes)
        if generate_graph is not None:
            config.generate_graph = generate_graph
        if auxiliary_vtable_names is not None:
            config.auxiliary_vtable_names = auxiliary_vtable_names
        if verbose is not None:
            config.verbose = verbose

        return config

    def validate(self) -> Path:
        """
        Validate the configuration.

        Returns:
            The binary to analyze

        Raises:
            ValueError: If configuration is invalid
        """
        if self.binary_path is None:
            raise ValueError("No binary given (pass a path or set RTTI_BINARY_PATH)")

        if not self.binary_path.exists():
            raise ValueError(f"Binary not found: {self.binary_path}")

        if not self.binary_path.is_file():
            raise ValueError(f"Not a file: {self.binary_path}")

        if self.output_path is not None and self.output_path.is_dir():
            raise ValueError(f"Output path is a directory: {self.output_path}")

        return self.binary_path

    def resolved_output_path(self) -> Path:
        """Path the graph is written to, derived from the binary name when unset."""
        if self.output_path is not None:
            return self.output_path
        if self.binary_path is None:
            raise ValueError("Cannot derive an output path without a binary")
        return Path("output") / create_graph_filename(self.binary_path.name)

    def ensure_output_dir(self) -> None:
        """Create the directory holding the graph file if it doesn't exist."""
        self.resolved_output_path().parent.mkdir(parents=True, exist_ok=True)

    def ensure_log_dir(self) -> None:
        """Create the log directory if it doesn't exist."""
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
