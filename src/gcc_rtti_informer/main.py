"""Main entry point for the GCC RTTI informer."""

import argparse
import sys
import traceback
from pathlib import Path
from typing import NoReturn

from .application import RttiRecovery
from .domain.models.rtti import ClassLayout
from .infrastructure.config import Config, split_prefixes
from .infrastructure.elf_program import ElfProgram
from .infrastructure.logging import LoggerSetup, get_logger, log_timing


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Recover C++ class hierarchies from the RTTI of GCC-built ELF binaries "
        "and export them as a Graphviz DOT graph",
        epilog="""
Examples:
  # Recover classes and write output/<binary>_classes.dot
  gcc-rtti-informer bin/server

  # Choose the output file
  gcc-rtti-informer bin/server -o graphs/server.dot

  # Show standard library classes too (empty ignore list)
  gcc-rtti-informer bin/server --ignore ""

  # Hide more namespaces
  gcc-rtti-informer bin/server --ignore std,type_info,boost,__gnu_cxx

  # Read ignored prefixes from a file (one per line, '#' comments)
  gcc-rtti-informer bin/server --ignore-file ignored.txt

  # Only log the recovered classes, no graph
  gcc-rtti-informer bin/server --no-graph --verbose

  # Using .env file for configuration
  echo 'RTTI_BINARY_PATH=bin/server' > .env
  gcc-rtti-informer
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "binary",
        type=Path,
        nargs="?",
        help="Path to the ELF binary to analyze (optional if using .env)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="DOT file to write (default: output/<binary>_classes.dot)",
    )
    ignore_group = parser.add_mutually_exclusive_group()
    ignore_group.add_argument(
        "--ignore",
        type=str,
        metavar="PREFIXES",
        help="Comma-separated class name prefixes hidden from the graph unless a "
        "shown class derives from them (default: 'std,type_info')",
    )
    ignore_group.add_argument(
        "--ignore-file",
        type=Path,
        metavar="FILE",
        help="Read ignored prefixes from file (one prefix per line)",
    )
    parser.add_argument(
        "--no-graph",
        action="store_true",
        help="Recover classes without writing the graph",
    )
    parser.add_argument(
        "--auxiliary-vtable-names",
        action="store_true",
        help="Also name the first virtual function slot of each vtable (<vtable>_0)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output with debug logs",
    )
    return parser.parse_args(argv)


def read_prefix_file(path: Path) -> list[str]:
    """Read ignored prefixes, skipping blank lines and '#' comments."""
    prefixes = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                prefixes.append(line)
    return prefixes


@log_timing
def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for RTTI recovery and graph export."""
    args = parse_args(argv)

    ignored_prefixes = None
    try:
        if args.ignore is not None:
            ignored_prefixes = split_prefixes(args.ignore)
        elif args.ignore_file is not None:
            ignored_prefixes = read_prefix_file(args.ignore_file)

        config = Config.from_args(
            binary_path=args.binary,
            output_path=args.output,
            ignored_prefixes=ignored_prefixes,
            generate_graph=False if args.no_graph else None,
            auxiliary_vtable_names=True if args.auxiliary_vtable_names else None,
            verbose=True if args.verbose else None,
        )
        binary_path = config.validate()
    except (OSError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    LoggerSetup.initialize(config.log_dir, verbose=config.verbose)
    logger = get_logger(__name__)

    logger.debug(f"Binary: {binary_path}")
    logger.debug(f"Ignored prefixes: {config.ignored_prefixes}")

    try:
        with ElfProgram(binary_path) as program:
            recovery = RttiRecovery(
                program,
                program,
                auxiliary_vtable_names=config.auxiliary_vtable_names,
            )
            result = recovery.run()

            logger.info("=" * 70)
            logger.info("RECOVERY SUMMARY")
            logger.info("=" * 70)
            for layout in ClassLayout:
                count = result.classes_per_layout.get(layout, 0)
                logger.info(f"{layout.description.capitalize()}: {count}")
            logger.info(f"Total classes: {result.class_count}")
            if result.skipped_regions:
                logger.info(f"Skipped regions: {', '.join(result.skipped_regions)}")

            if config.verbose:
                for class_info in result.registry:
                    bases = ", ".join(
                        base_class.display_name
                        for base_class in map(result.registry.resolve, class_info.bases)
                        if base_class is not None
                    )
                    logger.debug(f"  a{class_info.id} {class_info.display_name}: [{bases}]")

            if not config.generate_graph:
                sys.exit(0)

            output_path = config.resolved_output_path()
            if not recovery.export_graph(result.registry, output_path, config.ignored_prefixes):
                sys.exit(1)

    except Exception as e:
        logger.error(f"Fatal error during recovery: {e}")
        if config.verbose:
            traceback.print_exc()
        sys.exit(1)

    logger.debug("Main program completed successfully")
    sys.exit(0)


if __name__ == "__main__":
    main()
