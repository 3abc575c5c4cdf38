#!/usr/bin/env python3

"""RTTI recovery orchestrator (Application Layer).

Runs one recovery session over a host program:
- MemorySnapshot: one-time capture of the data regions
- TypeInfoScanner: records of the standard type_info classes
- ClassVTableWalker + HierarchyParser: every class of each record layout
- GraphFilter + DotExporter: optional hierarchy graph
"""

from pathlib import Path

from ..domain.models.rtti import ClassLayout, RecoveryResult
from ..domain.repositories import ClassRegistry
from ..domain.services import ProgramImage, SymbolOracle
from ..domain.services.graph import DotExporter, GraphFilter
from ..domain.services.memory import MemorySnapshot
from ..domain.services.recovery import (
    ClassVTableWalker,
    HierarchyParser,
    TypeInfoScanner,
    VTableLocator,
)
from ..infrastructure.logging import ProgressTracker, get_logger, log_timing

logger = get_logger(__name__)


class RttiRecovery:
    """Recovers the class hierarchy of one program.

    A fresh ClassRegistry is created per :meth:`run` and handed to every
    component explicitly; it stays valid after the run so the graph can be
    exported (or exported again) later.
    """

    def __init__(
        self,
        image: ProgramImage,
        oracle: SymbolOracle,
        auxiliary_vtable_names: bool = False,
        max_region_size: int | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            image: Host program image
            oracle: Host symbol services
            auxiliary_vtable_names: Name the first virtual slot of each vtable too
            max_region_size: Per-region capture limit (default from configuration)
        """
        self.image = image
        self.oracle = oracle
        self.auxiliary_vtable_names = auxiliary_vtable_names
        self.max_region_size = max_region_size
        self.result: RecoveryResult | None = None

    @log_timing
    def run(self) -> RecoveryResult:
        """Scan the program and return the populated registry."""
        tracker = ProgressTracker(logger)
        registry = ClassRegistry()

        with tracker.track_operation("capture regions"):
            snapshot = MemorySnapshot.capture(self.image, self.max_region_size)
        for region in snapshot.regions:
            tracker.count_region(region.size)
        tracker.log_memory_usage()

        parser = HierarchyParser(
            snapshot,
            self.oracle,
            registry,
            VTableLocator(snapshot),
            auxiliary_vtable_names=self.auxiliary_vtable_names,
        )
        result = RecoveryResult(registry, skipped_regions=list(snapshot.skipped_regions))

        logger.info("Looking for standard type info classes")
        with tracker.track_operation("standard type_info records"):
            result.type_info_records = TypeInfoScanner(snapshot, self.oracle, parser).scan()

        walker = ClassVTableWalker(snapshot, self.oracle, parser)
        for layout in ClassLayout:
            logger.info(f"Looking for {layout.description}")
            with tracker.track_operation(layout.description):
                count = walker.handle_classes(layout)
            result.classes_per_layout[layout] = count
            tracker.count_records(count)

        tracker.report_summary(len(registry))
        logger.info(f"Success, found {len(registry)} classes ({registry.named_count()} named)")

        self.result = result
        return result

    def export_graph(
        self,
        registry: ClassRegistry,
        output_path: Path,
        ignored_prefixes: list[str] | None = None,
    ) -> bool:
        """Filter ``registry`` and write it as a DOT graph.

        Returns:
            True on success, False if the file could not be written
        """
        GraphFilter(ignored_prefixes).apply(registry)
        exporter = DotExporter(self.image.pointer_size)
        try:
            exporter.write(registry, output_path)
        except OSError as e:
            logger.error(f"Unable to write graph to {output_path}: {e}")
            return False
        return True
